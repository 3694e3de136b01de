"""Sealkey runtime services."""

from sealkey.runtime.passphrase import (
    default_passphrase_source,
    env_passphrase,
    prompt_passphrase,
    static_passphrase,
)

__all__ = [
    "default_passphrase_source",
    "env_passphrase",
    "prompt_passphrase",
    "static_passphrase",
]
