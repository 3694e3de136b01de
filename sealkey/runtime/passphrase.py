"""Passphrase sources.

Each factory returns a callable taking confirm: bool and returning the
passphrase as bytes. confirm=True is used when creating a key, so that
interactive sources can ask twice.
"""

import getpass
import logging
import os
from typing import Callable, Optional

from sealkey.constants import PASSWORD_ENV_VAR
from sealkey.primitives.errors import PassphraseCallbackFailed
from sealkey.primitives.keys import PassFunc

logger = logging.getLogger(__name__)


def static_passphrase(value) -> PassFunc:
    """Always return value."""
    password = value.encode("utf-8") if isinstance(value, str) else bytes(value)

    def _pass_func(confirm: bool) -> bytes:
        return password

    return _pass_func


def env_passphrase(var: str = PASSWORD_ENV_VAR) -> PassFunc:
    """Read the passphrase from an environment variable at call time.

    An empty value is allowed; an unset variable is an error.
    """

    def _pass_func(confirm: bool) -> bytes:
        value = os.environ.get(var)
        if value is None:
            raise PassphraseCallbackFailed(f"environment variable {var} is not set")
        return value.encode("utf-8")

    return _pass_func


def prompt_passphrase(
    prompt: Callable[[str], str] = getpass.getpass,
) -> PassFunc:
    """Ask for the passphrase interactively.

    Args:
        prompt: Function that displays a prompt and returns the typed text.
    """

    def _pass_func(confirm: bool) -> bytes:
        try:
            first = prompt("Enter password for private key: ")
            if confirm:
                second = prompt("Enter password for private key again: ")
                if first != second:
                    raise PassphraseCallbackFailed("passwords do not match")
        except (EOFError, KeyboardInterrupt) as e:
            raise PassphraseCallbackFailed("passphrase entry cancelled", cause=e) from e
        return first.encode("utf-8")

    return _pass_func


def default_passphrase_source(
    var: str = PASSWORD_ENV_VAR,
    prompt: Optional[Callable[[str], str]] = None,
) -> PassFunc:
    """Environment variable when set, interactive prompt otherwise."""
    if var in os.environ:
        logger.debug("Using passphrase from %s", var)
        return env_passphrase(var)
    return prompt_passphrase(prompt or getpass.getpass)
