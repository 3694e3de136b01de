"""sealkey command line entry point.

    sealkey generate-key-pair [--output-key-prefix cosign]
    sealkey public-key --key cosign.key

Passphrases come from SEALKEY_PASSWORD when set, otherwise from a prompt.
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from sealkey.primitives.errors import KeyEnvelopeError
from sealkey.primitives.keys import generate_key_pair
from sealkey.primitives.loader import load_private_key_with
from sealkey.primitives.pem import decode_pem
from sealkey.runtime.passphrase import default_passphrase_source


def print_result(result: Dict) -> None:
    """Write a verb's outcome to stdout as indented JSON."""
    print(json.dumps(result, indent=2, default=str))


def die(msg: str, code: int = 1) -> None:
    """Report msg as 'error: ...' on stderr and stop with a non-zero status."""
    print(f"error: {msg}", file=sys.stderr)
    sys.exit(code)


def _write_key_file(path: Path, data: bytes, mode: int) -> None:
    path.write_bytes(data)
    os.chmod(path, mode)


def _generate_key_pair(args) -> None:
    prefix = Path(args.output_key_prefix)
    private_path = prefix.with_name(prefix.name + ".key")
    public_path = prefix.with_name(prefix.name + ".pub")
    if not args.force:
        for path in (private_path, public_path):
            if path.exists():
                die(f"{path} already exists (use --force to overwrite)")

    keys = generate_key_pair(default_passphrase_source())

    try:
        private_path.parent.mkdir(parents=True, exist_ok=True)
        _write_key_file(private_path, keys.private_bytes, 0o600)
        _write_key_file(public_path, keys.public_bytes, 0o644)
    except OSError as e:
        die(f"writing key files: {e}")

    print_result({
        "success": True,
        "private_key": str(private_path),
        "public_key": str(public_path),
        "type": decode_pem(keys.private_bytes).type.value,
    })


def _public_key(args) -> None:
    key_path = Path(args.key)
    try:
        key = key_path.read_bytes()
    except FileNotFoundError:
        die(f"key file not found: {key_path}")
    except OSError as e:
        die(f"reading {key_path}: {e}")

    signer = load_private_key_with(key, default_passphrase_source())
    sys.stdout.write(signer.public_key_pem().decode("ascii"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sealkey",
        description="Generate and load passphrase-encrypted signing keys",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="verb", required=True)

    p = sub.add_parser("generate-key-pair", help="Generate an encrypted ECDSA P-256 key pair")
    p.add_argument("--output-key-prefix", default="cosign",
                   help="Write <prefix>.key and <prefix>.pub (default: cosign)")
    p.add_argument("--force", action="store_true",
                   help="Overwrite an existing private key file")
    p.set_defaults(handler=_generate_key_pair)

    p = sub.add_parser("public-key", help="Print the public key of an encrypted private key")
    p.add_argument("--key", required=True, help="Path to the encrypted private key")
    p.set_defaults(handler=_public_key)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="[%(name)s] %(levelname)s: %(message)s",
            stream=sys.stderr,
        )

    try:
        args.handler(args)
    except KeyEnvelopeError as e:
        die(str(e))


if __name__ == "__main__":
    main()
