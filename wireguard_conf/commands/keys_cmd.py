import argparse
import sys

from ..errors import InvalidKey
from ..keys import PresharedKey, PrivateKey


def add_keys_cmds(subparsers: argparse._SubParsersAction) -> None:
    g = subparsers.add_parser(
        "genkey",
        help="Generate a private key",
        description="Print a new random private key in base64, like `wg genkey`.",
    )
    g.set_defaults(func=run_genkey_cmd)

    p = subparsers.add_parser(
        "pubkey",
        help="Derive a public key from a private key",
        description="Read a base64 private key (from --key or stdin) and print its public key.",
    )
    p.add_argument("--key", default=None, help="Private key; read from stdin when omitted")
    p.set_defaults(func=run_pubkey_cmd)

    psk = subparsers.add_parser(
        "genpsk",
        help="Generate a preshared key",
        description="Print a new random preshared key in base64, like `wg genpsk`.",
    )
    psk.set_defaults(func=run_genpsk_cmd)


def run_genkey_cmd(args: argparse.Namespace) -> int:
    with PrivateKey.random() as key:
        print(key)
    return 0


def run_pubkey_cmd(args: argparse.Namespace) -> int:
    text = getattr(args, "key", None)
    if text is None:
        text = sys.stdin.read()
    try:
        key = PrivateKey.from_base64(text.strip())
    except InvalidKey as e:
        print(f"Failed to read key: {e}", file=sys.stderr)
        return 2
    with key:
        print(key.public_key())
    return 0


def run_genpsk_cmd(args: argparse.Namespace) -> int:
    with PresharedKey.random() as key:
        print(key)
    return 0
