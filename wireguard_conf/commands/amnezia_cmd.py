import argparse
import sys

from ..amnezia import AmneziaSettings
from ..errors import InvalidAmneziaSetting


def add_amnezia_cmd(subparsers: argparse._SubParsersAction) -> None:
    amn = subparsers.add_parser(
        "amnezia",
        help="Generate AmneziaWG obfuscation values",
        description="Print a validated AmneziaWG block. Values not given are picked at random in the recommended ranges.",
    )
    for k in ("jc", "jmin", "jmax", "s1", "s2", "h1", "h2", "h3", "h4"):
        amn.add_argument(f"--{k}", type=int, default=None)
    for k in ("i1", "i2", "i3", "i4", "i5"):
        amn.add_argument(f"--{k}", default=None)
    amn.set_defaults(func=run_amnezia_cmd)


def run_amnezia_cmd(args: argparse.Namespace) -> int:
    settings = AmneziaSettings.random()
    settings.apply_args_overrides(args)
    try:
        settings.validate()
    except InvalidAmneziaSetting as e:
        print(f"Invalid AmneziaWG settings: {e}", file=sys.stderr)
        return 2
    sys.stdout.write(str(settings))
    return 0
