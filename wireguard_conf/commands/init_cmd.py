import argparse
import os
import sys

from ..amnezia import AmneziaSettings
from ..errors import WireguardError
from ..network import NetworkConfig


def add_init_cmd(subparsers: argparse._SubParsersAction) -> None:
    init = subparsers.add_parser(
        "init",
        help="Generate an initial network file (no clients)",
        description="Generate an initial network YAML (no clients). Values can come from env (WGCONF_*) and flags.",
    )

    # Output and global paths
    init.add_argument(
        "-o",
        "--output",
        default=os.environ.get("WGCONF_CONFIG", "network.yml"),
        help="Path to write the generated file (env: WGCONF_CONFIG). Default: network.yml",
    )
    init.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite output file if it exists",
    )

    init.add_argument("--name", default=None, help="Interface name, used for the server file name (env: WGCONF_NAME).")
    init.add_argument("--clients-path", default=None,
                      help="Relative path to clients directory (env: WGCONF_CLIENTS_PATH).")
    init.add_argument("--server-path", default=None, help="Relative path to server directory (env: WGCONF_SERVER_PATH).")

    emit_qr_group = init.add_mutually_exclusive_group()
    emit_qr_group.add_argument("--emit-qr", dest="emit_qr", action="store_true", default=None, help="Emit QR codes")
    emit_qr_group.add_argument("--no-emit-qr", dest="emit_qr", action="store_false", help="Disable QR emission")
    init.set_defaults(emit_qr=None)

    # Client derivation options
    gw = init.add_mutually_exclusive_group()
    gw.add_argument("--default-gateway", dest="default_gateway", action="store_true", default=None,
                    help="Route all client traffic through the server")
    gw.add_argument("--no-default-gateway", dest="default_gateway", action="store_false")
    init.set_defaults(default_gateway=None)
    init.add_argument("--persistent-keepalive", type=int, default=None)

    # Interface block
    iface = init.add_argument_group("interface")
    iface.add_argument("--address", default=None, help="Comma-separated CIDRs (env: WGCONF_ADDRESS)")
    iface.add_argument("--listen-port", type=int, default=None)
    iface.add_argument("--private-key", default=None)
    iface.add_argument("--dns", default=None, help="Comma-separated resolvers (env: WGCONF_DNS)")
    iface.add_argument("--endpoint", default=None, help="Public host:port clients connect to")
    iface.add_argument("--mtu", type=int, default=None)
    iface.add_argument("--amnezia", action="store_true", default=False,
                       help="Add random AmneziaWG obfuscation values")

    init.set_defaults(func=run_init_cmd)


def run_init_cmd(args: argparse.Namespace) -> int:
    out_path = args.output
    if os.path.exists(out_path) and not getattr(args, "overwrite", False):
        print(f"Refusing to overwrite existing file: {out_path}. Use --overwrite to replace.", file=sys.stderr)
        return 2

    try:
        cfg = NetworkConfig.from_env(os.environ)
        cfg.apply_args_overrides(args)
    except (ValueError, WireguardError) as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2
    if getattr(args, "amnezia", False):
        cfg.interface.amnezia_settings = AmneziaSettings.random()

    errs = cfg.validate()
    if errs:
        print("Config validation failed:", file=sys.stderr)
        for e in errs:
            print(f"- {e}", file=sys.stderr)
        return 2

    try:
        cfg.write_file(out_path, overwrite=getattr(args, "overwrite", False))
    except OSError as e:
        print(f"Failed to write config: {e}", file=sys.stderr)
        return 2
    print(f"Config written to {out_path}")
    return 0
