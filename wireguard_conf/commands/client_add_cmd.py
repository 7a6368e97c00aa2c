import argparse
import os
import sys
from datetime import datetime, timezone

from ..common import require_and_load_config
from ..keys import PresharedKey, PrivateKey
from ..network import Client
from ..models import Peer


def add_client_add_cmd(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "client-add",
        help="Add a new client (auto-populated settings)",
        description="Adds a client with a generated key, preshared key, and the next available IP in the server subnet.",
    )
    p.add_argument("name", help="Client name")
    p.add_argument("-c", "--config", default=os.environ.get("WGCONF_CONFIG", "network.yml"), help="Path to config file")
    p.add_argument("--no-psk", dest="psk", action="store_false", default=True, help="Do not generate a preshared key")
    p.set_defaults(func=run_client_add_cmd)


def run_client_add_cmd(args: argparse.Namespace) -> int:
    cfg, cfg_path = require_and_load_config(args)
    if cfg is None or cfg_path is None:
        return 2

    name = args.name.strip()
    if not name:
        print("Client name must be non-empty", file=sys.stderr)
        return 2
    if cfg.get_client(name) is not None:
        print(f"Client '{name}' already exists", file=sys.stderr)
        return 2

    address = cfg.next_client_address()
    if address is None:
        print("No available IP addresses in the server subnet", file=sys.stderr)
        return 2

    peer = Peer(
        allowed_ips=[address],
        key=PrivateKey.random(),
        preshared_key=PresharedKey.random() if getattr(args, "psk", True) else None,
    )
    cfg.clients.append(
        Client(name=name, peer=peer, created_at=datetime.now(timezone.utc).isoformat())
    )
    # Validate and write
    errs = cfg.validate()
    if errs:
        for e in errs:
            print(f"- {e}", file=sys.stderr)
        return 2
    try:
        cfg.write_file(cfg_path, overwrite=True)
    except OSError as e:
        print(f"Failed to write config: {e}", file=sys.stderr)
        return 2
    print(f"Client '{name}' added with address {address.ip}")
    return 0
