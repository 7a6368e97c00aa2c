import argparse
import os
import sys

from ..common import require_and_load_config, write_private_file
from ..errors import WireguardError
from ..network import NetworkConfig
import qrcode
from qrcode.image.styledpil import StyledPilImage
from qrcode.image.styles.moduledrawers import RoundedModuleDrawer
from qrcode.image.styles.colormasks import HorizontalGradiantColorMask


def add_emit_configs_cmd(subparsers: argparse._SubParsersAction) -> None:
    c = subparsers.add_parser(
        "emit-configs",
        help="Emit WireGuard configs (server/clients) based on the network file",
        description="Generate WireGuard configuration files under server and clients paths relative to the network file.",
    )
    c.add_argument("-c", "--config", default=os.environ.get("WGCONF_CONFIG", "network.yml"), help="Path to config file")
    group = c.add_mutually_exclusive_group()
    group.add_argument("--only-server", action="store_true", help="Emit only server config")
    group.add_argument("--only-clients", action="store_true", help="Emit only client configs")
    qr = c.add_mutually_exclusive_group()
    qr.add_argument("--qr", dest="qr", action="store_true", default=None, help="Force QR generation ON")
    qr.add_argument("--no-qr", dest="qr", action="store_false", help="Force QR generation OFF")
    gw = c.add_mutually_exclusive_group()
    gw.add_argument("--default-gateway", dest="default_gateway", action="store_true", default=None,
                    help="Route all client traffic through the server")
    gw.add_argument("--no-default-gateway", dest="default_gateway", action="store_false")
    c.add_argument("--persistent-keepalive", type=int, default=None, help="Override client keepalive (seconds)")
    c.set_defaults(func=run_emit_configs_cmd)


def run_emit_configs_cmd(args: argparse.Namespace) -> int:
    cfg, cfg_path = require_and_load_config(args)
    if cfg is None or cfg_path is None:
        return 2

    # Determine which to emit
    emit_server = True
    emit_clients = True
    if getattr(args, "only_server", False):
        emit_clients = False
    if getattr(args, "only_clients", False):
        emit_server = False

    # Resolve overrides (guard for tests constructing SimpleNamespace)
    qr_arg = getattr(args, "qr", None)
    qr_emit = cfg.emit_qr if qr_arg is None else bool(qr_arg)
    cfg.options.apply_args_overrides(args)

    rc = 0
    try:
        if emit_server:
            rc |= _emit_server(cfg, cfg_path)
        if emit_clients:
            rc |= _emit_clients(cfg, cfg_path, qr_emit=qr_emit)
    except OSError as e:
        print(f"Failed to write configs: {e}", file=sys.stderr)
        return 2
    return rc


def _emit_server(cfg: NetworkConfig, cfg_path: str) -> int:
    server_dir = cfg.resolve_server_dir(cfg_path)
    os.makedirs(server_dir, exist_ok=True)
    out_path = os.path.join(server_dir, f"{cfg.name}.conf")
    write_private_file(out_path, str(cfg.server_interface()))
    return 0


def _emit_clients(cfg: NetworkConfig, cfg_path: str, *, qr_emit: bool) -> int:
    clients_dir = cfg.resolve_clients_dir(cfg_path)
    os.makedirs(clients_dir, exist_ok=True)
    server = cfg.server_interface()
    rc = 0
    for c in cfg.clients:
        if not c.enabled:
            continue
        try:
            iface = c.peer.to_interface(server, cfg.options)
        except WireguardError as e:
            print(f"Skipping client '{c.name}': {e}", file=sys.stderr)
            rc |= 1
            continue
        text = str(iface)
        write_private_file(os.path.join(clients_dir, f"{c.name}.conf"), text)
        if qr_emit:
            _write_qr(text, os.path.join(clients_dir, f"{c.name}.png"))
    return rc


def _write_qr(text: str, img_path: str) -> None:
    qr = qrcode.QRCode(error_correction=qrcode.constants.ERROR_CORRECT_Q)
    qr.add_data(text)
    qr.make(fit=True)
    # Left (purple) -> right (blue) gradient with rounded modules
    color_mask = HorizontalGradiantColorMask(
        back_color=(255, 255, 255),
        left_color=(128, 0, 255),
        right_color=(0, 123, 255),
    )
    img = qr.make_image(
        image_factory=StyledPilImage,
        module_drawer=RoundedModuleDrawer(),
        color_mask=color_mask,
    )
    img.save(img_path)
