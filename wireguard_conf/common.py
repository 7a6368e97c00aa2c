import os
import sys
from typing import Optional, Tuple

from .errors import WireguardError
from .network import NetworkConfig

DEFAULT_CONFIG = "network.yml"


def resolve_config_path(args) -> str:
    path = getattr(args, "config", None) or os.environ.get("WGCONF_CONFIG") or DEFAULT_CONFIG
    return path


def require_and_load_config(args) -> Tuple[Optional[NetworkConfig], Optional[str]]:
    path = resolve_config_path(args)
    if not os.path.exists(path):
        print(f"Config file not found: {path}", file=sys.stderr)
        return None, None
    try:
        cfg = NetworkConfig.read_file(path)
    except (OSError, ValueError, WireguardError) as e:
        print(f"Failed to parse config: {e}", file=sys.stderr)
        return None, None
    return cfg, path


def write_private_file(path: str, text: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass
