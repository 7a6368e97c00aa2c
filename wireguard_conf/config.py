from dataclasses import dataclass
from typing import List, Mapping, Optional


ENV_PREFIX = "WGCONF_"


@dataclass()
class ToInterfaceOptions:
    """Options for deriving a peer's own interface (``Peer.to_interface``).

    ``default_gateway`` routes everything through the reference node: the
    derived interface's only peer gets ``0.0.0.0/0`` and/or ``::/0`` as allowed
    IPs, depending on which address families were assigned.
    ``persistent_keepalive`` is applied to that peer when non-zero.
    """

    default_gateway: bool = False
    persistent_keepalive: int = 0

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "ToInterfaceOptions":
        r = EnvReader(env)
        return cls(
            default_gateway=r.get_bool("DEFAULT_GATEWAY", False),
            persistent_keepalive=r.get_int("PERSISTENT_KEEPALIVE", 0),
        )

    def apply_args_overrides(self, args: object) -> None:
        if getattr(args, "default_gateway", None) is not None:
            self.default_gateway = bool(getattr(args, "default_gateway"))
        if getattr(args, "persistent_keepalive", None) is not None:
            self.persistent_keepalive = int(getattr(args, "persistent_keepalive"))


class EnvReader:
    def __init__(self, env: Mapping[str, str], prefix: str = ENV_PREFIX) -> None:
        self._env = env
        self._prefix = prefix

    def with_prefix(self, more: str) -> "EnvReader":
        return EnvReader(self._env, self._prefix + more)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._env.get(self._prefix + key, default)

    def get_bool(self, key: str, default: bool) -> bool:
        val = self._env.get(self._prefix + key)
        if val is None:
            return default
        val_lower = val.strip().lower()
        if val_lower in {"1", "true", "yes", "y", "on"}:
            return True
        if val_lower in {"0", "false", "no", "n", "off"}:
            return False
        return default

    def get_int(self, key: str, default: int) -> int:
        val = self._env.get(self._prefix + key)
        if val is None:
            return default
        try:
            return int(val)
        except ValueError:
            return default

    def get_list(self, key: str, default: Optional[List[str]] = None) -> List[str]:
        val = self._env.get(self._prefix + key)
        if val is None:
            return list(default or [])
        return parse_list(val)


def parse_list(value: str) -> List[str]:
    """Split a comma or newline separated value, dropping blanks."""
    parts = [p.strip() for p in value.replace("\n", ",").split(",")]
    return [p for p in parts if p]
