import copy
import ipaddress
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .config import EnvReader, ToInterfaceOptions, parse_list
from .errors import InvalidAmneziaSetting, WireguardError
from .keys import PrivateKey
from .models import Interface, Peer, as_ipnet, as_ipnets
from .render import IpNet
from .serde import dump_yaml, interface_from_dict, interface_to_dict, load_yaml, peer_from_dict, peer_to_dict


@dataclass()
class Client:
    """A named peer of the server. Its private key lets us emit its own config."""

    name: str
    peer: Peer
    enabled: bool = True
    created_at: Optional[str] = None

    def validate(self) -> List[str]:
        errs: List[str] = []
        if not self.name:
            errs.append("name must be non-empty")
        elif not _valid_file_name(self.name):
            errs.append(f"name invalid: {self.name}")
        if not self.peer.allowed_ips:
            errs.append("allowed-ips must be non-empty")
        if self.peer.persistent_keepalive < 0 or self.peer.persistent_keepalive > 65535:
            errs.append(f"persistent-keepalive out of range: {self.peer.persistent_keepalive}")
        if self.peer.amnezia_settings is not None:
            try:
                self.peer.amnezia_settings.validate()
            except InvalidAmneziaSetting as e:
                errs.append(f"amnezia.{e.field} invalid")
        return errs


@dataclass()
class NetworkConfig:
    """One server interface and its named clients, as stored in the YAML file."""

    name: str = "wg0"
    server_path: str = "server"
    clients_path: str = "clients"
    emit_qr: bool = True
    options: ToInterfaceOptions = field(default_factory=ToInterfaceOptions)
    interface: Interface = field(default_factory=Interface)
    clients: List[Client] = field(default_factory=list)

    # File IO
    @classmethod
    def read_file(cls, path: str) -> "NetworkConfig":
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
        return parse_network_config(load_yaml(text))

    def write_file(self, path: str, overwrite: bool = False) -> None:
        if os.path.exists(path) and not overwrite:
            raise FileExistsError(f"Refusing to overwrite existing file: {path}")
        parent = os.path.dirname(os.path.abspath(path))
        if parent and not os.path.exists(parent):
            os.makedirs(parent, exist_ok=True)
        text = dump_yaml(to_yaml_dict(self))
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        try:
            os.chmod(path, 0o600)
        except OSError:
            pass

    # Paths resolution relative to the config file location
    def resolve_server_dir(self, config_path: str) -> str:
        base = os.path.dirname(os.path.abspath(config_path))
        return os.path.abspath(os.path.join(base, self.server_path))

    def resolve_clients_dir(self, config_path: str) -> str:
        base = os.path.dirname(os.path.abspath(config_path))
        return os.path.abspath(os.path.join(base, self.clients_path))

    def get_client(self, name: str) -> Optional[Client]:
        return next((c for c in self.clients if c.name == name), None)

    def server_interface(self) -> Interface:
        """The server's interface with every enabled client appended as a peer."""
        iface = copy.deepcopy(self.interface)
        iface.peers.extend(copy.deepcopy(c.peer) for c in self.clients if c.enabled)
        return iface

    def client_interface(self, name: str) -> Interface:
        client = self.get_client(name)
        if client is None:
            raise KeyError(name)
        return client.peer.to_interface(self.server_interface(), self.options)

    def next_client_address(self) -> Optional[IpNet]:
        """First host of the server's first network not used by the server or a client."""
        if not self.interface.has_address:
            return None
        server_net = self.interface.address[0]
        used = {net.ip for net in self.interface.address}
        for c in self.clients:
            used.update(net.ip for net in c.peer.allowed_ips)
        for host in server_net.network.hosts():
            if host not in used:
                return as_ipnet(f"{host}/{server_net.max_prefixlen}")
        return None

    # Validation
    def validate(self) -> List[str]:
        errs: List[str] = []
        if not self.name:
            errs.append("name must be non-empty")
        elif not _valid_file_name(self.name):
            errs.append(f"name invalid: {self.name}")
        if not self.clients_path:
            errs.append("clients_path must be non-empty")
        if not self.server_path:
            errs.append("server_path must be non-empty")
        if self.options.persistent_keepalive < 0 or self.options.persistent_keepalive > 65535:
            errs.append(f"persistent-keepalive out of range: {self.options.persistent_keepalive}")

        errs.extend(_validate_interface(self.interface))

        seen_names: set[str] = set()
        seen_ips: set[IpNet] = set()
        server = self.server_interface()
        for idx, c in enumerate(self.clients):
            for e in c.validate():
                errs.append(f"clients[{idx}].{e}")
            if c.name in seen_names:
                errs.append(f"clients[{idx}].name duplicated: {c.name}")
            seen_names.add(c.name)
            for net in c.peer.allowed_ips:
                if net in seen_ips:
                    errs.append(f"clients[{idx}].allowed-ips duplicated: {net.with_prefixlen}")
                seen_ips.add(net)
                if any(net.ip == own.ip for own in self.interface.address):
                    errs.append(f"clients[{idx}].allowed-ips equals server address: {net.ip}")
            if not c.enabled:
                continue
            if not c.peer.has_private_key:
                errs.append(f"clients[{idx}].private-key required to emit client config")
                continue
            try:
                c.peer.to_interface(server, self.options)
            except WireguardError as e:
                errs.append(f"clients[{idx}] cannot derive interface: {e}")
        return errs

    def validate_or_raise(self) -> None:
        errs = self.validate()
        if errs:
            raise ValueError("Config validation failed:\n- " + "\n- ".join(errs))

    # Fill from env/args
    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "NetworkConfig":
        r = EnvReader(env)
        priv = r.get("PRIVATE_KEY")
        iface = Interface(
            address=as_ipnets(r.get_list("ADDRESS", ["10.10.10.1/24"])),
            listen_port=r.get_int("LISTEN_PORT", 51820),
            private_key=PrivateKey.from_base64(priv) if priv else PrivateKey.random(),
            dns=r.get_list("DNS", ["1.1.1.1", "8.8.8.8"]),
            endpoint=r.get("ENDPOINT"),
            mtu=r.get_int("MTU", 0) or None,
            pre_up=r.get_list("PRE_UP"),
            pre_down=r.get_list("PRE_DOWN"),
            post_up=r.get_list("POST_UP"),
            post_down=r.get_list("POST_DOWN"),
        )
        return cls(
            name=r.get("NAME", "wg0") or "wg0",
            server_path=r.get("SERVER_PATH", "server") or "server",
            clients_path=r.get("CLIENTS_PATH", "clients") or "clients",
            emit_qr=r.get_bool("EMIT_QR", True),
            options=ToInterfaceOptions.from_env(env),
            interface=iface,
        )

    def apply_args_overrides(self, args: object) -> None:
        if getattr(args, "name", None) is not None:
            self.name = str(getattr(args, "name"))
        if getattr(args, "server_path", None) is not None:
            self.server_path = str(getattr(args, "server_path"))
        if getattr(args, "clients_path", None) is not None:
            self.clients_path = str(getattr(args, "clients_path"))
        if getattr(args, "emit_qr", None) is not None:
            self.emit_qr = bool(getattr(args, "emit_qr"))
        self.options.apply_args_overrides(args)
        iface = self.interface
        if getattr(args, "address", None) is not None:
            iface.address = as_ipnets(parse_list(getattr(args, "address")))
        if getattr(args, "listen_port", None) is not None:
            iface.listen_port = int(getattr(args, "listen_port"))
        if getattr(args, "private_key", None) is not None:
            iface.private_key = PrivateKey.from_base64(getattr(args, "private_key"))
        if getattr(args, "dns", None) is not None:
            iface.dns = parse_list(getattr(args, "dns"))
        if getattr(args, "endpoint", None) is not None:
            iface.endpoint = getattr(args, "endpoint") or None
        if getattr(args, "mtu", None) is not None:
            iface.mtu = int(getattr(args, "mtu")) or None


def _validate_interface(iface: Interface) -> List[str]:
    errs: List[str] = []
    if not iface.has_address:
        errs.append("interface.address must be set")
    if iface.listen_port is not None and not 1 <= iface.listen_port <= 65535:
        errs.append(f"interface.listen-port out of range: {iface.listen_port}")
    if iface.mtu is not None and not 576 <= iface.mtu <= 9000:
        errs.append(f"interface.mtu out of range: {iface.mtu}")
    for d in iface.dns:
        if not _valid_host_or_ip(d):
            errs.append(f"interface.dns contains invalid entry: {d}")
    if iface.amnezia_settings is not None:
        try:
            iface.amnezia_settings.validate()
        except InvalidAmneziaSetting as e:
            errs.append(f"interface.amnezia.{e.field} invalid")
    return errs


def _valid_file_name(name: str) -> bool:
    return re.fullmatch(r"[A-Za-z0-9_.=+-]+", name) is not None


def _valid_host_or_ip(value: str) -> bool:
    # Accept IPs
    try:
        ipaddress.ip_address(value)
        return True
    except ValueError:
        pass
    # Accept hostnames and search domains: RFC 1035-like dot-separated labels
    if len(value) > 253:
        return False
    label_re = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")
    parts = value.split(".")
    if any(not part for part in parts):
        return False
    return all(label_re.match(part) for part in parts)


def to_yaml_dict(cfg: NetworkConfig) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": cfg.name,
        "server-path": cfg.server_path,
        "clients-path": cfg.clients_path,
        "emit-qr": cfg.emit_qr,
        "default-gateway": cfg.options.default_gateway,
        "persistent-keepalive": int(cfg.options.persistent_keepalive),
        "interface": interface_to_dict(cfg.interface),
    }
    clients_yaml: List[Dict[str, Any]] = []
    for c in cfg.clients:
        item: Dict[str, Any] = {"name": c.name, "enabled": bool(c.enabled)}
        item.update(peer_to_dict(c.peer))
        if c.created_at is not None:
            item["created-at"] = c.created_at
        clients_yaml.append(item)
    data["clients"] = clients_yaml
    return data


def parse_network_config(data: Dict[str, Any]) -> NetworkConfig:
    options = ToInterfaceOptions(
        default_gateway=bool(data.get("default-gateway", False)),
        persistent_keepalive=int(data.get("persistent-keepalive", 0) or 0),
    )
    iface_map = data.get("interface")
    interface = interface_from_dict(iface_map) if iface_map is not None else Interface()

    raw_clients = data.get("clients") or []
    if not isinstance(raw_clients, list):
        raise ValueError("clients must be a list")
    clients: List[Client] = []
    for item in raw_clients:
        if not isinstance(item, dict):
            raise ValueError("clients entries must be mappings")
        clients.append(
            Client(
                name=str(item.get("name", "")),
                peer=peer_from_dict(item),
                enabled=bool(item.get("enabled", True)),
                created_at=str(item["created-at"]) if item.get("created-at") is not None else None,
            )
        )
    return NetworkConfig(
        name=str(data.get("name", "wg0")),
        server_path=str(data.get("server-path", "server")),
        clients_path=str(data.get("clients-path", "clients")),
        emit_qr=bool(data.get("emit-qr", True)),
        options=options,
        interface=interface,
        clients=clients,
    )
