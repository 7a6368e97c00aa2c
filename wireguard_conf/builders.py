"""Fluent builders for Interface and Peer.

``build()`` never fails: anything not set gets a default (a fresh random
private key, the ``0.0.0.0/0`` "no address" sentinel, empty lists). No
cross-field checks happen here; derivation and ``AmneziaSettings.validate()``
report invalid combinations when they are used.
"""
import copy
import ipaddress
from typing import Iterable, List, Optional, Union

from .amnezia import AmneziaSettings
from .keys import PresharedKey, PrivateKey, PublicKey
from .models import UNSPECIFIED_ADDRESS, Interface, Peer, PeerKey, Table, as_ipnet, as_ipnets
from .render import IpNet

_SINGLE_VALUE_TYPES = (
    str,
    ipaddress.IPv4Interface,
    ipaddress.IPv6Interface,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
)


def _as_list(value) -> list:
    # networks are iterable, so test for single values first
    if isinstance(value, _SINGLE_VALUE_TYPES) or not isinstance(value, Iterable):
        return [value]
    return list(value)


class InterfaceBuilder:
    def __init__(self) -> None:
        self._address: Optional[List[IpNet]] = None
        self._listen_port: Optional[int] = None
        self._private_key: Optional[PrivateKey] = None
        self._dns: List[str] = []
        self._endpoint: Optional[str] = None
        self._table: Optional[Table] = None
        self._mtu: Optional[int] = None
        self._amnezia_settings: Optional[AmneziaSettings] = None
        self._pre_up: List[str] = []
        self._pre_down: List[str] = []
        self._post_up: List[str] = []
        self._post_down: List[str] = []
        self._peers: List[Peer] = []

    def address(self, networks) -> "InterfaceBuilder":
        """Replace the address list. A single network is accepted too."""
        self._address = as_ipnets(_as_list(networks))
        return self

    def add_network(self, network) -> "InterfaceBuilder":
        if self._address is None:
            self._address = []
        self._address.append(as_ipnet(network))
        return self

    def add_address(self, address) -> "InterfaceBuilder":
        """Add a single host address; it is stored as /32 or /128."""
        net = as_ipnet(address)
        return self.add_network(f"{net.ip}/{net.max_prefixlen}")

    def listen_port(self, port: int) -> "InterfaceBuilder":
        self._listen_port = port
        return self

    def private_key(self, key: PrivateKey) -> "InterfaceBuilder":
        self._private_key = key
        return self

    def dns(self, servers: Iterable[str]) -> "InterfaceBuilder":
        self._dns = list(servers)
        return self

    def add_dns(self, server: str) -> "InterfaceBuilder":
        self._dns.append(server)
        return self

    def endpoint(self, endpoint: str) -> "InterfaceBuilder":
        self._endpoint = endpoint
        return self

    def table(self, table: Union[Table, int, str]) -> "InterfaceBuilder":
        self._table = Table.parse(table)
        return self

    def mtu(self, mtu: int) -> "InterfaceBuilder":
        self._mtu = mtu
        return self

    def amnezia_settings(self, settings: AmneziaSettings) -> "InterfaceBuilder":
        self._amnezia_settings = settings
        return self

    def pre_up(self, snippets: Iterable[str]) -> "InterfaceBuilder":
        self._pre_up = list(snippets)
        return self

    def add_pre_up(self, snippet: str) -> "InterfaceBuilder":
        self._pre_up.append(snippet)
        return self

    def pre_down(self, snippets: Iterable[str]) -> "InterfaceBuilder":
        self._pre_down = list(snippets)
        return self

    def add_pre_down(self, snippet: str) -> "InterfaceBuilder":
        self._pre_down.append(snippet)
        return self

    def post_up(self, snippets: Iterable[str]) -> "InterfaceBuilder":
        self._post_up = list(snippets)
        return self

    def add_post_up(self, snippet: str) -> "InterfaceBuilder":
        self._post_up.append(snippet)
        return self

    def post_down(self, snippets: Iterable[str]) -> "InterfaceBuilder":
        self._post_down = list(snippets)
        return self

    def add_post_down(self, snippet: str) -> "InterfaceBuilder":
        self._post_down.append(snippet)
        return self

    def peers(self, peers: Iterable[Peer]) -> "InterfaceBuilder":
        self._peers = list(peers)
        return self

    def add_peer(self, peer: Peer) -> "InterfaceBuilder":
        self._peers.append(peer)
        return self

    def build(self) -> Interface:
        private_key = copy.copy(self._private_key) if self._private_key is not None else PrivateKey.random()
        return Interface(
            address=list(self._address) if self._address is not None else [UNSPECIFIED_ADDRESS],
            listen_port=self._listen_port,
            private_key=private_key,
            dns=list(self._dns),
            endpoint=self._endpoint,
            table=self._table,
            mtu=self._mtu,
            amnezia_settings=copy.deepcopy(self._amnezia_settings),
            pre_up=list(self._pre_up),
            pre_down=list(self._pre_down),
            post_up=list(self._post_up),
            post_down=list(self._post_down),
            peers=copy.deepcopy(self._peers),
        )


class PeerBuilder:
    def __init__(self) -> None:
        self._endpoint: Optional[str] = None
        self._allowed_ips: List[IpNet] = []
        self._persistent_keepalive: int = 0
        self._key: Optional[PeerKey] = None
        self._preshared_key: Optional[PresharedKey] = None
        self._amnezia_settings: Optional[AmneziaSettings] = None

    def endpoint(self, endpoint: str) -> "PeerBuilder":
        self._endpoint = endpoint
        return self

    def allowed_ips(self, networks) -> "PeerBuilder":
        self._allowed_ips = as_ipnets(_as_list(networks))
        return self

    def add_allowed_ip(self, network) -> "PeerBuilder":
        self._allowed_ips.append(as_ipnet(network))
        return self

    def add_allowed_address(self, address) -> "PeerBuilder":
        net = as_ipnet(address)
        return self.add_allowed_ip(f"{net.ip}/{net.max_prefixlen}")

    def persistent_keepalive(self, seconds: int) -> "PeerBuilder":
        self._persistent_keepalive = seconds
        return self

    def key(self, key: PeerKey) -> "PeerBuilder":
        if not isinstance(key, (PrivateKey, PublicKey)):
            raise TypeError(f"peer key must be PrivateKey or PublicKey, not {type(key).__name__}")
        self._key = key
        return self

    def private_key(self, key: PrivateKey) -> "PeerBuilder":
        if not isinstance(key, PrivateKey):
            raise TypeError(f"expected PrivateKey, not {type(key).__name__}")
        return self.key(key)

    def public_key(self, key: PublicKey) -> "PeerBuilder":
        if not isinstance(key, PublicKey):
            raise TypeError(f"expected PublicKey, not {type(key).__name__}")
        return self.key(key)

    def preshared_key(self, key: PresharedKey) -> "PeerBuilder":
        self._preshared_key = key
        return self

    def amnezia_settings(self, settings: AmneziaSettings) -> "PeerBuilder":
        self._amnezia_settings = settings
        return self

    def build(self) -> Peer:
        key = copy.copy(self._key) if self._key is not None else PrivateKey.random()
        return Peer(
            endpoint=self._endpoint,
            allowed_ips=list(self._allowed_ips),
            persistent_keepalive=self._persistent_keepalive,
            key=key,
            preshared_key=copy.copy(self._preshared_key),
            amnezia_settings=copy.deepcopy(self._amnezia_settings),
        )
