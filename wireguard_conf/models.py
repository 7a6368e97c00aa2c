import copy
import ipaddress
from dataclasses import dataclass, field
from functools import singledispatch
from typing import ClassVar, Iterable, List, Optional, Union

from .amnezia import AmneziaSettings
from .config import ToInterfaceOptions
from .errors import NoAssignedIP, NoPrivateKeyProvided
from .keys import PresharedKey, PrivateKey, PublicKey
from .render import IpNet, render_amnezia, render_interface, render_peer

PeerKey = Union[PrivateKey, PublicKey]

# "No address configured" sentinel for interfaces built without an address
UNSPECIFIED_ADDRESS = ipaddress.IPv4Interface("0.0.0.0/0")
DEFAULT_ROUTE_V4 = ipaddress.IPv4Interface("0.0.0.0/0")
DEFAULT_ROUTE_V6 = ipaddress.IPv6Interface("::/0")


def as_ipnet(value: Union[str, IpNet, ipaddress.IPv4Address, ipaddress.IPv6Address]) -> IpNet:
    """Coerce ``value`` into an address-with-prefix.

    ``"10.0.0.1/24"`` keeps its host bits; a bare address such as ``"1.2.3.4"``
    becomes ``1.2.3.4/32`` (``/128`` for IPv6).
    """
    if isinstance(value, (ipaddress.IPv4Interface, ipaddress.IPv6Interface)):
        return value
    if isinstance(value, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return ipaddress.ip_interface(value.with_prefixlen)
    return ipaddress.ip_interface(str(value).strip())


def as_ipnets(values: Iterable) -> List[IpNet]:
    return [as_ipnet(v) for v in values]


@dataclass(frozen=True)
class Table:
    """Routing table selector: a table number, ``off`` or ``auto``."""

    value: Union[int, str] = "auto"

    OFF: ClassVar["Table"]
    AUTO: ClassVar["Table"]

    def __post_init__(self) -> None:
        if isinstance(self.value, bool):
            raise ValueError(f"invalid routing table: {self.value!r}")
        if isinstance(self.value, int):
            if self.value < 0:
                raise ValueError(f"routing table must be non-negative: {self.value}")
        elif self.value not in ("off", "auto"):
            raise ValueError(f"invalid routing table: {self.value!r}")

    @classmethod
    def routing_table(cls, number: int) -> "Table":
        return cls(int(number))

    @classmethod
    def parse(cls, value: Union[int, str, "Table"]) -> "Table":
        if isinstance(value, Table):
            return value
        if isinstance(value, int):
            return cls(value)
        text = str(value).strip().lower()
        if text.isdigit():
            return cls(int(text))
        return cls(text)

    @property
    def is_routing_table(self) -> bool:
        return isinstance(self.value, int)

    def __str__(self) -> str:
        return str(self.value)


Table.OFF = Table("off")
Table.AUTO = Table("auto")


@dataclass()
class Peer:
    """A ``[Peer]`` section.

    ``key`` is either a PrivateKey (the peer's own identity is known and an
    Interface can be derived for it) or a PublicKey (only the remote side is
    known).
    """

    endpoint: Optional[str] = None
    allowed_ips: List[IpNet] = field(default_factory=list)
    persistent_keepalive: int = 0
    key: PeerKey = field(default_factory=PrivateKey.random)
    preshared_key: Optional[PresharedKey] = None
    amnezia_settings: Optional[AmneziaSettings] = None

    def __post_init__(self) -> None:
        self.allowed_ips = as_ipnets(self.allowed_ips)

    @classmethod
    def builder(cls):
        from .builders import PeerBuilder

        return PeerBuilder()

    @property
    def has_private_key(self) -> bool:
        return isinstance(self.key, PrivateKey)

    @property
    def public_key(self) -> PublicKey:
        if isinstance(self.key, PrivateKey):
            return PublicKey.from_private(self.key)
        return self.key

    def to_interface(self, reference: "Interface", options: Optional[ToInterfaceOptions] = None) -> "Interface":
        """Build this peer's own Interface from the Interface it is a peer of.

        Each allowed IP that lies inside one of ``reference.address`` networks
        becomes an address of the new interface with the reference network's
        prefix length. Allowed IPs outside every reference network are dropped.

        Raises NoPrivateKeyProvided when the peer only holds a public key and
        NoAssignedIP when no allowed IP lies inside the reference networks.
        """
        if not isinstance(self.key, PrivateKey):
            raise NoPrivateKeyProvided()
        options = options or ToInterfaceOptions()

        assigned: List[IpNet] = []
        for allowed_ip in self.allowed_ips:
            for reference_net in reference.address:
                if _contains(reference_net, allowed_ip):
                    assigned.append(
                        ipaddress.ip_interface(f"{allowed_ip.ip}/{reference_net.network.prefixlen}")
                    )
                    break

        if not assigned:
            raise NoAssignedIP()

        interface = Interface(
            address=assigned,
            listen_port=None,
            private_key=copy.copy(self.key),
            dns=list(reference.dns),
            endpoint=None,
            table=None,
            mtu=None,
            amnezia_settings=copy.deepcopy(self.amnezia_settings),
            peers=[reference.to_peer()],
        )

        if options.default_gateway:
            routes: List[IpNet] = []
            if any(net.version == 4 for net in assigned):
                routes.append(DEFAULT_ROUTE_V4)
            if any(net.version == 6 for net in assigned):
                routes.append(DEFAULT_ROUTE_V6)
            interface.peers[0].allowed_ips = routes

        if options.persistent_keepalive:
            interface.peers[0].persistent_keepalive = int(options.persistent_keepalive)

        return interface

    def dispose(self) -> None:
        """Wipe the key material held by this peer."""
        self.key.wipe()
        if self.preshared_key is not None:
            self.preshared_key.wipe()

    def __str__(self) -> str:
        return render_peer(self)


@dataclass()
class Interface:
    """A complete config: the ``[Interface]`` section plus its peers.

    ``endpoint`` is rendered as a ``# Name`` comment and becomes the
    ``Endpoint`` of the peer exported by ``to_peer()``.
    """

    address: List[IpNet] = field(default_factory=lambda: [UNSPECIFIED_ADDRESS])
    listen_port: Optional[int] = None
    private_key: PrivateKey = field(default_factory=PrivateKey.random)
    dns: List[str] = field(default_factory=list)
    endpoint: Optional[str] = None
    table: Optional[Table] = None
    mtu: Optional[int] = None
    amnezia_settings: Optional[AmneziaSettings] = None
    pre_up: List[str] = field(default_factory=list)
    pre_down: List[str] = field(default_factory=list)
    post_up: List[str] = field(default_factory=list)
    post_down: List[str] = field(default_factory=list)
    peers: List[Peer] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.address = as_ipnets(self.address)
        if self.table is not None:
            self.table = Table.parse(self.table)

    @classmethod
    def builder(cls):
        from .builders import InterfaceBuilder

        return InterfaceBuilder()

    @property
    def public_key(self) -> PublicKey:
        return PublicKey.from_private(self.private_key)

    @property
    def has_address(self) -> bool:
        return any(net != UNSPECIFIED_ADDRESS for net in self.address)

    def to_peer(self) -> Peer:
        """Export this node as a peer of some other interface.

        Keepalive and preshared key describe a relationship between two nodes,
        so the exported peer carries neither.
        """
        return Peer(
            endpoint=self.endpoint,
            allowed_ips=list(self.address),
            persistent_keepalive=0,
            key=copy.copy(self.private_key),
            preshared_key=None,
            amnezia_settings=copy.deepcopy(self.amnezia_settings),
        )

    def dispose(self) -> None:
        """Wipe the key material held by this interface and its peers."""
        self.private_key.wipe()
        for peer in self.peers:
            peer.dispose()

    def __str__(self) -> str:
        return render_interface(self)


def _contains(outer: IpNet, inner: IpNet) -> bool:
    if outer.version != inner.version:
        return False
    return inner.network.subnet_of(outer.network)


def derive_peer_from_interface(interface: Interface) -> Peer:
    return interface.to_peer()


def derive_interface_from_peer(
    peer: Peer, reference: Interface, options: Optional[ToInterfaceOptions] = None
) -> Interface:
    return peer.to_interface(reference, options)


@singledispatch
def to_text(entity) -> str:
    raise TypeError(f"cannot render {type(entity).__name__}")


to_text.register(Interface, render_interface)
to_text.register(Peer, render_peer)
to_text.register(AmneziaSettings, render_amnezia)
