"""Text rendering of the WireGuard config grammar.

Output is consumed by wg-quick style parsers, so line order, the ``Key = value``
spacing and the bare-comma list joins are part of the format.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Union
import ipaddress

from .keys import PublicKey

if TYPE_CHECKING:
    from .amnezia import AmneziaSettings
    from .models import Interface, Peer

IpNet = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]

AMNEZIA_FIELDS = (
    ("Jc", "jc"),
    ("Jmin", "jmin"),
    ("Jmax", "jmax"),
    ("S1", "s1"),
    ("S2", "s2"),
    ("H1", "h1"),
    ("H2", "h2"),
    ("H3", "h3"),
    ("H4", "h4"),
)
AMNEZIA_OPTIONAL_FIELDS = (
    ("I1", "i1"),
    ("I2", "i2"),
    ("I3", "i3"),
    ("I4", "i4"),
    ("I5", "i5"),
)


def format_address(net: IpNet) -> str:
    """Render a network, dropping the suffix of single-host /32 and /128 networks."""
    if net.network.prefixlen == net.max_prefixlen:
        return str(net.ip)
    return net.with_prefixlen


def render_amnezia(settings: AmneziaSettings) -> str:
    lines: list[str] = []
    for key, attr in AMNEZIA_FIELDS:
        lines.append(f"{key} = {getattr(settings, attr)}\n")
    for key, attr in AMNEZIA_OPTIONAL_FIELDS:
        val = getattr(settings, attr)
        if val is not None:
            lines.append(f"{key} = {val}\n")
    return "".join(lines)


def render_peer(peer: Peer) -> str:
    lines: list[str] = []
    lines.append("[Peer]\n")
    if peer.endpoint is not None:
        lines.append(f"Endpoint = {peer.endpoint}\n")
    allowed = ",".join(net.with_prefixlen for net in peer.allowed_ips)
    lines.append(f"AllowedIPs = {allowed}\n")
    public_key = peer.key if isinstance(peer.key, PublicKey) else PublicKey.from_private(peer.key)
    lines.append(f"PublicKey = {public_key}\n")
    if peer.preshared_key is not None:
        lines.append(f"PresharedKey = {peer.preshared_key}\n")
    if peer.persistent_keepalive:
        lines.append(f"PersistentKeepalive = {int(peer.persistent_keepalive)}\n")
    return "".join(lines)


def render_interface(interface: Interface) -> str:
    lines: list[str] = []
    lines.append("[Interface]\n")
    if interface.endpoint is not None:
        lines.append(f"# Name = {interface.endpoint}\n")
    address = ",".join(format_address(net) for net in interface.address)
    lines.append(f"Address = {address}\n")
    if interface.listen_port is not None:
        lines.append(f"ListenPort = {int(interface.listen_port)}\n")
    lines.append(f"PrivateKey = {interface.private_key}\n")
    if interface.dns:
        lines.append(f"DNS = {','.join(interface.dns)}\n")
    if interface.table is not None:
        lines.append(f"Table = {interface.table}\n")
    if interface.mtu is not None:
        lines.append(f"MTU = {int(interface.mtu)}\n")

    # Hooks
    for key, snippets in (
        ("PreUp", interface.pre_up),
        ("PreDown", interface.pre_down),
        ("PostUp", interface.post_up),
        ("PostDown", interface.post_down),
    ):
        if snippets:
            lines.append("\n")
            for snippet in snippets:
                lines.append(f"{key} = {snippet}\n")

    if interface.amnezia_settings is not None:
        lines.append("\n")
        lines.append(render_amnezia(interface.amnezia_settings))

    for peer in interface.peers:
        lines.append("\n")
        lines.append(render_peer(peer))
        lines.append("\n")
    return "".join(lines)
