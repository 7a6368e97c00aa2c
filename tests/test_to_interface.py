import pytest

from wireguard_conf import (
    AmneziaSettings,
    InterfaceBuilder,
    NoAssignedIP,
    NoPrivateKeyProvided,
    PeerBuilder,
    PresharedKey,
    PrivateKey,
    PublicKey,
    Table,
    ToInterfaceOptions,
    as_ipnet,
    derive_interface_from_peer,
    derive_peer_from_interface,
)


def make_server(*addresses):
    return (
        InterfaceBuilder()
        .address(list(addresses))
        .listen_port(51820)
        .dns(["1.1.1.1", "1.0.0.1"])
        .endpoint("vpn.example.com:51820")
        .table(Table.OFF)
        .mtu(1420)
        .post_up(["iptables -A FORWARD -i %i -j ACCEPT"])
        .amnezia_settings(AmneziaSettings.random())
        .build()
    )


def test_to_peer_exports_identity_only():
    server = make_server("10.0.0.1/24")
    peer = server.to_peer()
    assert peer.endpoint == "vpn.example.com:51820"
    assert peer.allowed_ips == server.address
    assert peer.key == server.private_key
    assert peer.key is not server.private_key
    assert peer.persistent_keepalive == 0
    assert peer.preshared_key is None
    assert peer.amnezia_settings == server.amnezia_settings
    assert derive_peer_from_interface(server) == peer


def test_expect_no_private_key_provided():
    server = make_server("10.0.0.1/24")
    client = (
        PeerBuilder()
        .public_key(PublicKey.from_private(PrivateKey.random()))
        .allowed_ips(["10.0.0.2/32"])
        .build()
    )
    with pytest.raises(NoPrivateKeyProvided):
        client.to_interface(server, ToInterfaceOptions())


def test_expect_no_assigned_ip_v4():
    server = make_server("10.0.0.1/24")
    client = PeerBuilder().allowed_ips(["1.3.3.7/32"]).build()
    with pytest.raises(NoAssignedIP):
        client.to_interface(server)


def test_expect_no_assigned_ip_v6():
    server = make_server("fd00:1111:1111::1/48")
    client = PeerBuilder().allowed_ips(["fd00:2222:2222::1/128"]).build()
    with pytest.raises(NoAssignedIP):
        client.to_interface(server)


def test_mixed_families_never_match():
    server = make_server("::/0")
    client = PeerBuilder().allowed_ips(["10.0.0.2/32"]).build()
    with pytest.raises(NoAssignedIP):
        client.to_interface(server)


def test_peer_without_allowed_ips_fails():
    with pytest.raises(NoAssignedIP):
        PeerBuilder().build().to_interface(make_server("10.0.0.1/24"))


def test_assigned_address_takes_reference_prefix():
    server = make_server("fd3d:1209:d994::1/48", "10.0.0.1/24")
    key = PrivateKey.random()
    client = (
        PeerBuilder()
        .allowed_ips(["fd3d:1209:d994::2/128", "10.0.0.2/32", "192.168.0.1/32"])
        .private_key(key)
        .persistent_keepalive(15)
        .preshared_key(PresharedKey.random())
        .build()
    )
    iface = client.to_interface(server)

    # 192.168.0.1 is outside every server network and is dropped
    assert iface.address == [as_ipnet("fd3d:1209:d994::2/48"), as_ipnet("10.0.0.2/24")]
    assert iface.private_key == key
    assert iface.dns == ["1.1.1.1", "1.0.0.1"]
    assert iface.endpoint is None
    assert iface.listen_port is None
    assert iface.table is None
    assert iface.mtu is None
    assert iface.pre_up == [] and iface.pre_down == []
    assert iface.post_up == [] and iface.post_down == []
    assert iface.amnezia_settings is None

    assert len(iface.peers) == 1
    server_peer = iface.peers[0]
    assert server_peer == server.to_peer()
    assert server_peer.allowed_ips == [as_ipnet("fd3d:1209:d994::1/48"), as_ipnet("10.0.0.1/24")]
    assert server_peer.persistent_keepalive == 0
    assert server_peer.preshared_key is None


def test_first_containing_network_wins():
    server = make_server("10.0.0.1/16", "10.0.0.1/24")
    client = PeerBuilder().allowed_ips(["10.0.0.2/32"]).build()
    assert client.to_interface(server).address == [as_ipnet("10.0.0.2/16")]


def test_amnezia_settings_come_from_the_peer():
    server = make_server("10.0.0.1/24")
    own = AmneziaSettings.random()
    client = PeerBuilder().allowed_ips(["10.0.0.2/32"]).amnezia_settings(own).build()
    assert client.to_interface(server).amnezia_settings == own


def test_default_gateway_ipv4():
    server = make_server("10.0.0.1/24")
    client = PeerBuilder().allowed_ips(["10.0.0.2/24"]).build()
    iface = client.to_interface(server, ToInterfaceOptions(default_gateway=True))
    assert iface.peers[0].allowed_ips == [as_ipnet("0.0.0.0/0")]


def test_default_gateway_ipv6():
    server = make_server("fd00::1/48")
    client = PeerBuilder().allowed_ips(["fd00::2/128"]).build()
    iface = client.to_interface(server, ToInterfaceOptions(default_gateway=True))
    assert iface.peers[0].allowed_ips == [as_ipnet("::/0")]


def test_default_gateway_ipv4_and_ipv6():
    server = make_server("fd00::1/48", "10.0.0.1/24")
    client = PeerBuilder().allowed_ips(["fd00::2/128", "10.0.0.2/24"]).build()
    iface = client.to_interface(server, ToInterfaceOptions(default_gateway=True))
    assert iface.peers[0].allowed_ips == [as_ipnet("0.0.0.0/0"), as_ipnet("::/0")]


def test_persistent_keepalive_option():
    server = make_server("10.0.0.1/24")
    client = PeerBuilder().allowed_ips(["10.0.0.2/32"]).build()
    iface = derive_interface_from_peer(client, server, ToInterfaceOptions(persistent_keepalive=25))
    assert iface.peers[0].persistent_keepalive == 25
    assert client.to_interface(server).peers[0].persistent_keepalive == 0


def test_derivation_is_deterministic():
    server = make_server("10.0.0.1/24")
    client = PeerBuilder().allowed_ips(["10.0.0.2/32"]).build()
    options = ToInterfaceOptions(default_gateway=True, persistent_keepalive=25)
    assert client.to_interface(server, options) == client.to_interface(server, options)


def test_derived_interface_is_independent():
    server = make_server("10.0.0.1/24")
    client = PeerBuilder().allowed_ips(["10.0.0.2/32"]).build()
    iface = client.to_interface(server)
    iface.dispose()
    assert server.private_key.as_bytes() != bytes(32)
    assert client.key.as_bytes() != bytes(32)


def test_rederiving_recovers_reference_addresses():
    server = make_server("10.0.0.1/24", "fd00::1/64")
    client = PeerBuilder().allowed_ips(["10.0.0.2/32", "fd00::2/128"]).build()
    client_iface = client.to_interface(server)

    # The re-exported server peer derives back into the server's own networks
    again = client_iface.peers[0].to_interface(client_iface)
    assert again.address == server.address
    assert again.private_key == server.private_key
