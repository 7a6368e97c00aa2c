import pytest
import yaml

from wireguard_conf import (
    AmneziaSettings,
    InterfaceBuilder,
    InvalidPrivateKey,
    PeerBuilder,
    PresharedKey,
    PrivateKey,
    PublicKey,
    Table,
)
from wireguard_conf.serde import (
    amnezia_from_dict,
    amnezia_to_dict,
    dump_yaml,
    interface_from_dict,
    interface_to_dict,
    load_yaml,
    peer_from_dict,
    peer_to_dict,
    table_from_value,
)


def make_interface():
    client = (
        PeerBuilder()
        .allowed_ips(["10.0.0.2/32", "fd00::2/128"])
        .preshared_key(PresharedKey.random())
        .persistent_keepalive(25)
        .build()
    )
    remote = PeerBuilder().endpoint("1.2.3.4:51820").public_key(PrivateKey.random().public_key()).build()
    return (
        InterfaceBuilder()
        .address(["10.0.0.1/24", "fd00::1/64"])
        .listen_port(51820)
        .dns(["1.1.1.1"])
        .endpoint("vpn.example.com")
        .table(1234)
        .mtu(1420)
        .amnezia_settings(AmneziaSettings(jc=4, jmin=40, jmax=70, s1=20, s2=30, h1=1, h2=2, h3=3, h4=4, i5="x"))
        .post_up(["echo up"])
        .post_down(["echo down"])
        .peers([client, remote])
        .build()
    )


def test_interface_roundtrip_through_yaml():
    iface = make_interface()
    text = dump_yaml(interface_to_dict(iface))
    loaded = interface_from_dict(load_yaml(text))
    assert loaded == iface
    assert str(loaded) == str(iface)


def test_interface_roundtrip_binary_keys():
    iface = make_interface()
    data = interface_to_dict(iface, human_readable=False)
    assert data["private-key"] == iface.private_key.as_bytes()
    assert data["peers"][1]["public-key"] == iface.peers[1].key.as_bytes()
    assert interface_from_dict(data) == iface


def test_interface_mapping_layout():
    iface = make_interface()
    data = interface_to_dict(iface)
    assert data["address"] == ["10.0.0.1/24", "fd00::1/64"]
    assert data["private-key"] == iface.private_key.to_base64()
    assert data["table"] == 1234
    assert data["amnezia"]["Jc"] == 4
    assert data["amnezia"]["I5"] == "x"
    assert "I1" not in data["amnezia"]
    assert "pre-up" not in data
    assert data["peers"][0]["allowed-ips"] == ["10.0.0.2/32", "fd00::2/128"]
    assert "private-key" in data["peers"][0]
    assert "public-key" in data["peers"][1]


def test_interface_from_minimal_mapping():
    iface = interface_from_dict({})
    assert not iface.has_address
    assert iface.peers == []
    assert iface.table is None


@pytest.mark.parametrize(
    "value,expected",
    [(False, Table.OFF), ("off", Table.OFF), ("auto", Table.AUTO), (7, Table.routing_table(7)), ("42", Table(42))],
)
def test_table_from_value(value, expected):
    assert table_from_value(value) == expected


def test_table_off_survives_yaml():
    iface = InterfaceBuilder().table(Table.OFF).build()
    loaded = interface_from_dict(yaml.safe_load("table: off\nprivate-key: " + iface.private_key.to_base64()))
    assert loaded.table == Table.OFF


@pytest.mark.parametrize("value", [True, "sometimes", -1])
def test_table_from_invalid_value(value):
    with pytest.raises(ValueError):
        table_from_value(value)


def test_peer_requires_exactly_one_key():
    priv = PrivateKey.random()
    with pytest.raises(ValueError):
        peer_from_dict({"allowed-ips": ["10.0.0.2/32"]})
    with pytest.raises(ValueError):
        peer_from_dict(
            {
                "allowed-ips": ["10.0.0.2/32"],
                "private-key": priv.to_base64(),
                "public-key": priv.public_key().to_base64(),
            }
        )


def test_peer_with_public_key():
    pub = PublicKey.from_private(PrivateKey.random())
    peer = peer_from_dict({"allowed-ips": "10.0.0.2/32", "public-key": pub.to_base64()})
    assert peer.key == pub
    assert not peer.has_private_key
    assert peer_to_dict(peer) == {"allowed-ips": ["10.0.0.2/32"], "public-key": pub.to_base64()}


def test_peer_bad_key_raises():
    with pytest.raises(InvalidPrivateKey):
        peer_from_dict({"private-key": "not a key"})
    with pytest.raises(InvalidPrivateKey):
        peer_from_dict({"private-key": 12})


def test_amnezia_requires_all_fields():
    data = amnezia_to_dict(AmneziaSettings.random())
    del data["H3"]
    with pytest.raises(ValueError, match="H3"):
        amnezia_from_dict(data)


def test_amnezia_rejects_non_integer():
    data = amnezia_to_dict(AmneziaSettings.random())
    data["Jc"] = "many"
    with pytest.raises(ValueError, match="Jc"):
        amnezia_from_dict(data)


def test_load_yaml_rejects_non_mapping():
    with pytest.raises(ValueError):
        load_yaml("- a\n- b\n")
