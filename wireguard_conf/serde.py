"""Structured encode/decode of the entity model.

Mappings use kebab-case keys, as the YAML files do. Keys are written as base64
text in human readable output and as raw bytes otherwise; both forms are read
back.
"""
from typing import Any, Dict, List, Optional, Type

import yaml  # type: ignore

from .amnezia import AmneziaSettings
from .keys import PresharedKey, PrivateKey, PublicKey, _Key
from .models import Interface, Peer, Table, as_ipnets
from .render import AMNEZIA_FIELDS, AMNEZIA_OPTIONAL_FIELDS


def _key_out(key: _Key, human_readable: bool):
    return key.to_base64() if human_readable else key.as_bytes()


def _key_in(cls: Type[_Key], value: Any):
    if isinstance(value, (bytes, bytearray)):
        return cls.from_bytes(bytes(value))
    if isinstance(value, str):
        return cls.from_base64(value.strip())
    raise cls.error()


def _str_list(value: Any, label: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ValueError(f"{label} must be a list")
    return [str(x) for x in value]


def _opt_int(data: Dict[str, Any], key: str) -> Optional[int]:
    val = data.get(key)
    if val is None:
        return None
    try:
        return int(val)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{key} must be an integer: {val!r}") from e


def table_to_value(table: Table):
    return table.value


def table_from_value(value: Any) -> Table:
    # YAML 1.1 reads a bare `off` as false
    if value is False:
        return Table.OFF
    if isinstance(value, bool):
        raise ValueError(f"invalid routing table: {value!r}")
    return Table.parse(value)


def amnezia_to_dict(settings: AmneziaSettings) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, attr in AMNEZIA_FIELDS:
        data[key] = getattr(settings, attr)
    for key, attr in AMNEZIA_OPTIONAL_FIELDS:
        val = getattr(settings, attr)
        if val is not None:
            data[key] = val
    return data


def amnezia_from_dict(data: Dict[str, Any]) -> AmneziaSettings:
    if not isinstance(data, dict):
        raise ValueError("amnezia must be a mapping")
    values: Dict[str, Any] = {}
    for key, attr in AMNEZIA_FIELDS:
        if key not in data:
            raise ValueError(f"amnezia.{key} must be set")
        try:
            values[attr] = int(data[key])
        except (TypeError, ValueError) as e:
            raise ValueError(f"amnezia.{key} must be an integer: {data[key]!r}") from e
    for key, attr in AMNEZIA_OPTIONAL_FIELDS:
        if data.get(key) is not None:
            values[attr] = str(data[key])
    return AmneziaSettings(**values)


def peer_to_dict(peer: Peer, human_readable: bool = True) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if peer.endpoint is not None:
        data["endpoint"] = peer.endpoint
    data["allowed-ips"] = [net.with_prefixlen for net in peer.allowed_ips]
    if peer.persistent_keepalive:
        data["persistent-keepalive"] = int(peer.persistent_keepalive)
    if isinstance(peer.key, PrivateKey):
        data["private-key"] = _key_out(peer.key, human_readable)
    else:
        data["public-key"] = _key_out(peer.key, human_readable)
    if peer.preshared_key is not None:
        data["preshared-key"] = _key_out(peer.preshared_key, human_readable)
    if peer.amnezia_settings is not None:
        data["amnezia"] = amnezia_to_dict(peer.amnezia_settings)
    return data


def peer_from_dict(data: Dict[str, Any]) -> Peer:
    if not isinstance(data, dict):
        raise ValueError("peer must be a mapping")
    has_private = data.get("private-key") is not None
    has_public = data.get("public-key") is not None
    if has_private == has_public:
        raise ValueError("peer must have exactly one of private-key or public-key")
    if has_private:
        key = _key_in(PrivateKey, data["private-key"])
    else:
        key = _key_in(PublicKey, data["public-key"])
    psk = data.get("preshared-key")
    amn = data.get("amnezia")
    return Peer(
        endpoint=str(data["endpoint"]) if data.get("endpoint") else None,
        allowed_ips=as_ipnets(_str_list(data.get("allowed-ips"), "allowed-ips")),
        persistent_keepalive=_opt_int(data, "persistent-keepalive") or 0,
        key=key,
        preshared_key=_key_in(PresharedKey, psk) if psk is not None else None,
        amnezia_settings=amnezia_from_dict(amn) if amn is not None else None,
    )


def interface_to_dict(interface: Interface, human_readable: bool = True) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "address": [net.with_prefixlen for net in interface.address],
    }
    if interface.listen_port is not None:
        data["listen-port"] = int(interface.listen_port)
    data["private-key"] = _key_out(interface.private_key, human_readable)
    if interface.dns:
        data["dns"] = list(interface.dns)
    if interface.endpoint is not None:
        data["endpoint"] = interface.endpoint
    if interface.table is not None:
        data["table"] = table_to_value(interface.table)
    if interface.mtu is not None:
        data["mtu"] = int(interface.mtu)
    if interface.amnezia_settings is not None:
        data["amnezia"] = amnezia_to_dict(interface.amnezia_settings)
    for key, snippets in (
        ("pre-up", interface.pre_up),
        ("pre-down", interface.pre_down),
        ("post-up", interface.post_up),
        ("post-down", interface.post_down),
    ):
        if snippets:
            data[key] = list(snippets)
    if interface.peers:
        data["peers"] = [peer_to_dict(p, human_readable) for p in interface.peers]
    return data


def interface_from_dict(data: Dict[str, Any]) -> Interface:
    if not isinstance(data, dict):
        raise ValueError("interface must be a mapping")
    kwargs: Dict[str, Any] = {}
    if data.get("address") is not None:
        kwargs["address"] = as_ipnets(_str_list(data["address"], "address"))
    if data.get("private-key") is not None:
        kwargs["private_key"] = _key_in(PrivateKey, data["private-key"])
    amn = data.get("amnezia")
    table = data.get("table")
    raw_peers = data.get("peers") or []
    if not isinstance(raw_peers, list):
        raise ValueError("peers must be a list")
    return Interface(
        listen_port=_opt_int(data, "listen-port"),
        dns=_str_list(data.get("dns"), "dns"),
        endpoint=str(data["endpoint"]) if data.get("endpoint") else None,
        table=table_from_value(table) if table is not None else None,
        mtu=_opt_int(data, "mtu"),
        amnezia_settings=amnezia_from_dict(amn) if amn is not None else None,
        pre_up=_str_list(data.get("pre-up"), "pre-up"),
        pre_down=_str_list(data.get("pre-down"), "pre-down"),
        post_up=_str_list(data.get("post-up"), "post-up"),
        post_down=_str_list(data.get("post-down"), "post-down"),
        peers=[peer_from_dict(p) for p in raw_peers],
        **kwargs,
    )


def dump_yaml(data: Dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)


def load_yaml(text: str) -> Dict[str, Any]:
    obj = yaml.safe_load(text)
    if not isinstance(obj, dict):
        raise ValueError("Invalid YAML root: expected mapping")
    return obj
