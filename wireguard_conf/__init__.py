from .amnezia import AmneziaSettings
from .builders import InterfaceBuilder, PeerBuilder
from .config import ToInterfaceOptions
from .errors import (
    InvalidAmneziaSetting,
    InvalidKey,
    InvalidPresharedKey,
    InvalidPrivateKey,
    InvalidPublicKey,
    NoAssignedIP,
    NoPrivateKeyProvided,
    WireguardError,
)
from .keys import PresharedKey, PrivateKey, PublicKey, derive_public
from .models import (
    UNSPECIFIED_ADDRESS,
    Interface,
    Peer,
    Table,
    as_ipnet,
    derive_interface_from_peer,
    derive_peer_from_interface,
    to_text,
)

__all__ = [
    "AmneziaSettings",
    "InterfaceBuilder",
    "PeerBuilder",
    "ToInterfaceOptions",
    "InvalidAmneziaSetting",
    "InvalidKey",
    "InvalidPresharedKey",
    "InvalidPrivateKey",
    "InvalidPublicKey",
    "NoAssignedIP",
    "NoPrivateKeyProvided",
    "WireguardError",
    "PresharedKey",
    "PrivateKey",
    "PublicKey",
    "derive_public",
    "UNSPECIFIED_ADDRESS",
    "Interface",
    "Peer",
    "Table",
    "as_ipnet",
    "derive_interface_from_peer",
    "derive_peer_from_interface",
    "to_text",
]
