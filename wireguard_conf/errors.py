class WireguardError(Exception):
    """Base class for every error raised by wireguard_conf."""


class InvalidKey(WireguardError, ValueError):
    message = "invalid key"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class InvalidPrivateKey(InvalidKey):
    message = "invalid private key"


class InvalidPublicKey(InvalidKey):
    message = "invalid public key"


class InvalidPresharedKey(InvalidKey):
    message = "invalid preshared key"


class NoPrivateKeyProvided(WireguardError):
    """Interface derivation was requested for a peer that only has a public key."""

    def __init__(self) -> None:
        super().__init__("no private key provided")


class NoAssignedIP(WireguardError):
    """None of the peer's allowed IPs fall inside the reference interface's networks."""

    def __init__(self) -> None:
        super().__init__("no assigned ip")


class InvalidAmneziaSetting(WireguardError, ValueError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"invalid amnezia setting: {field}")
