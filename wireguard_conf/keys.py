import base64
import binascii
import hmac
import os
from typing import ClassVar, Type

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from .errors import InvalidKey, InvalidPresharedKey, InvalidPrivateKey, InvalidPublicKey

KEY_SIZE = 32


class _Key:
    """32 raw bytes with WireGuard's base64 text form.

    The bytes live in a bytearray so they can be overwritten. ``wipe()`` runs
    when the key is garbage collected, on ``dispose()`` and when a ``with``
    block exits. Python may still hold transient copies (for example inside
    the X25519 primitive), so erasure is best effort.

    Equality and hashing follow the current bytes. A wiped key hashes like an
    all-zero key, so wipe keys only after removing them from sets and dicts.
    """

    error: ClassVar[Type[InvalidKey]] = InvalidKey
    secret: ClassVar[bool] = True

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes) -> None:
        if not isinstance(raw, (bytes, bytearray)) or len(raw) != KEY_SIZE:
            raise self.error()
        self._raw = bytearray(raw)

    @classmethod
    def from_bytes(cls, raw: bytes):
        return cls(raw)

    @classmethod
    def from_base64(cls, text: str):
        """Decode the canonical standard base64 encoding of exactly 32 bytes."""
        if isinstance(text, (bytes, bytearray)):
            try:
                text = bytes(text).decode("ascii")
            except UnicodeDecodeError as e:
                raise cls.error() from e
        if not isinstance(text, str):
            raise cls.error()
        try:
            raw = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            raise cls.error() from e
        if len(raw) != KEY_SIZE:
            raise cls.error()
        # Reject non-zero trailing bits and other non-canonical spellings
        if base64.b64encode(raw).decode("ascii") != text:
            raise cls.error()
        return cls(raw)

    def as_bytes(self) -> bytes:
        return bytes(self._raw)

    def to_base64(self) -> str:
        return base64.b64encode(self._raw).decode("ascii")

    def wipe(self) -> None:
        raw = getattr(self, "_raw", None)
        if raw is None:
            return
        for i in range(len(raw)):
            raw[i] = 0

    def dispose(self) -> None:
        self.wipe()

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.wipe()

    def __del__(self) -> None:
        self.wipe()

    def __copy__(self):
        return type(self)(bytes(self._raw))

    def __deepcopy__(self, memo):
        return self.__copy__()

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return hmac.compare_digest(self._raw, other._raw)

    def __hash__(self) -> int:
        return hash((type(self).__name__, bytes(self._raw)))

    def __str__(self) -> str:
        return self.to_base64()

    def __repr__(self) -> str:
        if self.secret:
            return f"{type(self).__name__}(<redacted>)"
        return f"{type(self).__name__}({self.to_base64()!r})"


class PrivateKey(_Key):
    error = InvalidPrivateKey
    __slots__ = ()

    @classmethod
    def random(cls) -> "PrivateKey":
        key = X25519PrivateKey.generate()
        return cls(
            key.private_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PrivateFormat.Raw,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )

    def public_key(self) -> "PublicKey":
        return PublicKey.from_private(self)


class PublicKey(_Key):
    error = InvalidPublicKey
    secret = False
    __slots__ = ()

    @classmethod
    def from_private(cls, private_key: PrivateKey) -> "PublicKey":
        """Derive the X25519 public key, as `wg pubkey` does."""
        pub = X25519PrivateKey.from_private_bytes(private_key.as_bytes()).public_key()
        return cls(
            pub.public_bytes(
                encoding=serialization.Encoding.Raw,
                format=serialization.PublicFormat.Raw,
            )
        )


class PresharedKey(_Key):
    error = InvalidPresharedKey
    __slots__ = ()

    @classmethod
    def random(cls) -> "PresharedKey":
        return cls(os.urandom(KEY_SIZE))


def derive_public(private_key: PrivateKey) -> PublicKey:
    return PublicKey.from_private(private_key)
