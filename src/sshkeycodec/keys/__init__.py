# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""SSH key variants and the algorithm registry.

Every supported SSH key algorithm is implemented as a *key variant*:
a subclass of [`PublicKey`][] (and, where secret key material is
handled, of [`PrivateKey`][]) that owns the algorithm-specific fields,
builds the ASN.1 key structure for the cryptography provider, and
converts signatures between the SSH wire format and DER.  Variants
register themselves under their SSH algorithm identifiers, and are
looked up via [`resolve`][] and [`resolve_private`][].

"""

from __future__ import annotations

import abc
import base64
import hashlib
import importlib
import logging
import types
from typing import TYPE_CHECKING, ClassVar, TypeVar

from cryptography import exceptions as crypt_exceptions

from sshkeycodec import wire

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from pyasn1.type import univ
    from typing_extensions import Any, Buffer, Self

__all__ = (
    'PrivateKey',
    'PublicKey',
    'load_crypto_handle',
    'parse_authorized_key',
    'parse_public_key',
    'private_key_variants',
    'public_key_variants',
    'register_private_key_variant',
    'register_public_key_variant',
    'resolve',
    'resolve_private',
)

logger = logging.getLogger(__name__)

UNKNOWN_ALGORITHM = 'unknown algorithm: {algorithm!r}'
BAD_ALGORITHM = 'bad algorithm: {algorithm!r}'
BAD_SIGNATURE_ALGORITHM = 'bad signature algorithm: {algorithm!r}'
UNEXPECTED_TRAILING_DATA = 'unexpected trailing data'


def _algorithm_name(algorithm: Any) -> Any:  # noqa: ANN401
    # Enum members (of `_types.KeyAlgorithm`) are reduced to their wire
    # names; everything else is passed through for validation.
    return getattr(algorithm, 'value', algorithm)


def _check_algorithm(allowed: frozenset[str], algorithm: Any) -> str:  # noqa: ANN401
    name = _algorithm_name(algorithm)
    if name not in allowed:
        raise wire.DecodeError(BAD_ALGORITHM.format(algorithm=name))
    return name


def load_crypto_handle(
    data: bytes,
    loader: Callable[[bytes], Any],
    expected_type: type,
) -> Any:  # noqa: ANN401
    """Load a DER key structure with the cryptography provider.

    Args:
        data:
            The DER-encoded key structure.
        loader:
            The provider's loading function, e.g.
            [`cryptography.hazmat.primitives.serialization.load_der_public_key`][].
        expected_type:
            The provider key type that the structure must load as.

    Returns:
        The provider's key object.

    Raises:
        wire.DecodeError:
            The provider rejected the structure, or loaded it as the
            wrong key type.

    """
    try:
        handle = loader(data)
    except (ValueError, crypt_exceptions.UnsupportedAlgorithm) as exc:
        msg = f'cryptography provider rejected key structure: {exc}'
        raise wire.DecodeError(msg) from exc
    if not isinstance(handle, expected_type):
        msg = f'key structure did not load as {expected_type.__name__}'
        raise wire.DecodeError(msg)
    return handle


class PublicKey(abc.ABC):
    """An SSH public key of a specific algorithm family.

    Instances are immutable.  The cryptography provider's key handle is
    built eagerly during construction, so a successfully constructed
    key is always usable for verification.

    Subclasses must declare the closed set of algorithm identifiers
    they accept as `ALGORITHMS`.

    """

    ALGORITHMS: ClassVar[frozenset[str]] = frozenset()

    _algorithm: str
    _crypto_handle: Any

    @classmethod
    def check_algorithm(cls, algorithm: str, /) -> str:
        """Return the algorithm name if it belongs to this variant.

        Raises:
            wire.DecodeError:
                The algorithm is not in `ALGORITHMS`.

        """
        return _check_algorithm(cls.ALGORITHMS, algorithm)

    @property
    def algorithm(self) -> str:
        """The SSH algorithm identifier of this key."""
        return self._algorithm

    def crypto_handle(self) -> Any:  # noqa: ANN401
        """Return the cryptography provider's public key object."""
        return self._crypto_handle

    @classmethod
    @abc.abstractmethod
    def to_der(cls, signature: Buffer, /) -> bytes:
        """Convert an SSH wire signature blob to a DER signature.

        Args:
            signature:
                The algorithm-specific signature blob, i.e. the payload
                of an SSH signature envelope.

        Returns:
            The signature in DER encoding, as consumed by the
            cryptography provider.

        Raises:
            wire.DecodeError:
                The signature blob is malformed.

        """

    @classmethod
    @abc.abstractmethod
    def to_wire(cls, signature: Buffer, /) -> bytes:
        """Convert a DER signature to an SSH wire signature blob.

        Args:
            signature:
                A DER-encoded signature, as produced by the
                cryptography provider.

        Returns:
            The algorithm-specific signature blob, suitable as payload
            of an SSH signature envelope.

        Raises:
            wire.DecodeError:
                The DER signature is malformed, or cannot be
                represented in the SSH wire format.

        """

    @abc.abstractmethod
    def asn1(self) -> univ.Sequence:
        """Return the ASN.1 `SubjectPublicKeyInfo` structure of this key."""

    @abc.abstractmethod
    def to_blob(self) -> bytes:
        """Return the SSH wire encoding of this public key."""

    @classmethod
    @abc.abstractmethod
    def from_blob(
        cls, algorithm: str, blob: Buffer, offset: int, /
    ) -> tuple[Self, int]:
        """Decode the algorithm-specific fields of a public key blob.

        Args:
            algorithm:
                The algorithm identifier, already decoded from the
                start of the blob.
            blob:
                The complete public key blob.
            offset:
                The position of the first algorithm-specific field.

        Returns:
            A 2-tuple of the key and the number of bytes consumed
            starting at `offset`.

        Raises:
            wire.DecodeError:
                The fields are malformed.

        """

    @abc.abstractmethod
    def signature_algorithm(self) -> str:
        """Return the signature envelope name this key verifies."""

    @abc.abstractmethod
    def _provider_verify(self, signature: bytes, signed_data: bytes) -> None:
        """Verify a DER signature with the cryptography provider.

        Raises:
            cryptography.exceptions.InvalidSignature:
                The signature does not verify.

        """

    def verify(self, signed_data: Buffer, signature: Buffer) -> bool:
        """Verify an SSH signature.

        Args:
            signed_data:
                The message that the signature was calculated over.
            signature:
                The signature, wrapped in an SSH signature envelope.

        Returns:
            True if the signature verifies, false otherwise.

        Raises:
            wire.DecodeError:
                The signature envelope or the signature blob is
                malformed, or the envelope names a different signature
                algorithm.

        """
        envelope = wire.decode_signature(signature)
        if envelope.algorithm != self.signature_algorithm():
            raise wire.DecodeError(
                BAD_SIGNATURE_ALGORITHM.format(algorithm=envelope.algorithm)
            )
        der_signature = self.to_der(envelope.payload)
        try:
            self._provider_verify(der_signature, bytes(signed_data))
        except crypt_exceptions.InvalidSignature:
            logger.debug(
                'Signature does not verify under %s key %s',
                self.algorithm,
                self.fingerprint(),
            )
            return False
        return True

    def fingerprint(self) -> str:
        """Return the OpenSSH SHA256 fingerprint of this key.

        Returns:
            The string `SHA256:` followed by the unpadded base64
            encoding of the SHA256 digest of the public key blob.

        """
        digest = hashlib.sha256(self.to_blob()).digest()
        return 'SHA256:' + base64.b64encode(digest).decode('ascii').rstrip(
            '='
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.to_blob() == other.to_blob()

    def __hash__(self) -> int:
        return hash(self.to_blob())

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.algorithm} {self.fingerprint()}>'


class PrivateKey(abc.ABC):
    """An SSH private key of a specific algorithm family.

    Instances are immutable, and carry their derived [`PublicKey`][].
    Construction is atomic: if building the provider key handle or
    deriving the public key fails, no object is returned.

    """

    ALGORITHMS: ClassVar[frozenset[str]] = frozenset()

    _algorithm: str
    _comment: str
    _crypto_handle: Any
    _public_key: PublicKey

    @classmethod
    def check_algorithm(cls, algorithm: str, /) -> str:
        """Return the algorithm name if it belongs to this variant.

        Raises:
            wire.DecodeError:
                The algorithm is not in `ALGORITHMS`.

        """
        return _check_algorithm(cls.ALGORITHMS, algorithm)

    @property
    def algorithm(self) -> str:
        """The SSH algorithm identifier of this key."""
        return self._algorithm

    @property
    def comment(self) -> str:
        """The key comment."""
        return self._comment

    @property
    def public_key(self) -> PublicKey:
        """The public key belonging to this private key."""
        return self._public_key

    def crypto_handle(self) -> Any:  # noqa: ANN401
        """Return the cryptography provider's private key object."""
        return self._crypto_handle

    @abc.abstractmethod
    def asn1(self) -> univ.Sequence:
        """Return the traditional ASN.1 private key structure of this key."""

    @abc.abstractmethod
    def _provider_sign(self, signed_data: bytes) -> bytes:
        """Sign with the cryptography provider, returning a DER signature."""

    def sign(self, signed_data: Buffer) -> bytes:
        """Sign the data and return an SSH signature envelope.

        The signature is in the same format that [`PublicKey.verify`][]
        expects.

        """
        der_signature = self._provider_sign(bytes(signed_data))
        public_key = self.public_key
        return wire.encode_signature(
            public_key.signature_algorithm(),
            type(public_key).to_wire(der_signature),
        )

    def __repr__(self) -> str:
        return (
            f'<{self.__class__.__name__} {self.algorithm} '
            f'{self.public_key.fingerprint()} {self.comment!r}>'
        )


PublicKeyT = TypeVar('PublicKeyT', bound='type[PublicKey]')
PrivateKeyT = TypeVar('PrivateKeyT', bound='type[PrivateKey]')

_public_key_registry: dict[str, type[PublicKey]] = {}
_private_key_registry: dict[str, type[PrivateKey]] = {}


def _registrar(
    registry: dict[str, Any], kind: str, names: tuple[str, ...]
) -> Callable[[Any], Any]:
    if not names:
        msg = f'No names given to {kind} key variant registry'
        raise ValueError(msg)
    if '' in names:
        msg = f'Cannot register {kind} key variant under an empty name'
        raise ValueError(msg)

    def wrapper(cls: Any) -> Any:  # noqa: ANN401
        for name in names:
            if name in registry:
                msg = f'{kind} key variant already registered: {name!r}'
                raise ValueError(msg)
            registry[name] = cls
        return cls

    return wrapper


def register_public_key_variant(
    *names: str,
) -> Callable[[PublicKeyT], PublicKeyT]:
    """Register the decorated class as public key variant for `names`."""
    return _registrar(_public_key_registry, 'public', names)


def register_private_key_variant(
    *names: str,
) -> Callable[[PrivateKeyT], PrivateKeyT]:
    """Register the decorated class as private key variant for `names`."""
    return _registrar(_private_key_registry, 'private', names)


def find_key_variants() -> None:
    """Find all key variants.

    (This function is idempotent.)

    """
    # Defer imports (and variant registrations) to avoid circular
    # imports.  The modules themselves contain class definitions that
    # register themselves automatically with the registries.
    importlib.import_module('sshkeycodec.keys.dsa')
    importlib.import_module('sshkeycodec.keys.ecdsa')


def public_key_variants() -> Mapping[str, type[PublicKey]]:
    """Return a read-only view of the public key variant registry."""
    find_key_variants()
    return types.MappingProxyType(_public_key_registry)


def private_key_variants() -> Mapping[str, type[PrivateKey]]:
    """Return a read-only view of the private key variant registry."""
    find_key_variants()
    return types.MappingProxyType(_private_key_registry)


def resolve(identifier: str, /) -> type[PublicKey]:
    """Return the public key variant for the SSH algorithm identifier.

    Raises:
        wire.DecodeError:
            No variant is registered for this identifier.

    """
    find_key_variants()
    name = _algorithm_name(identifier)
    try:
        variant = _public_key_registry[name]
    except KeyError:
        raise wire.DecodeError(
            UNKNOWN_ALGORITHM.format(algorithm=name)
        ) from None
    logger.debug('Resolved %r to %s', name, variant.__name__)
    return variant


def resolve_private(identifier: str, /) -> type[PrivateKey]:
    """Return the private key variant for the SSH algorithm identifier.

    Raises:
        wire.DecodeError:
            No variant is registered for this identifier.

    """
    find_key_variants()
    name = _algorithm_name(identifier)
    try:
        variant = _private_key_registry[name]
    except KeyError:
        raise wire.DecodeError(
            UNKNOWN_ALGORITHM.format(algorithm=name)
        ) from None
    logger.debug('Resolved %r to %s', name, variant.__name__)
    return variant


def parse_public_key(blob: Buffer, /) -> PublicKey:
    """Decode an SSH wire public key blob.

    The blob starts with the algorithm identifier as an SSH string,
    followed by the algorithm-specific fields (see [RFC 4253, section
    6.6][RFC4253_6_6] and [RFC 5656, section 3.1][RFC5656_3_1]).

    [RFC4253_6_6]: https://www.rfc-editor.org/rfc/rfc4253#section-6.6
    [RFC5656_3_1]: https://www.rfc-editor.org/rfc/rfc5656#section-3.1

    Raises:
        wire.DecodeError:
            The blob is malformed, names an unknown algorithm, or has
            trailing data.

    """
    blob = memoryview(blob).toreadonly()
    raw_algorithm, size = wire.decode_string(blob)
    algorithm = raw_algorithm.decode('utf-8', 'surrogateescape')
    key, fields_size = resolve(algorithm).from_blob(algorithm, blob, size)
    if size + fields_size != len(blob):
        raise wire.DecodeError(UNEXPECTED_TRAILING_DATA)
    return key


def parse_authorized_key(line: str | Buffer, /) -> PublicKey:
    """Decode a public key in OpenSSH one-line format.

    The format is `ALGORITHM BASE64-BLOB [COMMENT]`, as used in
    `authorized_keys` files and `*.pub` files.  The comment, if any, is
    ignored.

    Raises:
        wire.DecodeError:
            The line is malformed, or its algorithm does not match the
            algorithm inside the blob.

    """
    text = (
        line
        if isinstance(line, str)
        else bytes(line).decode('utf-8', 'surrogateescape')
    )
    parts = text.split(None, 2)
    if len(parts) < 2:  # noqa: PLR2004
        msg = 'malformed public key line'
        raise wire.DecodeError(msg)
    algorithm, encoded = parts[:2]
    try:
        blob = base64.b64decode(encoded, validate=True)
    except ValueError as exc:
        msg = 'malformed public key line'
        raise wire.DecodeError(msg) from exc
    key = parse_public_key(blob)
    if key.algorithm != algorithm:
        raise wire.DecodeError(BAD_ALGORITHM.format(algorithm=algorithm))
    return key
