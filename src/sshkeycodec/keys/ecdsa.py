# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""ECDSA key variants (NIST P-256, P-384 and P-521).

SSH transports ECDSA public keys as the curve name plus the raw
uncompressed curve point ([RFC 5656, section 3.1][RFC5656_3_1]), and
ECDSA signatures as two `mpint`s `r` and `s` ([RFC 5656, section
3.1.2][RFC5656_3_1_2]).  The cryptography provider instead wants
a DER `SubjectPublicKeyInfo` and a DER `ECDSA-Sig-Value`.

[RFC5656_3_1]: https://www.rfc-editor.org/rfc/rfc5656#section-3.1
[RFC5656_3_1_2]: https://www.rfc-editor.org/rfc/rfc5656#section-3.1.2

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from typing_extensions import NamedTuple

from sshkeycodec import _types, asn1, keys, wire

if TYPE_CHECKING:
    from pyasn1.type import univ
    from typing_extensions import Buffer, Self

__all__ = (
    'ECDSAPrivateKey',
    'ECDSAPublicKey',
    'backend_curve_name',
    'digest_for_curve',
    'lookup_curve',
)

logger = logging.getLogger(__name__)

UNKNOWN_CURVE = 'unknown curve: {curve!r}'

ECDSA_ALGORITHMS = frozenset({
    _types.KeyAlgorithm.ECDSA_NISTP256.value,
    _types.KeyAlgorithm.ECDSA_NISTP384.value,
    _types.KeyAlgorithm.ECDSA_NISTP521.value,
})


class CurveParameters(NamedTuple):
    """Provider-side parameters of an SSH curve.

    Attributes:
        backend_name:
            The OpenSSL name of the curve.
        oid:
            The ASN.1 object identifier of the named curve.
        digest:
            The hash algorithm for signatures on this curve.
        curve:
            The cryptography curve class.

    """

    backend_name: str
    """"""
    oid: str
    """"""
    digest: type[hashes.HashAlgorithm]
    """"""
    curve: type[ec.EllipticCurve]
    """"""


CURVE_PARAMETERS: dict[_types.Curve, CurveParameters] = {
    _types.Curve.NISTP256: CurveParameters(
        'prime256v1', '1.2.840.10045.3.1.7', hashes.SHA256, ec.SECP256R1
    ),
    _types.Curve.NISTP384: CurveParameters(
        'secp384r1', '1.3.132.0.34', hashes.SHA384, ec.SECP384R1
    ),
    _types.Curve.NISTP521: CurveParameters(
        'secp521r1', '1.3.132.0.35', hashes.SHA512, ec.SECP521R1
    ),
}


def lookup_curve(curve: str | _types.Curve, /) -> _types.Curve:
    """Return the curve enumeration member for the SSH curve name.

    Raises:
        wire.DecodeError: The curve is unknown.

    """
    name = getattr(curve, 'value', curve)
    try:
        return _types.Curve(name)
    except ValueError:
        raise wire.DecodeError(UNKNOWN_CURVE.format(curve=name)) from None


def _curve_parameters(curve: str | _types.Curve) -> CurveParameters:
    member = lookup_curve(curve)
    try:
        return CURVE_PARAMETERS[member]
    except KeyError:
        raise wire.DecodeError(
            UNKNOWN_CURVE.format(curve=member.value)
        ) from None


def backend_curve_name(curve: str | _types.Curve, /) -> str:
    """Return the OpenSSL name of the SSH curve.

    Raises:
        wire.DecodeError: The curve is unknown.

    """
    return _curve_parameters(curve).backend_name


def digest_for_curve(curve: str | _types.Curve, /) -> hashes.HashAlgorithm:
    """Return the signature hash algorithm of the SSH curve.

    Raises:
        wire.DecodeError: The curve is unknown.

    """
    return _curve_parameters(curve).digest()


@keys.register_public_key_variant(*sorted(ECDSA_ALGORITHMS))
class ECDSAPublicKey(keys.PublicKey):
    """An ECDSA public key."""

    ALGORITHMS = ECDSA_ALGORITHMS

    def __init__(
        self,
        *,
        algorithm: str,
        curve: str | _types.Curve,
        public_key: Buffer,
    ) -> None:
        """Initialize the key.

        Args:
            algorithm:
                One of the `ecdsa-sha2-*` algorithm identifiers.
            curve:
                The SSH curve name, e.g. `nistp256`.
            public_key:
                The uncompressed curve point.

        Raises:
            wire.DecodeError:
                The algorithm or the curve is unknown, or the
                cryptography provider rejects the public key.

        """
        self._algorithm = self.check_algorithm(algorithm)
        self._curve = lookup_curve(curve)
        self._public_key = bytes(public_key)
        self._crypto_handle = keys.load_crypto_handle(
            asn1.encode(self.asn1()),
            serialization.load_der_public_key,
            ec.EllipticCurvePublicKey,
        )
        logger.debug(
            'Built ECDSA public key handle on curve %s', self._curve.value
        )

    @property
    def curve(self) -> str:
        """The SSH curve name."""
        return self._curve.value

    @property
    def public_key(self) -> bytes:
        """The uncompressed curve point."""
        return self._public_key

    @classmethod
    def to_der(cls, signature: Buffer, /) -> bytes:
        view = memoryview(signature)
        r, r_size = wire.decode_mpint(view, 0)
        s, s_size = wire.decode_mpint(view, r_size)
        if r_size + s_size != len(view):
            raise wire.DecodeError(keys.UNEXPECTED_TRAILING_DATA)
        return asn1.encode_integer_pair(r, s)

    @classmethod
    def to_wire(cls, signature: Buffer, /) -> bytes:
        r, s = asn1.decode_integer_pair(signature)
        return wire.encode_mpint(r) + wire.encode_mpint(s)

    def asn1(self) -> univ.Sequence:
        params = _curve_parameters(self._curve)
        return asn1.sequence(
            asn1.sequence(
                asn1.object_identifier(asn1.ID_EC_PUBLIC_KEY),
                asn1.object_identifier(params.oid),
            ),
            asn1.bit_string(self._public_key),
        )

    def to_blob(self) -> bytes:
        return (
            wire.string(self._algorithm.encode('ascii'))
            + wire.string(self._curve.value.encode('ascii'))
            + wire.string(self._public_key)
        )

    @classmethod
    def from_blob(
        cls, algorithm: str, blob: Buffer, offset: int, /
    ) -> tuple[Self, int]:
        raw_curve, curve_size = wire.decode_string(blob, offset)
        point, point_size = wire.decode_string(blob, offset + curve_size)
        curve = raw_curve.decode('utf-8', 'surrogateescape')
        if algorithm != f'ecdsa-sha2-{curve}':
            msg = f'curve name {curve!r} does not match key type'
            raise wire.DecodeError(msg)
        return (
            cls(algorithm=algorithm, curve=curve, public_key=point),
            curve_size + point_size,
        )

    def signature_algorithm(self) -> str:
        return f'ecdsa-sha2-{self._curve.value}'

    def _provider_verify(self, signature: bytes, signed_data: bytes) -> None:
        self._crypto_handle.verify(
            signature, signed_data, ec.ECDSA(digest_for_curve(self._curve))
        )


@keys.register_private_key_variant(*sorted(ECDSA_ALGORITHMS))
class ECDSAPrivateKey(keys.PrivateKey):
    """An ECDSA private key, with its derived public key."""

    ALGORITHMS = ECDSA_ALGORITHMS

    def __init__(
        self,
        *,
        algorithm: str,
        curve: str | _types.Curve,
        public_key: Buffer,
        private_key: int,
        comment: str = '',
    ) -> None:
        """Initialize the key.

        Args:
            algorithm:
                One of the `ecdsa-sha2-*` algorithm identifiers.
            curve:
                The SSH curve name, e.g. `nistp256`.
            public_key:
                The uncompressed curve point.
            private_key:
                The secret scalar.
            comment:
                The key comment.

        Raises:
            wire.DecodeError:
                The algorithm or the curve is unknown, or the
                cryptography provider rejects the key material.

        """
        algorithm = self.check_algorithm(algorithm)
        params = _curve_parameters(curve)
        self._private_key = private_key
        self._point = bytes(public_key)
        self._params = params
        crypto_handle = keys.load_crypto_handle(
            asn1.encode(self.asn1()),
            lambda data: serialization.load_der_private_key(data, None),
            ec.EllipticCurvePrivateKey,
        )
        public = ECDSAPublicKey(
            algorithm=algorithm, curve=curve, public_key=public_key
        )
        self._algorithm = algorithm
        self._comment = comment
        self._crypto_handle = crypto_handle
        self._public_key = public

    @property
    def curve(self) -> str:
        """The SSH curve name."""
        return self._public_key.curve

    @property
    def private_key(self) -> int:
        """The secret scalar."""
        return self._private_key

    def asn1(self) -> univ.Sequence:
        """Return the SEC 1 `ECPrivateKey` structure of this key."""
        size = (self._params.curve.key_size + 7) // 8
        try:
            scalar = self._private_key.to_bytes(size, 'big', signed=False)
        except OverflowError as exc:
            msg = 'ECDSA private key out of range'
            raise wire.DecodeError(msg) from exc
        return asn1.sequence(
            asn1.integer(1),
            asn1.octet_string(scalar),
            asn1.explicit(asn1.object_identifier(self._params.oid), 0),
            asn1.explicit(asn1.bit_string(self._point), 1),
        )

    def _provider_sign(self, signed_data: bytes) -> bytes:
        return self._crypto_handle.sign(
            signed_data, ec.ECDSA(self._params.digest())
        )

