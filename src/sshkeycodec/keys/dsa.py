# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""DSA key variants (`ssh-dss`).

SSH DSA signatures ([RFC 4253, section 6.6][RFC4253_6_6]) are the
concatenation of `r` and `s`, each a 160-bit unsigned big endian
integer, for a fixed total of 40 bytes.  Signatures always use SHA-1.

[RFC4253_6_6]: https://www.rfc-editor.org/rfc/rfc4253#section-6.6

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import dsa

from sshkeycodec import _types, asn1, keys, wire

if TYPE_CHECKING:
    from pyasn1.type import univ
    from typing_extensions import Buffer, Self

__all__ = ('DSAPrivateKey', 'DSAPublicKey')

logger = logging.getLogger(__name__)

DSA_ALGORITHMS = frozenset({_types.KeyAlgorithm.DSA.value})
# Each signature component is a 160-bit number.
COMPONENT_SIZE = 20
SIGNATURE_SIZE = 2 * COMPONENT_SIZE


@keys.register_public_key_variant(*sorted(DSA_ALGORITHMS))
class DSAPublicKey(keys.PublicKey):
    """A DSA public key."""

    ALGORITHMS = DSA_ALGORITHMS

    def __init__(
        self,
        *,
        algorithm: str,
        p: int,
        q: int,
        g: int,
        y: int,
    ) -> None:
        """Initialize the key.

        Args:
            algorithm: Must be `ssh-dss`.
            p: The prime modulus.
            q: The subgroup order.
            g: The subgroup generator.
            y: The public value.

        Raises:
            wire.DecodeError:
                The algorithm is wrong, or the cryptography provider
                rejects the key.

        """
        self._algorithm = self.check_algorithm(algorithm)
        self._p = p
        self._q = q
        self._g = g
        self._y = y
        self._crypto_handle = keys.load_crypto_handle(
            asn1.encode(self.asn1()),
            serialization.load_der_public_key,
            dsa.DSAPublicKey,
        )
        logger.debug('Built DSA public key handle (%d bits)', p.bit_length())

    @property
    def p(self) -> int:
        return self._p

    @property
    def q(self) -> int:
        return self._q

    @property
    def g(self) -> int:
        return self._g

    @property
    def y(self) -> int:
        return self._y

    @classmethod
    def to_der(cls, signature: Buffer, /) -> bytes:
        view = memoryview(signature)
        if len(view) != SIGNATURE_SIZE:
            msg = 'bad DSA signature size'
            raise wire.DecodeError(msg)
        r = int.from_bytes(view[:COMPONENT_SIZE], 'big', signed=False)
        s = int.from_bytes(view[COMPONENT_SIZE:], 'big', signed=False)
        return asn1.encode_integer_pair(r, s)

    @classmethod
    def to_wire(cls, signature: Buffer, /) -> bytes:
        """Convert a DER signature to an SSH wire signature blob.

        Both components are left-padded with zero bytes to exactly 20
        bytes.

        Raises:
            wire.DecodeError:
                The DER signature is malformed, or a component is
                negative or does not fit into 20 bytes.

        """
        r, s = asn1.decode_integer_pair(signature)
        ret = bytearray()
        for component in (r, s):
            try:
                ret.extend(
                    component.to_bytes(COMPONENT_SIZE, 'big', signed=False)
                )
            except OverflowError as exc:
                msg = 'DSA signature component out of range'
                raise wire.DecodeError(msg) from exc
        return bytes(ret)

    def asn1(self) -> univ.Sequence:
        return asn1.sequence(
            asn1.sequence(
                asn1.object_identifier(asn1.ID_DSA),
                asn1.sequence(
                    asn1.integer(self._p),
                    asn1.integer(self._q),
                    asn1.integer(self._g),
                ),
            ),
            asn1.bit_string(asn1.encode(asn1.integer(self._y))),
        )

    def to_blob(self) -> bytes:
        return b''.join([
            wire.string(self._algorithm.encode('ascii')),
            wire.encode_mpint(self._p),
            wire.encode_mpint(self._q),
            wire.encode_mpint(self._g),
            wire.encode_mpint(self._y),
        ])

    @classmethod
    def from_blob(
        cls, algorithm: str, blob: Buffer, offset: int, /
    ) -> tuple[Self, int]:
        values: list[int] = []
        size = 0
        for _ in range(4):
            value, value_size = wire.decode_mpint(blob, offset + size)
            values.append(value)
            size += value_size
        p, q, g, y = values
        return cls(algorithm=algorithm, p=p, q=q, g=g, y=y), size

    def signature_algorithm(self) -> str:
        return _types.KeyAlgorithm.DSA.value

    def _provider_verify(self, signature: bytes, signed_data: bytes) -> None:
        self._crypto_handle.verify(signature, signed_data, hashes.SHA1())  # noqa: S303


@keys.register_private_key_variant(*sorted(DSA_ALGORITHMS))
class DSAPrivateKey(keys.PrivateKey):
    """A DSA private key, with its derived public key."""

    ALGORITHMS = DSA_ALGORITHMS

    def __init__(  # noqa: PLR0913
        self,
        *,
        algorithm: str,
        p: int,
        q: int,
        g: int,
        x: int,
        y: int,
        comment: str = '',
    ) -> None:
        """Initialize the key.

        Args:
            algorithm: Must be `ssh-dss`.
            p: The prime modulus.
            q: The subgroup order.
            g: The subgroup generator.
            x: The secret exponent.
            y: The public value.
            comment: The key comment.

        Raises:
            wire.DecodeError:
                The algorithm is wrong, the cryptography provider
                rejects the key material, or `y` is not `g^x mod p`.

        """
        algorithm = self.check_algorithm(algorithm)
        self._p = p
        self._q = q
        self._g = g
        self._x = x
        self._y = y
        if p > 1 and pow(g, x, p) != y:
            msg = 'DSA public value does not match the secret exponent'
            raise wire.DecodeError(msg)
        crypto_handle = keys.load_crypto_handle(
            asn1.encode(self.asn1()),
            lambda data: serialization.load_der_private_key(data, None),
            dsa.DSAPrivateKey,
        )
        public = DSAPublicKey(algorithm=algorithm, p=p, q=q, g=g, y=y)
        self._algorithm = algorithm
        self._comment = comment
        self._crypto_handle = crypto_handle
        self._public_key = public

    @property
    def p(self) -> int:
        return self._p

    @property
    def q(self) -> int:
        return self._q

    @property
    def g(self) -> int:
        return self._g

    @property
    def x(self) -> int:
        return self._x

    @property
    def y(self) -> int:
        return self._y

    def asn1(self) -> univ.Sequence:
        """Return the traditional OpenSSL `DSAPrivateKey` structure."""
        return asn1.sequence(
            asn1.integer(0),
            asn1.integer(self._p),
            asn1.integer(self._q),
            asn1.integer(self._g),
            asn1.integer(self._y),
            asn1.integer(self._x),
        )

    def _provider_sign(self, signed_data: bytes) -> bytes:
        return self._crypto_handle.sign(signed_data, hashes.SHA1())  # noqa: S303
