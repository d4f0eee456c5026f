# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""ASN.1 helpers for key structures and signatures, based on pyasn1.

We only ever need a handful of universal types (SEQUENCE, INTEGER,
BIT STRING, OCTET STRING, OBJECT IDENTIFIER) and explicit context
tags, so instead of declaring full schemas we build untyped sequences
positionally, and validate decoded structures by their tag sets.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pyasn1.codec.der import decoder as der_decoder
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import tag, univ

from sshkeycodec import wire

if TYPE_CHECKING:
    from pyasn1.type import base
    from typing_extensions import Buffer

__all__ = (
    'ID_DSA',
    'ID_EC_PUBLIC_KEY',
    'bit_string',
    'decode',
    'decode_integer_pair',
    'encode',
    'encode_integer_pair',
    'explicit',
    'integer',
    'object_identifier',
    'octet_string',
    'sequence',
)

# id-ecPublicKey (RFC 5480) and id-dsa (RFC 3279)
ID_EC_PUBLIC_KEY = '1.2.840.10045.2.1'
ID_DSA = '1.2.840.10040.4.1'

BAD_ASN1_SIGNATURE = 'bad asn1 signature'


def integer(value: int, /) -> univ.Integer:
    return univ.Integer(value)


def object_identifier(dotted: str, /) -> univ.ObjectIdentifier:
    return univ.ObjectIdentifier(dotted)


def bit_string(data: Buffer, /) -> univ.BitString:
    """Return a BIT STRING holding `data`, with no unused bits."""
    return univ.BitString.fromOctetString(bytes(data))


def octet_string(data: Buffer, /) -> univ.OctetString:
    return univ.OctetString(bytes(data))


def explicit(component: base.Asn1Item, number: int, /) -> base.Asn1Item:
    """Wrap `component` in an explicit context-specific tag `[number]`."""
    return component.subtype(
        explicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, number)
    )


def sequence(*components: base.Asn1Item) -> univ.Sequence:
    """Return an untyped SEQUENCE of `components`, in order."""
    seq = univ.Sequence()
    for index, component in enumerate(components):
        seq.setComponentByPosition(index, component)
    return seq


def encode(node: base.Asn1Item, /) -> bytes:
    """Return the DER encoding of `node`."""
    return bytes(der_encoder.encode(node))


def decode(data: Buffer, /) -> base.Asn1Item:
    """Decode a single DER structure without a schema.

    Raises:
        wire.DecodeError:
            The data is not valid DER, or there is data after the first
            structure.

    """
    try:
        node, rest = der_decoder.decode(bytes(data))
    except PyAsn1Error as exc:
        msg = f'invalid DER data: {exc}'
        raise wire.DecodeError(msg) from exc
    if rest:
        msg = 'unexpected trailing data after DER structure'
        raise wire.DecodeError(msg)
    return node


def encode_integer_pair(r: int, s: int, /) -> bytes:
    """Return the DER encoding of `SEQUENCE { INTEGER r, INTEGER s }`.

    This is the `Dss-Sig-Value`/`ECDSA-Sig-Value` structure expected by
    the cryptography provider.

    """
    return encode(sequence(integer(r), integer(s)))


def decode_integer_pair(der: Buffer, /) -> tuple[int, int]:
    """Decode a DER `SEQUENCE { INTEGER r, INTEGER s }`.

    Returns:
        The 2-tuple `(r, s)`.

    Raises:
        wire.DecodeError:
            The data is not a universal SEQUENCE of exactly two
            universal INTEGERs, or not in canonical DER form (e.g.
            integers with redundant leading bytes).

    """
    try:
        node = decode(der)
    except wire.DecodeError as exc:
        raise wire.DecodeError(BAD_ASN1_SIGNATURE) from exc
    if node.tagSet != univ.Sequence.tagSet or len(node) != 2:  # noqa: PLR2004
        raise wire.DecodeError(BAD_ASN1_SIGNATURE)
    r, s = node[0], node[1]
    if r.tagSet != univ.Integer.tagSet or s.tagSet != univ.Integer.tagSet:
        raise wire.DecodeError(BAD_ASN1_SIGNATURE)
    # pyasn1 tolerates non-minimal INTEGER encodings when decoding.
    if encode_integer_pair(int(r), int(s)) != bytes(der):
        raise wire.DecodeError(BAD_ASN1_SIGNATURE)
    return int(r), int(s)
