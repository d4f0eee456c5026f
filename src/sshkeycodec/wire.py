# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Primitive encoders and decoders for the SSH wire format.

The SSH wire format ([RFC 4251, section 5][RFC4251_5]) is built from
a few primitive data types: 32-bit unsigned integers, length-prefixed
byte strings, and multiple precision integers (`mpint`s), which are
byte strings holding a two's complement big endian number.  Signatures
are transmitted in an envelope consisting of two byte strings, the
signature algorithm name and the algorithm-specific signature blob.

All decoders take an input buffer and an offset, and return the decoded
value together with the number of bytes consumed, so that callers can
walk through a composite structure and detect trailing data themselves.

[RFC4251_5]: https://www.rfc-editor.org/rfc/rfc4251#section-5

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sshkeycodec import _types

if TYPE_CHECKING:
    from typing_extensions import Buffer

__all__ = (
    'DecodeError',
    'decode_mpint',
    'decode_signature',
    'decode_string',
    'decode_uint32',
    'encode_mpint',
    'encode_signature',
    'string',
    'uint32',
)
__author__ = 'Marco Ricci <software@the13thletter.info>'

# In SSH bytestrings, the "length" of the byte string is stored as
# a 4-byte/32-bit unsigned integer at the beginning.
HEAD_LEN = 4


class DecodeError(ValueError):
    """Key or signature material could not be decoded.

    This covers all structural problems: unknown algorithms or curves,
    wrong signature sizes, ASN.1 tag, class or arity mismatches,
    truncated input and trailing data.  A signature that decodes fine
    but does not verify is *not* a decoding error.

    """


def uint32(num: int, /) -> bytes:
    r"""Format the number as a `uint32`.

    Args:
        num: A number.

    Returns:
        The number in SSH wire format, i.e. as a 32-bit big endian
        number.

    Raises:
        OverflowError:
            As per [`int.to_bytes`][].

    Examples:
        >>> uint32(16777216)
        b'\x01\x00\x00\x00'

    """
    return int.to_bytes(num, HEAD_LEN, 'big', signed=False)


def string(payload: Buffer, /) -> bytes:
    r"""Format the payload as an SSH string.

    Args:
        payload: A bytes-like object.

    Returns:
        The payload, framed in the SSH wire format, as a bytes object.

    Raises:
        TypeError:
            The payload is not a bytes-like object.

    Examples:
        >>> string(b'ssh-dss')
        b'\x00\x00\x00\x07ssh-dss'

    """
    try:
        payload = memoryview(payload)
    except TypeError as e:
        msg = 'invalid payload type'
        raise TypeError(msg) from e
    ret = bytearray()
    ret.extend(uint32(len(payload)))
    ret.extend(payload)
    return bytes(ret)


def decode_uint32(buffer: Buffer, offset: int = 0, /) -> tuple[int, int]:
    """Decode a `uint32` at `offset`.

    Returns:
        A 2-tuple of the number and the number of bytes consumed
        (always 4).

    Raises:
        DecodeError:
            The buffer is too short.

    """
    view = memoryview(buffer)
    if offset < 0 or len(view) < offset + HEAD_LEN:
        msg = 'truncated uint32'
        raise DecodeError(msg)
    return (
        int.from_bytes(view[offset : offset + HEAD_LEN], 'big', signed=False),
        HEAD_LEN,
    )


def decode_string(buffer: Buffer, offset: int = 0, /) -> tuple[bytes, int]:
    r"""Decode an SSH string at `offset`.

    Args:
        buffer:
            A bytes-like object containing an SSH string at `offset`.
        offset:
            The position of the string's length header.

    Returns:
        A 2-tuple of the unframed payload and the number of bytes
        consumed, including the length header.

    Raises:
        DecodeError:
            The buffer does not contain a complete SSH string at
            `offset`.

    Examples:
        >>> decode_string(b'\x00\x00\x00\x07ssh-dss____trailing data')
        (b'ssh-dss', 11)

    """
    view = memoryview(buffer)
    n, head_len = decode_uint32(view, offset)
    start = offset + head_len
    if start + n > len(view):
        msg = 'malformed SSH byte string'
        raise DecodeError(msg)
    return bytes(view[start : start + n]), head_len + n


def encode_mpint(value: int, /) -> bytes:
    r"""Format the integer as an SSH `mpint`, including the length header.

    The encoding is the minimal two's complement big endian
    representation: zero is the empty string, and a leading zero byte
    is inserted only if a non-negative number would otherwise have its
    sign bit set.

    Examples:
        >>> encode_mpint(0)
        b'\x00\x00\x00\x00'
        >>> encode_mpint(0x80)
        b'\x00\x00\x00\x02\x00\x80'
        >>> encode_mpint(-1)
        b'\x00\x00\x00\x01\xff'

    """
    if not value:
        return string(b'')
    size = (value if value >= 0 else ~value).bit_length() // 8 + 1
    return string(value.to_bytes(size, 'big', signed=True))


def decode_mpint(buffer: Buffer, offset: int = 0, /) -> tuple[int, int]:
    r"""Decode an SSH `mpint` at `offset`.

    Args:
        buffer:
            A bytes-like object containing an `mpint` at `offset`.
        offset:
            The position of the `mpint`'s length header.

    Returns:
        A 2-tuple of the integer value and the number of bytes
        consumed, including the length header.

    Raises:
        DecodeError:
            The buffer is truncated, or the `mpint` is not minimally
            encoded.

    Examples:
        >>> decode_mpint(b'\x00\x00\x00\x02\x00\x80')
        (128, 6)

    """
    body, size = decode_string(buffer, offset)
    if body and (
        (body[0] == 0x00 and (len(body) == 1 or body[1] < 0x80))
        or (body[0] == 0xFF and len(body) > 1 and body[1] >= 0x80)
    ):
        msg = 'non-minimal mpint encoding'
        raise DecodeError(msg)
    return int.from_bytes(body, 'big', signed=True), size


def encode_signature(algorithm: str, payload: Buffer, /) -> bytes:
    r"""Wrap a signature blob into an SSH signature envelope.

    Examples:
        >>> encode_signature('ssh-dss', b'')
        b'\x00\x00\x00\x07ssh-dss\x00\x00\x00\x00'

    """
    return string(algorithm.encode('ascii')) + string(payload)


def decode_signature(
    blob: Buffer, offset: int = 0, /
) -> _types.SignatureEnvelope:
    """Decode an SSH signature envelope at `offset`.

    Args:
        blob:
            A bytes-like object containing the envelope at `offset`.
        offset:
            The starting position of the envelope.

    Returns:
        The algorithm name, the algorithm-specific payload, and the
        number of bytes consumed.  Any data after the envelope is left
        to the caller.

    Raises:
        DecodeError:
            The envelope is truncated.

    """
    algorithm, algorithm_size = decode_string(blob, offset)
    payload, payload_size = decode_string(blob, offset + algorithm_size)
    return _types.SignatureEnvelope(
        algorithm.decode('utf-8', 'surrogateescape'),
        payload,
        algorithm_size + payload_size,
    )
