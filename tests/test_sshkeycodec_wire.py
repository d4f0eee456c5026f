# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Test the SSH wire format primitives."""

from __future__ import annotations

from typing import TYPE_CHECKING

import hypothesis
import pytest
from hypothesis import strategies

import tests
from sshkeycodec import _types, wire

if TYPE_CHECKING:
    from typing_extensions import Any


class TestStaticFunctionality:
    """Test the static functionality of the `wire` module."""

    @pytest.mark.parametrize(
        ['input', 'expected'],
        [
            pytest.param(16777216, b'\x01\x00\x00\x00', id='16777216'),
            pytest.param(0, b'\x00\x00\x00\x00', id='0'),
        ],
    )
    def test_210_uint32(self, input: int, expected: bytes) -> None:
        """`uint32` encoding works."""
        assert wire.uint32(input) == expected

    @hypothesis.given(strategies.integers(min_value=0, max_value=0xFFFFFFFF))
    @hypothesis.example(0xDEADBEEF).via('manual, pre-hypothesis example')
    def test_210a_uint32_decoding(self, num: int) -> None:
        """`uint32` decoding inverts encoding, at any offset."""
        assert wire.decode_uint32(wire.uint32(num)) == (num, 4)
        assert wire.decode_uint32(b'xyz' + wire.uint32(num), 3) == (num, 4)

    @pytest.mark.parametrize(
        ['input', 'expected'],
        [
            pytest.param(
                b'ssh-dss',
                b'\x00\x00\x00\x07ssh-dss',
                id='ssh-dss',
            ),
            pytest.param(
                b'ecdsa-sha2-nistp256',
                b'\x00\x00\x00\x13ecdsa-sha2-nistp256',
                id='ecdsa-sha2-nistp256',
            ),
            pytest.param(b'', b'\x00\x00\x00\x00', id='empty'),
        ],
    )
    def test_211_string(self, input: bytes, expected: bytes) -> None:
        """SSH string encoding works."""
        assert wire.string(input) == expected

    @pytest.mark.parametrize(
        ['input', 'offset', 'expected'],
        [
            pytest.param(
                b'\x00\x00\x00\x07ssh-dss',
                0,
                (b'ssh-dss', 11),
                id='ssh-dss',
            ),
            pytest.param(
                b'\x00\x00\x00\x07ssh-dss\x00\x00\x00\x00trailing',
                11,
                (b'', 4),
                id='empty-at-offset',
            ),
        ],
    )
    def test_212_decode_string(
        self, input: bytes, offset: int, expected: tuple[bytes, int]
    ) -> None:
        """SSH string decoding works."""
        assert wire.decode_string(input, offset) == expected

    @pytest.mark.parametrize(
        ['value', 'expected'],
        [
            pytest.param(0, b'\x00\x00\x00\x00', id='0'),
            pytest.param(
                0x9A378F9B2E332A7,
                b'\x00\x00\x00\x08\x09\xa3\x78\xf9\xb2\xe3\x32\xa7',
                id='0x9a378f9b2e332a7',
            ),
            pytest.param(0x80, b'\x00\x00\x00\x02\x00\x80', id='0x80'),
            pytest.param(0x7F, b'\x00\x00\x00\x01\x7f', id='0x7f'),
            pytest.param(-1, b'\x00\x00\x00\x01\xff', id='-1'),
            pytest.param(-0x80, b'\x00\x00\x00\x01\x80', id='-0x80'),
            pytest.param(-0x1234, b'\x00\x00\x00\x02\xed\xcc', id='-0x1234'),
            pytest.param(
                -0xDEADBEEF,
                b'\x00\x00\x00\x05\xff\x21\x52\x41\x11',
                id='-0xdeadbeef',
            ),
        ],
    )
    def test_220_mpint(self, value: int, expected: bytes) -> None:
        """`mpint` encoding and decoding match the RFC 4251 examples."""
        assert wire.encode_mpint(value) == expected
        assert wire.decode_mpint(expected) == (value, len(expected))

    @hypothesis.given(strategies.integers())
    @hypothesis.example(0).via('zero is the empty string')
    @hypothesis.example(0xFF).via('needs a sign-disambiguating zero byte')
    @hypothesis.example(-0x81).via('needs a sign-disambiguating 0xFF byte')
    def test_220a_mpint_is_minimal(self, value: int) -> None:
        """`mpint` encoding is minimal, and decodes to the same number."""
        encoded = wire.encode_mpint(value)
        body = encoded[4:]
        assert wire.decode_mpint(encoded) == (value, len(encoded))
        if value:
            assert body
            shorter = body[1:]
            assert (
                not shorter
                or int.from_bytes(shorter, 'big', signed=True) != value
            )
        else:
            assert not body

    @hypothesis.given(
        strategies.lists(strategies.integers(), min_size=1, max_size=8)
    )
    def test_220b_mpint_sequence(self, values: list[int]) -> None:
        """Consecutive `mpint`s can be walked via the consumed sizes."""
        blob = b''.join(wire.encode_mpint(v) for v in values)
        offset = 0
        decoded: list[int] = []
        while offset < len(blob):
            value, size = wire.decode_mpint(blob, offset)
            decoded.append(value)
            offset += size
        assert decoded == values
        assert offset == len(blob)

    @pytest.mark.parametrize(
        ['algorithm', 'payload', 'trailer'],
        [
            pytest.param('ssh-dss', bytes(range(40)), b'', id='ssh-dss'),
            pytest.param(
                'ecdsa-sha2-nistp256',
                wire.encode_mpint(1) + wire.encode_mpint(2),
                b'trailing data',
                id='ecdsa-sha2-nistp256-trailing-data',
            ),
            pytest.param('', b'', b'', id='empty'),
        ],
    )
    def test_230_signature_envelope(
        self, algorithm: str, payload: bytes, trailer: bytes
    ) -> None:
        """Signature envelopes decode to their name and payload."""
        encoded = wire.encode_signature(algorithm, payload)
        assert encoded == wire.string(algorithm.encode()) + wire.string(
            payload
        )
        envelope = wire.decode_signature(encoded + trailer)
        assert envelope == _types.SignatureEnvelope(
            algorithm, payload, len(encoded)
        )

    def test_231_signature_envelope_at_offset(self) -> None:
        """Signature envelopes can be decoded at an offset."""
        prefix = wire.string(b'some other field')
        encoded = wire.encode_signature('ssh-dss', b'\x01' * 40)
        envelope = wire.decode_signature(prefix + encoded, len(prefix))
        assert envelope.algorithm == 'ssh-dss'
        assert envelope.payload == b'\x01' * 40
        assert envelope.size == len(encoded)

    @pytest.mark.parametrize(
        ['value', 'exc_type', 'exc_pattern'],
        [
            pytest.param(
                10000000000000000,
                OverflowError,
                'int too big to convert',
                id='10000000000000000',
            ),
            pytest.param(
                -1,
                OverflowError,
                "can't convert negative int to unsigned",
                id='-1',
            ),
        ],
    )
    def test_310_uint32_exceptions(
        self, value: int, exc_type: type[Exception], exc_pattern: str
    ) -> None:
        """`uint32` encoding fails for out-of-bound values."""
        with pytest.raises(exc_type, match=exc_pattern):
            wire.uint32(value)

    @pytest.mark.parametrize(
        ['input', 'exc_type', 'exc_pattern'],
        [
            pytest.param(
                'some string', TypeError, 'invalid payload type', id='str'
            ),
        ],
    )
    def test_311_string_exceptions(
        self, input: Any, exc_type: type[Exception], exc_pattern: str
    ) -> None:
        """SSH string encoding fails for non-strings."""
        with pytest.raises(exc_type, match=exc_pattern):
            wire.string(input)

    @pytest.mark.parametrize(
        ['input', 'exc_pattern'],
        [
            pytest.param(b'ssh', 'truncated uint32', id='unencoded'),
            pytest.param(
                b'\x00\x00\x00\x08ssh-dss',
                'malformed SSH byte string',
                id='truncated',
            ),
        ],
    )
    def test_312_decode_string_exceptions(
        self, input: bytes, exc_pattern: str
    ) -> None:
        """SSH string decoding fails for truncated input."""
        with pytest.raises(wire.DecodeError, match=exc_pattern):
            wire.decode_string(input)

    @pytest.mark.parametrize(
        ['input', 'exc_pattern'],
        [
            pytest.param(
                tests.raw_mpint(b'\x00'),
                'non-minimal mpint encoding',
                id='zero-as-00',
            ),
            pytest.param(
                tests.raw_mpint(b'\x00\x01'),
                'non-minimal mpint encoding',
                id='redundant-00',
            ),
            pytest.param(
                tests.raw_mpint(b'\xff\x80'),
                'non-minimal mpint encoding',
                id='redundant-ff',
            ),
            pytest.param(b'\x00\x00\x00', 'truncated uint32', id='no-header'),
            pytest.param(
                b'\x00\x00\x00\x02\x01',
                'malformed SSH byte string',
                id='truncated-body',
            ),
        ],
    )
    def test_320_mpint_exceptions(
        self, input: bytes, exc_pattern: str
    ) -> None:
        """`mpint` decoding fails for truncated or non-minimal input."""
        with pytest.raises(wire.DecodeError, match=exc_pattern):
            wire.decode_mpint(input)

    @pytest.mark.parametrize(
        'input',
        [
            pytest.param(b'', id='empty'),
            pytest.param(wire.string(b'ssh-dss'), id='missing-payload'),
            pytest.param(
                wire.string(b'ssh-dss') + b'\x00\x00\x00\x28' + b'\x00' * 39,
                id='truncated-payload',
            ),
        ],
    )
    def test_330_signature_envelope_exceptions(self, input: bytes) -> None:
        """Signature envelope decoding fails for truncated input."""
        with pytest.raises(wire.DecodeError):
            wire.decode_signature(input)

    def test_340_decode_error_is_value_error(self) -> None:
        """Decoding errors are value errors."""
        assert issubclass(wire.DecodeError, ValueError)
