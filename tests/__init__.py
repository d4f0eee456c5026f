# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import base64
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dsa, ec
from hypothesis import strategies
from typing_extensions import NamedTuple, Self

from sshkeycodec import _types, wire
from sshkeycodec.keys import dsa as dsa_keys
from sshkeycodec.keys import ecdsa as ecdsa_keys

__all__ = ()

if TYPE_CHECKING:
    import click.testing

    from sshkeycodec import keys


class KnownCurve(NamedTuple):
    """Expected provider-side data for an SSH curve."""

    curve: _types.Curve
    algorithm: _types.KeyAlgorithm
    backend_name: str
    digest_name: str
    oid: str


KNOWN_CURVES: list[KnownCurve] = [
    KnownCurve(
        _types.Curve.NISTP256,
        _types.KeyAlgorithm.ECDSA_NISTP256,
        'prime256v1',
        'sha256',
        '1.2.840.10045.3.1.7',
    ),
    KnownCurve(
        _types.Curve.NISTP384,
        _types.KeyAlgorithm.ECDSA_NISTP384,
        'secp384r1',
        'sha384',
        '1.3.132.0.34',
    ),
    KnownCurve(
        _types.Curve.NISTP521,
        _types.KeyAlgorithm.ECDSA_NISTP521,
        'secp521r1',
        'sha512',
        '1.3.132.0.35',
    ),
]


def generate_ecdsa_key(
    curve: _types.Curve, /, *, comment: str = ''
) -> ecdsa_keys.ECDSAPrivateKey:
    """Generate a fresh ECDSA private key on `curve`."""
    params = ecdsa_keys.CURVE_PARAMETERS[curve]
    handle = ec.generate_private_key(params.curve())
    point = handle.public_key().public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )
    return ecdsa_keys.ECDSAPrivateKey(
        algorithm=f'ecdsa-sha2-{curve.value}',
        curve=curve.value,
        public_key=point,
        private_key=handle.private_numbers().private_value,
        comment=comment,
    )


def generate_dsa_key(
    key_size: int = 1024, /, *, comment: str = ''
) -> dsa_keys.DSAPrivateKey:
    """Generate a fresh DSA private key.

    At 1024 bits, the subgroup order `q` has 160 bits, as SSH requires.

    """
    numbers = dsa.generate_private_key(key_size).private_numbers()
    params = numbers.public_numbers.parameter_numbers
    return dsa_keys.DSAPrivateKey(
        algorithm=_types.KeyAlgorithm.DSA.value,
        p=params.p,
        q=params.q,
        g=params.g,
        x=numbers.x,
        y=numbers.public_numbers.y,
        comment=comment,
    )


def authorized_key_line(key: keys.PublicKey, /, comment: str = '') -> str:
    """Format the public key in OpenSSH one-line format."""
    line = f'{key.algorithm} {base64.b64encode(key.to_blob()).decode("ascii")}'
    return f'{line} {comment}' if comment else line


def raw_mpint(body: bytes, /) -> bytes:
    """Frame an arbitrary (possibly non-minimal) `mpint` body."""
    return wire.string(body)


@strategies.composite
def der_integer_pairs(
    draw: strategies.DrawFn,
    *,
    max_bits: int = 521,
) -> tuple[int, int]:
    """Draw a pair of positive integers as found in signatures."""
    r = draw(strategies.integers(min_value=1, max_value=(1 << max_bits) - 1))
    s = draw(strategies.integers(min_value=1, max_value=(1 << max_bits) - 1))
    return r, s


class ReadableResult(NamedTuple):
    """Helper class for formatting and testing click.testing.Result objects."""

    exception: BaseException | None
    exit_code: int
    output: str
    stderr: str

    @classmethod
    def parse(cls, r: click.testing.Result, /) -> Self:
        try:
            stderr = r.stderr
        except ValueError:
            stderr = r.output
        return cls(r.exception, r.exit_code, r.output or '', stderr or '')

    def clean_exit(
        self, *, output: str = '', empty_stderr: bool = False
    ) -> bool:
        """Return whether the invocation exited cleanly.

        Args:
            output:
                An expected output string.
            empty_stderr:
                Whether standard error must be empty.

        """
        return (
            (
                not self.exception
                or (
                    isinstance(self.exception, SystemExit)
                    and self.exit_code == 0
                )
            )
            and (not output or output in self.output)
            and (not empty_stderr or not self.stderr)
        )

    def error_exit(
        self, *, error: str | type[BaseException] = BaseException
    ) -> bool:
        """Return whether the invocation exited uncleanly.

        Args:
            error:
                An expected error message, or an expected exception
                type.

        """
        if isinstance(error, str):
            return (
                isinstance(self.exception, SystemExit)
                and self.exit_code > 0
                and (not error or error in self.stderr)
            )
        else:  # noqa: RET505
            return isinstance(self.exception, error)
