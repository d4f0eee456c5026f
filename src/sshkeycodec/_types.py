# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""Types used by sshkeycodec."""

from __future__ import annotations

import enum

from typing_extensions import NamedTuple

__all__ = (
    'Curve',
    'KeyAlgorithm',
    'SignatureEnvelope',
)


class KeyAlgorithm(str, enum.Enum):
    """SSH public key algorithm identifiers.

    This is the closed set of identifiers with a registered key variant.
    Being a `str` subclass, each member compares equal to its wire
    name.

    Attributes:
        ECDSA_NISTP256:
            ECDSA over NIST P-256 with SHA-256.  See [RFC 5656][].
        ECDSA_NISTP384:
            ECDSA over NIST P-384 with SHA-384.  See [RFC 5656][].
        ECDSA_NISTP521:
            ECDSA over NIST P-521 with SHA-512.  See [RFC 5656][].
        DSA:
            DSA with SHA-1.  See [RFC 4253][].

    [RFC 4253]: https://www.rfc-editor.org/rfc/rfc4253
    [RFC 5656]: https://www.rfc-editor.org/rfc/rfc5656

    """

    ECDSA_NISTP256 = 'ecdsa-sha2-nistp256'
    """"""
    ECDSA_NISTP384 = 'ecdsa-sha2-nistp384'
    """"""
    ECDSA_NISTP521 = 'ecdsa-sha2-nistp521'
    """"""
    DSA = 'ssh-dss'
    """"""


class Curve(str, enum.Enum):
    """SSH names of the supported elliptic curves.

    Attributes:
        NISTP256: NIST P-256, a.k.a. `prime256v1`/`secp256r1`.
        NISTP384: NIST P-384, a.k.a. `secp384r1`.
        NISTP521: NIST P-521, a.k.a. `secp521r1`.

    """

    NISTP256 = 'nistp256'
    """"""
    NISTP384 = 'nistp384'
    """"""
    NISTP521 = 'nistp521'
    """"""


class SignatureEnvelope(NamedTuple):
    """A decoded SSH signature envelope.

    Attributes:
        algorithm:
            The signature algorithm name, e.g. `ecdsa-sha2-nistp256`.
        payload:
            The algorithm-specific signature blob.
        size:
            The number of bytes of input consumed by the envelope.

    """

    algorithm: str
    """"""
    payload: bytes
    """"""
    size: int
    """"""
