# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

# ruff: noqa: TRY400

"""Command-line interface for sshkeycodec."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO, Final

import click

from sshkeycodec import _internals, asn1, keys, wire
from sshkeycodec._internals import cli_machinery

if TYPE_CHECKING:
    from typing_extensions import Any

__all__ = ('sshkeycodec',)

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION
PUBLIC_KEY_ENVVAR = 'SSHKEYCODEC_PUBLIC_KEY'


def _hex_argument(
    ctx: click.Context,
    param: click.Parameter,
    value: Any,  # noqa: ANN401
) -> bytes:
    """Parse a hexadecimal command-line argument into bytes.

    Whitespace and colons between the hex digits are ignored.

    Raises:
        click.BadParameter: The value is not a hexadecimal string.

    """
    del ctx, param
    if isinstance(value, bytes):
        return value
    cleaned = ''.join(value.split()).replace(':', '')
    try:
        return bytes.fromhex(cleaned)
    except ValueError as exc:
        msg = 'not a hexadecimal string'
        raise click.BadParameter(msg) from exc


@click.group(
    context_settings={'help_option_names': ['-h', '--help']},
    cls=cli_machinery.TopLevelCLIEntryPoint,
)
@cli_machinery.version_option
@cli_machinery.standard_logging_options
def sshkeycodec() -> None:
    """Verify SSH signatures, and convert them between SSH and DER.

    This is a [`click`][CLICK]-powered command-line interface function,
    and not intended for programmatic use.  (See
    [`click.testing.CliRunner`][] for controlled, programmatic
    invocation.)

    [CLICK]: https://pypi.org/package/click/

    """


@sshkeycodec.command(
    'verify', context_settings={'help_option_names': ['-h', '--help']}
)
@click.option(
    '-k',
    '--public-key',
    'public_key_line',
    metavar='LINE',
    required=True,
    envvar=PUBLIC_KEY_ENVVAR,
    show_envvar=True,
    help='the public key, in OpenSSH one-line format',
)
@click.argument('signature_file', type=click.File('rb'))
@click.argument('data_file', type=click.File('rb'))
@cli_machinery.standard_logging_options
@click.pass_context
def sshkeycodec_verify(
    ctx: click.Context,
    /,
    *,
    public_key_line: str,
    signature_file: BinaryIO,
    data_file: BinaryIO,
) -> None:
    """Verify an SSH signature over a file.

    SIGNATURE_FILE holds the raw SSH signature (algorithm name and
    signature blob, each as an SSH string).  DATA_FILE holds the signed
    data.  Exit with status 0 if the signature verifies, and with
    status 1 otherwise.

    """
    logger: Final = logging.getLogger(PROG_NAME)
    try:
        key = keys.parse_authorized_key(public_key_line)
    except wire.DecodeError as exc:
        logger.error(
            'Cannot parse public key: %s', exc, extra={'color': ctx.color}
        )
        ctx.exit(1)
    logger.info(
        'Verifying with %s key %s',
        key.algorithm,
        key.fingerprint(),
        extra={'color': ctx.color},
    )
    signature = signature_file.read()
    signed_data = data_file.read()
    try:
        ok = key.verify(signed_data, signature)
    except wire.DecodeError as exc:
        logger.error(
            'Cannot decode signature: %s', exc, extra={'color': ctx.color}
        )
        ctx.exit(1)
    if not ok:
        logger.error('Bad signature.', extra={'color': ctx.color})
        ctx.exit(1)
    click.echo(
        f'Good {key.algorithm} signature from {key.fingerprint()}',
        color=ctx.color,
    )


def _convert_signature(
    ctx: click.Context,
    algorithm: str,
    signature: bytes,
    *,
    direction: str,
) -> None:
    logger: Final = logging.getLogger(PROG_NAME)
    try:
        variant = keys.resolve(algorithm)
        converted = (
            variant.to_der(signature)
            if direction == 'der'
            else variant.to_wire(signature)
        )
    except wire.DecodeError as exc:
        logger.error(
            'Cannot convert signature: %s', exc, extra={'color': ctx.color}
        )
        ctx.exit(1)
    logger.debug(
        'Converted %d bytes to %d bytes via %s',
        len(signature),
        len(converted),
        variant.__name__,
    )
    click.echo(converted.hex(), color=ctx.color)


@sshkeycodec.command(
    'to-der', context_settings={'help_option_names': ['-h', '--help']}
)
@click.argument('algorithm')
@click.argument('signature', metavar='HEX_PAYLOAD', callback=_hex_argument)
@cli_machinery.standard_logging_options
@click.pass_context
def sshkeycodec_to_der(
    ctx: click.Context,
    /,
    *,
    algorithm: str,
    signature: bytes,
) -> None:
    """Convert an SSH signature blob to DER.

    ALGORITHM is the SSH key algorithm (e.g. ecdsa-sha2-nistp256 or
    ssh-dss).  HEX_PAYLOAD is the algorithm-specific signature blob,
    i.e. without the algorithm name, in hexadecimal.  The DER signature
    is printed in hexadecimal.

    """
    _convert_signature(ctx, algorithm, signature, direction='der')


@sshkeycodec.command(
    'to-wire', context_settings={'help_option_names': ['-h', '--help']}
)
@click.argument('algorithm')
@click.argument('signature', metavar='HEX_DER', callback=_hex_argument)
@cli_machinery.standard_logging_options
@click.pass_context
def sshkeycodec_to_wire(
    ctx: click.Context,
    /,
    *,
    algorithm: str,
    signature: bytes,
) -> None:
    """Convert a DER signature to an SSH signature blob.

    ALGORITHM is the SSH key algorithm (e.g. ecdsa-sha2-nistp256 or
    ssh-dss).  HEX_DER is the DER-encoded signature in hexadecimal.
    The SSH signature blob is printed in hexadecimal.

    """
    _convert_signature(ctx, algorithm, signature, direction='wire')


@sshkeycodec.command(
    'info', context_settings={'help_option_names': ['-h', '--help']}
)
@click.argument('line')
@cli_machinery.standard_logging_options
@click.pass_context
def sshkeycodec_info(ctx: click.Context, /, *, line: str) -> None:
    """Describe a public key given in OpenSSH one-line format.

    Prints the algorithm, the SHA256 fingerprint, and the DER-encoded
    SubjectPublicKeyInfo structure (in hexadecimal) of the key.

    """
    logger: Final = logging.getLogger(PROG_NAME)
    try:
        key = keys.parse_authorized_key(line)
    except wire.DecodeError as exc:
        logger.error(
            'Cannot parse public key: %s', exc, extra={'color': ctx.color}
        )
        ctx.exit(1)
    click.echo(f'algorithm: {key.algorithm}', color=ctx.color)
    click.echo(f'fingerprint: {key.fingerprint()}', color=ctx.color)
    click.echo(f'der: {asn1.encode(key.asn1()).hex()}', color=ctx.color)


if __name__ == '__main__':
    sshkeycodec()
