# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING

import hypothesis
import pytest

import tests
from sshkeycodec import _types
from sshkeycodec._internals import cli_machinery

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sshkeycodec.keys import dsa, ecdsa

# https://hypothesis.readthedocs.io/en/latest/settings.html#settings-profiles
hypothesis.settings.register_profile('ci', max_examples=1000)
hypothesis.settings.register_profile('dev', max_examples=10)
hypothesis.settings.register_profile(
    'debug', max_examples=10, verbosity=hypothesis.Verbosity.verbose
)
hypothesis.settings.register_profile(
    'flaky', deadline=datetime.timedelta(milliseconds=150)
)


# Key generation (DSA in particular) is slow, so generate each test key
# once per session.
@pytest.fixture(scope='session')
def dsa_private_key() -> dsa.DSAPrivateKey:
    """A 1024-bit DSA private key, as a pytest fixture."""
    return tests.generate_dsa_key(1024, comment='DSA test key')


@pytest.fixture(scope='session')
def ecdsa_private_keys() -> dict[_types.Curve, ecdsa.ECDSAPrivateKey]:
    """One ECDSA private key per supported curve, as a pytest fixture."""
    return {
        curve: tests.generate_ecdsa_key(
            curve, comment=f'ECDSA {curve.value} test key'
        )
        for curve in _types.Curve
    }


@pytest.fixture(params=list(_types.Curve), ids=lambda c: c.value)
def ecdsa_private_key(
    request: pytest.FixtureRequest,
    ecdsa_private_keys: dict[_types.Curve, ecdsa.ECDSAPrivateKey],
) -> ecdsa.ECDSAPrivateKey:
    """An ECDSA private key, parametrized over all curves."""
    return ecdsa_private_keys[request.param]


@pytest.fixture
def cli_logging() -> Iterator[None]:
    """Route CLI log output to standard error, as a pytest fixture.

    [`click.testing.CliRunner`][] bypasses the top-level entry point,
    which would otherwise set up logging.  The logging levels, which the
    `--verbose`, `--quiet` and `--debug` options change globally, are
    restored afterwards.

    """
    handler = cli_machinery.StandardCLILogging.cli_handler
    logger = logging.getLogger(cli_machinery.StandardCLILogging.package_name)
    handler_level = handler.level
    logger_level = logger.level
    try:
        with cli_machinery.StandardCLILogging.ensure_standard_logging():
            yield
    finally:
        handler.setLevel(handler_level)
        logger.setLevel(logger_level)
