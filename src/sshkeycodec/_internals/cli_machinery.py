# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib


"""Command-line machinery for sshkeycodec.

Warning:
    Non-public module (implementation detail), provided for didactical and
    educational purposes only. Subject to change without notice, including
    removal.

"""

from __future__ import annotations

import collections
import importlib.metadata
import logging
from typing import TYPE_CHECKING, Callable, Literal, TypeVar

import click
from typing_extensions import Any, ParamSpec

from sshkeycodec import _internals

if TYPE_CHECKING:
    import types
    from collections.abc import MutableSequence

    from typing_extensions import Self

PROG_NAME = _internals.PROG_NAME
VERSION = _internals.VERSION
MAJOR_DEPENDENCIES = ('cryptography', 'pyasn1', 'click')


# Logging
# =======


class ClickEchoStderrHandler(logging.Handler):
    """A [`logging.Handler`][] writing to standard error via `click`."""

    def emit(self, record: logging.LogRecord) -> None:
        click.echo(
            self.format(record),
            err=True,
            color=getattr(record, 'color', None),
        )


class CLIofPackageFormatter(logging.Formatter):
    """Format the package's log records as CLI diagnostics.

    Every line of the message is prefixed with `"PROG_NAME: "` and
    a level label: `"Debug: "` for debug records, `"Warning: "` for
    warnings, and nothing for informational messages and errors.  The
    traceback, if any, is appended as is.

    """

    def __init__(
        self,
        *,
        prog_name: str = PROG_NAME,
        package_name: str | None = None,
    ) -> None:
        super().__init__()
        self.prog_name = prog_name
        self.package_name = (
            package_name
            if package_name is not None
            else prog_name.lower().replace(' ', '_').replace('-', '_')
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record for console output on standard error.

        Raises:
            AssertionError:
                The log level is not supported.

        """
        message = record.getMessage()
        prefix = f'{self.prog_name}: '
        if record.levelname == 'DEBUG':
            level_indicator = 'Debug: '
        elif record.levelname in {'INFO', 'ERROR', 'CRITICAL'}:
            level_indicator = ''
        elif record.levelname == 'WARNING':
            level_indicator = f'{click.style("Warning", bold=True)}: '
        else:  # pragma: no cover [failsafe]
            msg = f'Unsupported logging level: {record.levelname}'
            raise AssertionError(msg)
        parts = [
            ''.join(
                prefix + level_indicator + line
                for line in message.splitlines(True)  # noqa: FBT003
            )
        ]
        if record.exc_info:
            parts.append(self.formatException(record.exc_info) + '\n')
        return ''.join(parts)


class StandardCLILogging:
    """The CLI log handler of the package, and its configuration."""

    prog_name = PROG_NAME
    package_name = PROG_NAME.lower().replace(' ', '_').replace('-', '_')
    cli_formatter = CLIofPackageFormatter(
        prog_name=prog_name, package_name=package_name
    )
    cli_handler = ClickEchoStderrHandler()
    cli_handler.addFilter(logging.Filter(name=package_name))
    cli_handler.setFormatter(cli_formatter)
    cli_handler.setLevel(logging.WARNING)

    @classmethod
    def ensure_standard_logging(cls) -> StandardLoggingContextManager:
        """Return a context manager to ensure standard logging is set up."""
        return StandardLoggingContextManager(
            handler=cls.cli_handler,
            root_logger=cls.package_name,
        )


class StandardLoggingContextManager:
    """A reentrant context manager attaching a handler to a logger.

    The handler is only added (and later removed) if the logger does
    not have it already.  Not thread safe, as it modifies global state.

    """

    def __init__(
        self,
        handler: logging.Handler,
        root_logger: str | None = None,
    ) -> None:
        self.handler = handler
        self.root_logger_name = root_logger
        self.base_logger = logging.getLogger(self.root_logger_name)
        self.action_required: MutableSequence[bool] = collections.deque()

    def __enter__(self) -> Self:
        self.action_required.append(
            self.handler not in self.base_logger.handlers
        )
        if self.action_required[-1]:
            self.base_logger.addHandler(self.handler)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> Literal[False]:
        if self.action_required.pop():
            self.base_logger.removeHandler(self.handler)
        return False


P = ParamSpec('P')
R = TypeVar('R')


def adjust_logging_level(
    ctx: click.Context,
    /,
    param: click.Parameter | None = None,
    value: int | None = None,
) -> None:
    """Change the level of the logs emitted to standard error."""
    # Each of the logging options calls back here, so this must be
    # idempotent.
    if param is None or not value or ctx.resilient_parsing:
        return
    StandardCLILogging.cli_handler.setLevel(value)
    logging.getLogger(StandardCLILogging.package_name).setLevel(value)


# Commands
# ========


class TopLevelCLIEntryPoint(click.Group):
    """A [`click.Group`][] that sets up CLI logging when called.

    Calling the `.main` method directly bypasses the setup; this is what
    [`click.testing.CliRunner`][] does.

    """

    def __call__(  # pragma: no cover [external-api]
        self,
        *args: Any,  # noqa: ANN401
        **kwargs: Any,  # noqa: ANN401
    ) -> Any:  # noqa: ANN401
        """"""  # noqa: D419
        with StandardCLILogging.ensure_standard_logging():
            return self.main(*args, **kwargs)


# Options
# =======


def version_option_callback(
    ctx: click.Context,
    param: click.Parameter,
    value: bool,  # noqa: FBT001
) -> None:
    """Print the program version and the major library versions."""
    del param
    if not value or ctx.resilient_parsing:
        return
    click.echo(
        ' '.join([click.style(PROG_NAME, bold=True), VERSION]),
        color=ctx.color,
    )
    for dependency in MAJOR_DEPENDENCIES:
        try:
            dependency_version = importlib.metadata.version(dependency)
        except importlib.metadata.PackageNotFoundError:  # pragma: no cover
            continue
        click.echo(
            f'Using {dependency} {dependency_version}.', color=ctx.color
        )
    ctx.exit()


version_option = click.option(
    '--version',
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=version_option_callback,
    help='Show the version and exit.',
)

debug_option = click.option(
    '--debug',
    'logging_level',
    is_flag=True,
    flag_value=logging.DEBUG,
    expose_value=False,
    callback=adjust_logging_level,
    help='Also emit debug information.  Implies --verbose.',
)
verbose_option = click.option(
    '-v',
    '--verbose',
    'logging_level',
    is_flag=True,
    flag_value=logging.INFO,
    expose_value=False,
    callback=adjust_logging_level,
    help='Emit extra/progress information to standard error.',
)
quiet_option = click.option(
    '-q',
    '--quiet',
    'logging_level',
    is_flag=True,
    flag_value=logging.ERROR,
    expose_value=False,
    callback=adjust_logging_level,
    help='Suppress even warnings; emit only errors.',
)


def standard_logging_options(f: Callable[P, R]) -> Callable[P, R]:
    """Decorate the function with standard logging click options.

    Adds the three click options `-v`/`--verbose`, `-q`/`--quiet` and
    `--debug`, which call back into [`adjust_logging_level`][].

    Args:
        f: A callable to decorate.

    Returns:
        The decorated callable.

    """
    return debug_option(verbose_option(quiet_option(f)))
