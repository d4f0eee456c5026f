# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib

"""sshkeycodec internals.

Warning:
    Non-public package (implementation detail), provided for didactical
    and educational purposes only. Subject to change without notice,
    including removal.

"""

import sshkeycodec

__all__ = ()

PROG_NAME = sshkeycodec.__distribution_name__
VERSION = sshkeycodec.__version__
AUTHOR = sshkeycodec.__author__
