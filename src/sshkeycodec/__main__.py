# SPDX-FileCopyrightText: 2025 Marco Ricci <software@the13thletter.info>
#
# SPDX-License-Identifier: Zlib
"""Run [`sshkeycodec.cli.sshkeycodec`][] on import."""

import sys

if __name__ == '__main__':
    from sshkeycodec.cli import sshkeycodec

    sys.exit(sshkeycodec())
