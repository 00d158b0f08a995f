#
# gitlet - Simple gitlet command line interface
# Copyright (C) 2026 The Gitlet Authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# Gitlet is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Command-line interface to gitlet.

Each subcommand is a Command subclass registered in the ``commands`` table;
main() is the single dispatcher. A command that fails prints the error
message on stdout and the process exits with status 1.
"""

__all__ = [
    "Command",
    "commands",
    "main",
]

import argparse
import logging
import os
import signal
import sys
import types
from collections.abc import Sequence
from typing import NoReturn

from . import porcelain
from .errors import GitletError, InvalidOperand
from .file import FileLocked
from .log_utils import default_logging_config
from .repo import Repo

logger = logging.getLogger(__name__)

INCORRECT_OPERANDS = "Incorrect operands."


def signal_int(signal: int, frame: types.FrameType | None) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


class OperandParser(argparse.ArgumentParser):
    """Argument parser that reports misuse as InvalidOperand."""

    def error(self, message: str) -> NoReturn:
        logger.debug("%s: %s", self.prog, message)
        raise InvalidOperand(INCORRECT_OPERANDS)


def _abspath(path: str) -> str:
    return os.path.abspath(path)


class Command:
    """A gitlet subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_init(Command):
    """Create a new repository in the current directory."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="init")
        parser.parse_args(args)
        porcelain.init(os.getcwd())


class cmd_add(Command):
    """Stage a file for the next commit."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="add")
        parser.add_argument("path")
        parsed_args = parser.parse_args(args)
        porcelain.add(Repo.discover(), _abspath(parsed_args.path))


class cmd_commit(Command):
    """Record the staged changes as a new commit."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="commit")
        parser.add_argument("message", nargs="?", default="")
        parsed_args = parser.parse_args(args)
        porcelain.commit(Repo.discover(), message=parsed_args.message)


class cmd_rm(Command):
    """Unstage a file, and remove it if it is tracked."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="rm")
        parser.add_argument("path")
        parsed_args = parser.parse_args(args)
        porcelain.rm(Repo.discover(), _abspath(parsed_args.path))


class cmd_log(Command):
    """Show the history of the active branch."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="log")
        parser.parse_args(args)
        porcelain.log(Repo.discover(), outstream=sys.stdout)


class cmd_global_log(Command):
    """Show every commit ever made."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="global-log")
        parser.parse_args(args)
        porcelain.global_log(Repo.discover(), outstream=sys.stdout)


class cmd_find(Command):
    """Print the ids of all commits with a given message."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="find")
        parser.add_argument("message")
        parsed_args = parser.parse_args(args)
        porcelain.find(Repo.discover(), parsed_args.message, outstream=sys.stdout)


class cmd_status(Command):
    """Show branches, staged changes and working-tree changes."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="status")
        parser.parse_args(args)
        porcelain.status(Repo.discover(), outstream=sys.stdout)


class cmd_checkout(Command):
    """Restore a file, or switch branches.

    Usage:
      checkout -- <file>
      checkout <commit id> -- <file>
      checkout <branch>
    """

    def run(self, args: Sequence[str]) -> None:
        args = list(args)
        if len(args) == 2 and args[0] == "--":
            porcelain.checkout_file(Repo.discover(), _abspath(args[1]))
        elif len(args) == 3 and args[1] == "--":
            porcelain.checkout_file(
                Repo.discover(), _abspath(args[2]), committish=args[0]
            )
        elif len(args) == 1 and args[0] != "--":
            porcelain.checkout_branch(Repo.discover(), args[0])
        else:
            raise InvalidOperand(INCORRECT_OPERANDS)


class cmd_branch(Command):
    """Create a branch at the current commit."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="branch")
        parser.add_argument("name")
        parsed_args = parser.parse_args(args)
        porcelain.branch_create(Repo.discover(), parsed_args.name)


class cmd_rm_branch(Command):
    """Delete a branch."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="rm-branch")
        parser.add_argument("name")
        parsed_args = parser.parse_args(args)
        porcelain.branch_delete(Repo.discover(), parsed_args.name)


class cmd_reset(Command):
    """Check out a commit and move the active branch to it."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="reset")
        parser.add_argument("commit")
        parsed_args = parser.parse_args(args)
        porcelain.reset(Repo.discover(), parsed_args.commit)


class cmd_merge(Command):
    """Merge a branch into the active branch."""

    def run(self, args: Sequence[str]) -> None:
        parser = OperandParser(prog="merge")
        parser.add_argument("branch")
        parsed_args = parser.parse_args(args)
        porcelain.merge(Repo.discover(), parsed_args.branch, outstream=sys.stdout)


commands: dict[str, type[Command]] = {
    "add": cmd_add,
    "branch": cmd_branch,
    "checkout": cmd_checkout,
    "commit": cmd_commit,
    "find": cmd_find,
    "global-log": cmd_global_log,
    "init": cmd_init,
    "log": cmd_log,
    "merge": cmd_merge,
    "reset": cmd_reset,
    "rm": cmd_rm,
    "rm-branch": cmd_rm_branch,
    "status": cmd_status,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the gitlet CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    default_logging_config()

    if not argv:
        sys.stdout.write("Please enter a command.\n")
        return 1

    cmd = argv[0]
    try:
        cmd_kls = commands[cmd]
    except KeyError:
        sys.stdout.write("No command with that name exists.\n")
        return 1

    try:
        return cmd_kls().run(argv[1:])
    except GitletError as e:
        sys.stdout.write(e.message + "\n")
        return 1
    except FileLocked as e:
        logger.error("Unable to lock %s: another gitlet process is running", e.filename)
        return 1


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)

    sys.exit(main())


if __name__ == "__main__":
    _main()
