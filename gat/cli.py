#
# gat - Simple command-line interface to gat
# Copyright (C) 2026 The gat authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# gat is dual-licensed under the Apache License, Version 2.0 and the GNU
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

"""Simple command-line interface to gat.

All commands work on the repository in the current directory. Before any
command other than init runs, the repository layout there is created or
completed, so every command also works in a fresh directory.
"""

import argparse
import os
import signal
import sys
import types
from collections.abc import Sequence
from typing import Optional

from gat import porcelain
from gat.errors import (
    CorruptObjectError,
    HashError,
    NotFoundError,
    NotGatRepository,
    RefFormatError,
    RefResolutionError,
)
from gat.log_utils import default_logging_config, getLogger
from gat.repo import UnsupportedVersion

logger = getLogger(__name__)

# Errors that end a command with a message and exit status 1.
# RepositoryIOError is covered by OSError.
FATAL_ERRORS = (
    porcelain.Error,
    porcelain.CheckoutError,
    CorruptObjectError,
    HashError,
    NotFoundError,
    NotGatRepository,
    RefFormatError,
    RefResolutionError,
    UnsupportedVersion,
    OSError,
    ValueError,
)


def signal_int(signal: int, frame: Optional[types.FrameType]) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


class Command:
    """A gat subcommand."""

    # Whether the repository layout in the current directory is prepared
    # before the command runs.
    prepare_layout = True

    def run(self, args: Sequence[str]) -> Optional[int]:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_init(Command):
    """Create an empty repository or complete the layout of an existing one."""

    prepare_layout = False

    def run(self, args: Sequence[str]) -> None:
        """Execute the init command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gat init")
        parser.add_argument(
            "path", nargs="?", default=os.getcwd(), help="Working tree path"
        )
        parsed_args = parser.parse_args(args)
        porcelain.init(parsed_args.path)


class cmd_commit(Command):
    """Record a snapshot of the working tree."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the commit command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gat commit")
        parser.add_argument("--message", "-m", default="", help="Commit message")
        parsed_args = parser.parse_args(args)
        commit_id = porcelain.commit(".", message=parsed_args.message)
        sys.stdout.write(f"Commit hash: {commit_id.decode('ascii')}\n")


class cmd_branch(Command):
    """Create a branch and switch to it, or list branches."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the branch command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gat branch")
        parser.add_argument(
            "branch", nargs="?", help="Name of the branch to create"
        )
        parsed_args = parser.parse_args(args)
        if parsed_args.branch is None:
            active = porcelain.active_branch(".")
            for branch in porcelain.branch_list("."):
                marker = "*" if branch == active else " "
                sys.stdout.write(f"{marker} {os.fsdecode(branch)}\n")
            return
        if porcelain.branch_create(".", os.fsencode(parsed_args.branch)):
            logger.info(
                'Created branch "%s" and switched to it.', parsed_args.branch
            )


class cmd_checkout(Command):
    """Switch branches and restore the working tree."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the checkout command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gat checkout")
        parser.add_argument("branch", help="Name of the branch to switch to")
        parsed_args = parser.parse_args(args)
        porcelain.checkout(".", os.fsencode(parsed_args.branch))


class cmd_revert(Command):
    """Restore the working tree to a commit."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the revert command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gat revert")
        parser.add_argument("commit", help="Hex id of the commit to restore")
        parsed_args = parser.parse_args(args)
        porcelain.revert(".", parsed_args.commit)


class cmd_log(Command):
    """Show the history of the active branch."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the log command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="gat log")
        parser.add_argument(
            "-n",
            "--max-count",
            type=int,
            dest="max_entries",
            help="Limit the number of commits to output",
        )
        parsed_args = parser.parse_args(args)
        porcelain.log(".", outstream=sys.stdout, max_entries=parsed_args.max_entries)


class cmd_status(Command):
    """Show the active branch and its head commit."""

    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="gat status")
        parser.parse_args(args)
        status = porcelain.status(".")
        sys.stdout.write(f"Current branch : {os.fsdecode(status.branch)}\n")
        sys.stdout.write(f"Head currently pointing to {status.head.decode('ascii')}\n")


class cmd_read_obj_file(Command):
    """Print the decompressed contents of an object."""

    def run(self, args: Sequence[str]) -> None:
        parser = argparse.ArgumentParser(prog="gat read-obj-file")
        parser.add_argument("object", help="Object id or path of an object file")
        parsed_args = parser.parse_args(args)
        data = porcelain.read_object_file(".", parsed_args.object)
        sys.stdout.write("Object file content:\n")
        sys.stdout.write(data.decode(porcelain.DEFAULT_ENCODING, "replace") + "\n")


commands = {
    "branch": cmd_branch,
    "checkout": cmd_checkout,
    "commit": cmd_commit,
    "init": cmd_init,
    "log": cmd_log,
    "read-obj-file": cmd_read_obj_file,
    "revert": cmd_revert,
    "status": cmd_status,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the gat CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(
        prog="gat",
        description="Simple snapshotting version control",
        add_help=False,
    )
    parser.add_argument("--debug", action="store_true", help="Log debug messages")
    parser.add_argument("--help", "-h", action="store_true", help="Show help")

    global_args, remaining = parser.parse_known_args(argv)

    if global_args.help or not remaining:
        parser = argparse.ArgumentParser(
            prog="gat", description="Simple snapshotting version control"
        )
        parser.add_argument("--debug", action="store_true", help="Log debug messages")
        parser.add_argument(
            "command",
            nargs="?",
            help=f"Command to run. Available: {', '.join(sorted(commands.keys()))}",
        )
        parser.print_help()
        return 1

    default_logging_config(debug=global_args.debug)
    logger.debug("debug mode enabled")

    cmd = remaining[0]
    cmd_args = remaining[1:]

    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logger.fatal("No such subcommand: %s", cmd)
        return 1

    try:
        if cmd_kls.prepare_layout:
            porcelain.init(".")
        return cmd_kls().run(cmd_args) or 0
    except FATAL_ERRORS as e:
        logger.error("%s failed: %s", cmd, e)
        logger.debug("details", exc_info=True)
        return 1


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)

    sys.exit(main())


if __name__ == "__main__":
    _main()
