# porcelain.py -- Porcelain-like layer on top of gat
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

"""Simple wrapper that provides porcelain-like functions on top of gat.

Currently implemented:
 * active_branch
 * branch{_create,_list}
 * checkout
 * commit
 * init
 * log
 * read_object_file
 * revert
 * status

These functions are meant to behave similarly to the gat subcommands.
Differences in behaviour are considered bugs.

Note: one of the consequences of this is that paths tend to be
interpreted relative to the current working directory rather than relative
to the repository root.

Functions should generally accept both unicode strings and bytestrings
"""

__all__ = [
    "CheckoutError",
    "DEFAULT_ENCODING",
    "Error",
    "BranchStatus",
    "active_branch",
    "branch_create",
    "branch_list",
    "checkout",
    "commit",
    "init",
    "log",
    "open_repo_closing",
    "print_commit",
    "read_object_file",
    "revert",
    "status",
]

import os
import sys
import time
from collections.abc import Iterator
from contextlib import AbstractContextManager, closing, contextmanager
from typing import NamedTuple, Optional, TextIO, Union

from .errors import NotFoundError
from .log_utils import getLogger
from .object_store import read_object_file as _read_object_file
from .objects import Commit, ObjectID, valid_hexsha
from .repo import Repo
from .worktree import CheckoutError

logger = getLogger(__name__)

RepoPath = Union[str, os.PathLike[str], Repo]

DEFAULT_ENCODING = "utf-8"


class Error(Exception):
    """Porcelain-based error."""

    def __init__(self, msg: str) -> None:
        super().__init__(msg)


class BranchStatus(NamedTuple):
    """Active branch and the commit it points at."""

    branch: bytes
    head: ObjectID


def _to_bytes(value: Union[str, bytes], encoding: str = DEFAULT_ENCODING) -> bytes:
    if isinstance(value, str):
        return value.encode(encoding)
    return value


@contextmanager
def _noop_context_manager(obj: Repo) -> Iterator[Repo]:
    """Context manager that has the same api as closing but does nothing."""
    yield obj


def open_repo_closing(path_or_repo: RepoPath) -> AbstractContextManager[Repo]:
    """Open an argument that can be a repository or a path for a repository.

    returns a context manager that will close the repo on exit if the argument
    is a path, else does nothing if the argument is a repo.
    """
    if isinstance(path_or_repo, Repo):
        return _noop_context_manager(path_or_repo)
    return closing(Repo(path_or_repo))


def init(path: Union[str, os.PathLike[str]] = ".") -> Repo:
    """Create a new gat repository, or complete the layout of an existing one.

    Args:
      path: Path of the working tree
    Returns: A Repo instance
    """
    if not os.path.exists(path):
        os.mkdir(path)
    return Repo.init(path)


def commit(
    repo: RepoPath = ".",
    message: Optional[Union[str, bytes]] = None,
    timestamp: Optional[int] = None,
) -> ObjectID:
    """Snapshot the working tree and commit it on the active branch.

    Args:
      repo: Path to repository
      message: Optional commit message
      timestamp: Seconds since the epoch; defaults to now
    Returns: SHA1 of the new commit
    """
    with open_repo_closing(repo) as r:
        return r.do_commit(_to_bytes(message or b""), timestamp=timestamp)


def branch_create(repo: RepoPath, name: Union[str, bytes]) -> bool:
    """Create a branch at the current head and make it the active branch.

    Args:
      repo: Path to the repository
      name: Name of the new branch
    Returns: False if a branch with that name already has commits
    """
    with open_repo_closing(repo) as r:
        return r.refs.create_branch(_to_bytes(name))


def branch_list(repo: RepoPath) -> list[bytes]:
    """List all branches.

    Args:
      repo: Path to the repository
    Returns: Sorted list of branch names
    """
    with open_repo_closing(repo) as r:
        return r.refs.branches()


def active_branch(repo: RepoPath) -> bytes:
    """Return the active branch in the repository.

    Args:
      repo: Repository to open
    Returns:
      branch name
    Raises:
      NotFoundError: if HEAD is missing
      RefResolutionError: if HEAD does not point at a branch
    """
    with open_repo_closing(repo) as r:
        return r.refs.current_branch()


def checkout(repo: RepoPath, branch: Union[str, bytes]) -> ObjectID:
    """Switch to a branch and restore the working tree to its head commit.

    Args:
      repo: Path to the repository
      branch: Name of the branch
    Returns: SHA1 of the commit that was checked out
    Raises:
      CheckoutError: if the switch failed; HEAD is left on the previous branch
    """
    with open_repo_closing(repo) as r:
        return r.get_worktree().switch_branch(_to_bytes(branch))


def revert(repo: RepoPath, commit_id: Union[str, bytes]) -> None:
    """Restore the working tree to a commit and move the active branch there.

    Args:
      repo: Path to the repository
      commit_id: Full hex id of the commit
    Raises:
      Error: if commit_id is not a full hex id
    """
    sha = _to_bytes(commit_id, "ascii")
    if not valid_hexsha(sha):
        raise Error(f"not a valid commit id: {sha.decode('ascii', 'replace')}")
    with open_repo_closing(repo) as r:
        r.get_worktree().revert_to_commit(sha)


def print_commit(
    commit_id: ObjectID,
    commit: Commit,
    outstream: TextIO = sys.stdout,
) -> None:
    """Write a human-readable commit log entry.

    Args:
      commit_id: SHA1 of the commit
      commit: A `Commit` object
      outstream: A stream file to write to
    """
    parent = commit.parent.decode("ascii") if commit.parent else ""
    time_str = time.strftime(
        "%Y-%m-%d %H:%M:%S %z", time.localtime(commit.timestamp)
    )
    outstream.write(f"Commit Hash\t: {commit_id.decode('ascii')}\n")
    outstream.write(f"Tree Hash\t: {commit.tree.decode('ascii')}\n")
    outstream.write(f"Parent Commit\t: {parent}\n")
    outstream.write(f"Time\t\t: {time_str}\n")
    outstream.write(
        f"Message\t\t: {commit.message.decode(DEFAULT_ENCODING, 'replace')}\n"
    )
    outstream.write("\n")


def log(
    repo: RepoPath = ".",
    outstream: TextIO = sys.stdout,
    max_entries: Optional[int] = None,
) -> None:
    """Write commit logs, newest first.

    Args:
      repo: Path to repository
      outstream: Stream to write log output to
      max_entries: Optional maximum number of entries to display
    """
    with open_repo_closing(repo) as r:
        for entry in r.get_walker(max_entries=max_entries):
            print_commit(entry.commit_id, entry.commit, outstream)


def status(repo: RepoPath = ".") -> BranchStatus:
    """Return the active branch and its head commit.

    Args:
      repo: Path to repository
    Returns: BranchStatus; head is b"" if the branch has no commits
    """
    with open_repo_closing(repo) as r:
        return BranchStatus(r.refs.current_branch(), r.refs.current_head())


def read_object_file(
    repo: RepoPath, path_or_sha: Union[str, bytes, os.PathLike[str]]
) -> bytes:
    """Decompress an object, given by id or by the path of its file.

    A full hex id of an object present in the repository is looked up in the
    object store; anything else is treated as a path.

    Args:
      repo: Path to the repository
      path_or_sha: Object id or file path
    Returns: The decompressed contents
    Raises:
      NotFoundError: if there is no such object or file
    """
    if isinstance(path_or_sha, (str, bytes)) and valid_hexsha(path_or_sha):
        sha = _to_bytes(path_or_sha, "ascii")
        with open_repo_closing(repo) as r:
            try:
                return r.object_store.get_raw(sha)
            except NotFoundError:
                logger.debug("no object %s, trying it as a path", sha.decode("ascii"))
    return _read_object_file(os.fsdecode(path_or_sha))
