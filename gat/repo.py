# repo.py -- For dealing with gat repositories.
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

"""Repository access.

This module contains the Repo class, which ties together the object store,
the refs and the configuration of a repository stored in ``.gat`` at the
top of a working tree.
"""

__all__ = [
    "BASE_DIRECTORIES",
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "OBJECTDIR",
    "REFSDIR",
    "RESERVED_NAMES",
    "TEMPDIR",
    "Repo",
    "UnsupportedVersion",
]

import os
from types import TracebackType
from typing import TYPE_CHECKING, Optional, Union

from .config import ConfigFile
from .errors import NotGatRepository
from .file import ensure_dir_exists
from .log_utils import getLogger
from .object_store import DiskObjectStore
from .objects import Commit, ObjectID
from .refs import DiskRefsContainer, local_branch_name

if TYPE_CHECKING:
    from .walk import Walker
    from .worktree import WorkTree

logger = getLogger(__name__)

CONTROLDIR = ".gat"
OBJECTDIR = "objects"
REFSDIR = "refs"
REFSDIR_TAGS = "tags"
REFSDIR_HEADS = "heads"
TEMPDIR = "temp"
CONFIG_FILENAME = "config"

BASE_DIRECTORIES = [
    [OBJECTDIR],
    [REFSDIR],
    [REFSDIR, REFSDIR_TAGS],
    [REFSDIR, REFSDIR_HEADS],
    [TEMPDIR],
]

DEFAULT_BRANCH = b"main"

# Directory names that belong to a version control system, never to the
# snapshot.
RESERVED_NAMES = frozenset([CONTROLDIR, ".git"])


class UnsupportedVersion(Exception):
    """Unsupported repository version."""

    def __init__(self, version: int) -> None:
        """Initialize UnsupportedVersion exception.

        Args:
            version: The unsupported repository version
        """
        super().__init__(f"unsupported repository format version {version}")
        self.version = version


class Repo:
    """A gat repository backed by local disk.

    To open an existing repository, call the constructor with the path of
    the working tree. To create a new repository, use the Repo.init class
    method.

    Attributes:
      path: Path to the working tree
      object_store: DiskObjectStore holding the objects
      refs: DiskRefsContainer holding HEAD and the branches
    """

    object_store: DiskObjectStore
    refs: DiskRefsContainer

    def __init__(self, root: Union[str, bytes, "os.PathLike[str]"]) -> None:
        """Open a repository on disk.

        Args:
          root: Path to the working tree containing ``.gat``
        Raises:
          NotGatRepository: if there is no repository at root
          UnsupportedVersion: if the repository format is not understood
        """
        root = os.fspath(root)
        if isinstance(root, bytes):
            root = os.fsdecode(root)
        controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(os.path.join(controldir, OBJECTDIR)):
            raise NotGatRepository(f"No gat repository was found at {root}")
        self.path = root
        self._controldir = controldir

        config = self.get_config()
        format_version = config.get_int("core", "repositoryformatversion", 0)
        if format_version != 0:
            raise UnsupportedVersion(format_version)

        tempdir = os.path.join(controldir, TEMPDIR)
        self.object_store = DiskObjectStore.from_config(
            os.path.join(controldir, OBJECTDIR), tempdir, config
        )
        self.refs = DiskRefsContainer(controldir, tempdir)
        self.sort_tree_entries = config.get_boolean(
            "core", "sortTreeEntries", False
        )

    def __repr__(self) -> str:
        return f"<Repo at {self.path!r}>"

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    def get_config(self) -> ConfigFile:
        """Retrieve the config object.

        Returns: `ConfigFile` object for the ``.gat/config`` file.
        """
        path = os.path.join(self._controldir, CONFIG_FILENAME)
        try:
            return ConfigFile.from_path(path)
        except FileNotFoundError:
            ret = ConfigFile()
            ret.path = path
            return ret

    @classmethod
    def discover(cls, start: Union[str, bytes, "os.PathLike[str]"] = ".") -> "Repo":
        """Iterate parent directories to discover a repository.

        Return a Repo object for the first parent directory that looks like a
        gat repository.

        Args:
          start: The directory to start discovery from (defaults to '.')
        """
        path = os.path.abspath(start)
        while True:
            try:
                return cls(path)
            except NotGatRepository:
                new_path, _tail = os.path.split(path)
                if new_path == path:  # Root reached
                    break
                path = new_path
        start_str = os.fspath(start)
        if isinstance(start_str, bytes):
            start_str = start_str.decode("utf-8")
        raise NotGatRepository(f"No gat repository was found at {start_str}")

    @classmethod
    def init(
        cls,
        path: Union[str, bytes, "os.PathLike[str]"],
        *,
        mkdir: bool = False,
        default_branch: Optional[bytes] = None,
    ) -> "Repo":
        """Create a repository, or complete the layout of an existing one.

        Missing directories are created, a missing config file is written,
        and the default branch ref is created empty if it does not exist.
        HEAD is pointed at the default branch only when it is missing or
        empty, so running init again keeps the active branch and all refs.

        Args:
          path: Path of the working tree
          mkdir: Whether to create the working tree directory
          default_branch: Branch HEAD points at in a new repository;
            defaults to init.defaultBranch or DEFAULT_BRANCH
        Returns: `Repo` instance
        """
        path = os.fspath(path)
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        if mkdir:
            ensure_dir_exists(path)
        controldir = os.path.join(path, CONTROLDIR)
        for d in BASE_DIRECTORIES:
            ensure_dir_exists(os.path.join(controldir, *d))

        config_path = os.path.join(controldir, CONFIG_FILENAME)
        if not os.path.exists(config_path):
            cf = ConfigFile()
            cf.set("core", "repositoryformatversion", 0)
            cf.write_to_path(config_path, os.path.join(controldir, TEMPDIR))
            logger.debug("wrote %s", config_path)

        ret = cls(path)
        if default_branch is None:
            try:
                default_branch = ret.get_config().get("init", "defaultBranch")
            except KeyError:
                default_branch = DEFAULT_BRANCH
        default_ref = local_branch_name(default_branch)
        if ret.refs.read_ref(default_ref) is None:
            ret.refs.set_ref(default_ref, b"")
        if not ret.refs.has_head():
            ret.refs.switch_head(default_branch)
        return ret

    def get_worktree(self) -> "WorkTree":
        """Get the working tree for this repository.

        Returns:
            WorkTree instance for performing working tree operations
        """
        from .worktree import WorkTree

        return WorkTree(self, self.path)

    def head(self) -> ObjectID:
        """Return the commit id of the active branch, b"" if it has none."""
        return self.refs.current_head()

    def create_commit(
        self,
        tree: ObjectID,
        parent: Optional[ObjectID],
        message: bytes,
        timestamp: Optional[int] = None,
    ) -> ObjectID:
        """Store a commit and advance the active branch to it.

        Args:
          tree: Id of the root tree
          parent: Id of the parent commit; None or b"" for a root commit
          message: Commit message
          timestamp: Seconds since the epoch; defaults to now
        Returns: Id of the new commit
        """
        commit = Commit(tree, parent=parent, message=message, timestamp=timestamp)
        sha = self.object_store.add_object(commit)
        self.refs.advance_current_branch(sha)
        logger.debug("created commit %s", sha.decode("ascii"))
        return sha

    def do_commit(self, message: bytes, timestamp: Optional[int] = None) -> ObjectID:
        """Snapshot the working tree and commit it on the active branch.

        Args:
          message: Commit message
          timestamp: Seconds since the epoch; defaults to now
        Returns: Id of the new commit
        """
        tree = self.get_worktree().snapshot()
        parent = self.head()
        return self.create_commit(tree, parent, message, timestamp=timestamp)

    def read_commit(self, sha: ObjectID) -> Commit:
        """Load and parse a commit.

        Raises:
          NotFoundError: if there is no such object
          CorruptObjectError: if the object is not a commit
        """
        return self.object_store.get_commit(sha)

    def get_walker(
        self,
        start: Optional[ObjectID] = None,
        max_entries: Optional[int] = None,
    ) -> "Walker":
        """Obtain a walker over the history of a commit.

        Args:
          start: Commit to start from; defaults to the active branch's head
          max_entries: The maximum number of entries to yield, or None for
            no limit
        Returns: A `Walker` object
        """
        from .walk import Walker

        if start is None:
            start = self.head()
        return Walker(self.object_store, start, max_entries=max_entries)

    def close(self) -> None:
        """Close any files opened by this repository.

        Objects and refs are opened per operation, so there is nothing to
        release yet.
        """

    def __enter__(self) -> "Repo":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
