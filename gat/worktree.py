# worktree.py -- Working tree operations for gat repositories
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

"""Working tree operations.

Snapshotting turns a directory into a tree of stored objects; reconciling
turns a directory back into the state a tree describes. Both walk the
directory recursively, so the nesting depth they can handle is bounded by
the interpreter's recursion limit.

Reconciling is not transactional: if it fails partway, the directory is
left partially updated.
"""

__all__ = [
    "CheckoutError",
    "WorkTree",
    "build_tree_from_path",
    "reconcile",
]

import os
import shutil
from typing import TYPE_CHECKING, Union

from .errors import RefResolutionError, RepositoryIOError
from .log_utils import getLogger
from .objects import BLOB, TREE, ObjectID, Tree
from .repo import RESERVED_NAMES

if TYPE_CHECKING:
    from .object_store import DiskObjectStore
    from .repo import Repo

logger = getLogger(__name__)


class CheckoutError(Exception):
    """Switching branches failed; HEAD was restored to the previous branch."""


def _is_reserved(entry: os.DirEntry) -> bool:
    return entry.name in RESERVED_NAMES and entry.is_dir(follow_symlinks=False)


def _list_dir(path: str) -> list[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            return list(it)
    except OSError as e:
        raise RepositoryIOError("list directory", path, e) from e


def build_tree_from_path(
    object_store: "DiskObjectStore",
    path: Union[str, "os.PathLike[str]"],
    sort_entries: bool = False,
) -> ObjectID:
    """Store the contents of a directory as a tree.

    Files are stored as blobs and subdirectories as trees, depth first.
    Directories named like a repository control directory are skipped.
    Symbolic links to files are stored with the contents of their target.

    Args:
      object_store: Store to add the blobs and trees to
      path: Directory to snapshot
      sort_entries: Order entries by name; otherwise they are kept in the
        order the directory listing returns them
    Returns: Id of the root tree
    Raises:
      RepositoryIOError: if a directory or file cannot be read, or an
        object cannot be written
      ValueError: if a name cannot be stored in a tree
    """
    path = os.fspath(path)
    tree = Tree()
    for entry in _list_dir(path):
        if _is_reserved(entry):
            continue
        name = os.fsencode(entry.name)
        if entry.is_dir(follow_symlinks=False):
            subtree = build_tree_from_path(object_store, entry.path, sort_entries)
            tree.add(TREE, subtree, name)
        else:
            tree.add(BLOB, object_store.add_file(entry.path), name)
    if sort_entries:
        tree.sort()
    return object_store.add_object(tree)


def _remove(entry: os.DirEntry) -> None:
    try:
        if entry.is_dir(follow_symlinks=False):
            shutil.rmtree(entry.path)
            logger.debug('Removed folder "%s"', entry.path)
        else:
            os.remove(entry.path)
            logger.debug('Removed file "%s"', entry.path)
    except OSError as e:
        raise RepositoryIOError("remove", entry.path, e) from e


def _prune(path: str, tree: Tree) -> None:
    """Delete the entries of path that tree has no entry of the same kind for."""
    for entry in _list_dir(path):
        if _is_reserved(entry):
            continue
        name = os.fsencode(entry.name)
        kind = TREE if entry.is_dir(follow_symlinks=False) else BLOB
        if not tree.has_entry(kind, name):
            _remove(entry)


def _materialize(object_store: "DiskObjectStore", path: str, tree: Tree) -> None:
    for entry in tree:
        target = os.path.join(path, os.fsdecode(entry.name))
        if entry.is_tree():
            try:
                os.makedirs(target, exist_ok=True)
            except OSError as e:
                raise RepositoryIOError("create directory", target, e) from e
            logger.debug('Created folder "%s"', target)
        else:
            try:
                f = open(target, "wb")
            except OSError as e:
                raise RepositoryIOError("write file", target, e) from e
            with f:
                object_store.copy_to(entry.sha, f)
            logger.debug('Updated file "%s"', target)


def reconcile(
    object_store: "DiskObjectStore",
    path: Union[str, "os.PathLike[str]"],
    tree_id: ObjectID,
) -> None:
    """Make a directory match a stored tree.

    Entries the tree does not list with the same name and kind are deleted,
    every tree entry is created or overwritten, and subtrees are handled
    recursively.

    Args:
      object_store: Store to read the trees and blobs from
      path: Directory to update
      tree_id: Id of the tree to reproduce
    Raises:
      NotFoundError: if a tree or blob is missing
      CorruptObjectError: if a tree cannot be parsed
      RepositoryIOError: if the directory cannot be updated
    """
    path = os.fspath(path)
    tree = object_store.get_tree(tree_id)
    _prune(path, tree)
    _materialize(object_store, path, tree)
    for entry in tree:
        if entry.is_tree():
            subdir = os.path.join(path, os.fsdecode(entry.name))
            reconcile(object_store, subdir, entry.sha)


class WorkTree:
    """Working tree operations for a gat repository."""

    def __init__(
        self, repo: "Repo", path: Union[str, bytes, "os.PathLike[str]"]
    ) -> None:
        """Initialize a WorkTree for the given repository.

        Args:
            repo: The repository this working tree belongs to
            path: Path to the working tree directory
        """
        self._repo = repo
        raw_path = os.fspath(path)
        if isinstance(raw_path, bytes):
            self.path: str = os.fsdecode(raw_path)
        else:
            self.path = raw_path
        self.path = os.path.abspath(self.path)

    def snapshot(self) -> ObjectID:
        """Store the working tree and return the id of its root tree."""
        return build_tree_from_path(
            self._repo.object_store,
            self.path,
            sort_entries=self._repo.sort_tree_entries,
        )

    def reset_to_tree(self, tree_id: ObjectID) -> None:
        """Make the working tree match a tree, leaving refs alone."""
        reconcile(self._repo.object_store, self.path, tree_id)

    def revert_to_commit(self, sha: ObjectID) -> None:
        """Restore the working tree to a commit and move the active branch there.

        Args:
          sha: Id of the commit
        Raises:
          NotFoundError: if the commit or one of its objects is missing
          CorruptObjectError: if the commit or a tree cannot be parsed
        """
        commit = self._repo.read_commit(sha)
        self.reset_to_tree(commit.tree)
        self._repo.refs.advance_current_branch(sha)

    def switch_branch(self, branch: bytes) -> ObjectID:
        """Make branch the active branch and restore its head commit.

        If anything fails after HEAD was moved, HEAD is pointed back at the
        previous branch. Changes already made to the working tree are not
        undone.

        Args:
          branch: Short name of the branch
        Returns: Id of the commit that was checked out
        Raises:
          CheckoutError: if the switch failed
        """
        refs = self._repo.refs
        previous = refs.current_branch()
        refs.switch_head(branch)
        try:
            sha = refs.current_head()
            if not sha:
                raise RefResolutionError(
                    f"branch {branch.decode('utf-8', 'replace')} has no commits"
                )
            self.revert_to_commit(sha)
        except Exception as e:
            refs.switch_head(previous)
            raise CheckoutError(
                f"failed to check out {branch.decode('utf-8', 'replace')}: {e}"
            ) from e
        logger.debug(
            "switched to branch %s at %s",
            branch.decode("utf-8", "replace"),
            sha.decode("ascii"),
        )
        return sha
