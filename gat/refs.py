# refs.py -- Ref handling for gat
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

"""Ref handling.

Each branch is a file under ``refs/heads/`` holding a hex commit id, or
nothing for a branch without commits. HEAD holds the relative path of the
active branch's ref file (``refs/heads/main``), never a commit id.
"""

__all__ = [
    "BAD_REF_CHARS",
    "HEADREF",
    "LOCAL_BRANCH_PREFIX",
    "DiskRefsContainer",
    "Ref",
    "check_ref_format",
    "extract_branch_name",
    "local_branch_name",
]

import os
from typing import Optional, Union

from .errors import (
    NotFoundError,
    RefFormatError,
    RefResolutionError,
    RepositoryIOError,
)
from .file import AtomicFile, ensure_dir_exists
from .log_utils import getLogger
from .objects import ObjectID, valid_hexsha

logger = getLogger(__name__)

Ref = bytes

HEADREF = b"HEAD"
LOCAL_BRANCH_PREFIX = b"refs/heads/"
BAD_REF_CHARS = set(b"\177 ~^:?*[")


def check_ref_format(refname: Ref) -> bool:
    """Check if a refname is correctly formatted.

    Follows the rules of git-check-ref-format.

    Args:
      refname: The refname to check
    Returns: True if refname is valid, False otherwise
    """
    if b"/." in refname or refname.startswith(b"."):
        return False
    if b"/" not in refname:
        return False
    if b".." in refname:
        return False
    for i, c in enumerate(refname):
        if ord(refname[i : i + 1]) < 0o40 or c in BAD_REF_CHARS:
            return False
    if refname[-1] in b"/.":
        return False
    if refname.endswith(b".lock"):
        return False
    if b"@{" in refname:
        return False
    if b"\\" in refname:
        return False
    if b"//" in refname:
        return False
    return True


def local_branch_name(name: bytes) -> Ref:
    """Build a full branch ref from a short name.

    Examples:
      >>> local_branch_name(b"main")
      b'refs/heads/main'
      >>> local_branch_name(b"refs/heads/main")
      b'refs/heads/main'
    """
    if name.startswith(LOCAL_BRANCH_PREFIX):
        return name
    return LOCAL_BRANCH_PREFIX + name


def extract_branch_name(ref: Ref) -> bytes:
    """Extract branch name from a full branch ref.

    Raises:
      ValueError: If ref is not a local branch

    Examples:
      >>> extract_branch_name(b"refs/heads/main")
      b'main'
      >>> extract_branch_name(b"refs/heads/feature/foo")
      b'feature/foo'
    """
    if not ref.startswith(LOCAL_BRANCH_PREFIX) or ref == LOCAL_BRANCH_PREFIX:
        raise ValueError(f"Not a local branch ref: {ref!r}")
    return ref[len(LOCAL_BRANCH_PREFIX) :]


class DiskRefsContainer:
    """Refs container that reads refs from disk."""

    def __init__(
        self,
        path: Union[str, bytes, "os.PathLike[str]"],
        tempdir: Optional[Union[str, bytes, "os.PathLike[str]"]] = None,
    ) -> None:
        """Open the refs of a repository.

        Args:
          path: Repository control directory (containing HEAD and refs/)
          tempdir: Scratch directory for atomic writes; defaults to the
            control directory
        """
        self.path = os.fsencode(os.fspath(path))
        if tempdir is None:
            self.tempdir = self.path
        else:
            self.tempdir = os.fsencode(os.fspath(tempdir))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def refpath(self, name: Ref) -> bytes:
        """Return the disk path of a ref."""
        path = name
        if os.path.sep != "/":
            path = path.replace(b"/", os.fsencode(os.path.sep))
        return os.path.join(self.path, path)

    def _check_refname(self, name: Ref) -> None:
        if name == HEADREF:
            return
        if not name.startswith(LOCAL_BRANCH_PREFIX) or not check_ref_format(name):
            raise RefFormatError(name)

    def _read(self, name: Ref) -> Optional[bytes]:
        filename = self.refpath(name)
        try:
            with open(filename, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except IsADirectoryError:
            return None
        except OSError as e:
            raise RepositoryIOError("read ref", filename, e) from e

    def _write(self, name: Ref, contents: bytes) -> None:
        filename = self.refpath(name)
        try:
            ensure_dir_exists(os.path.dirname(filename))
            ensure_dir_exists(self.tempdir)
            with AtomicFile(self.tempdir, filename) as f:
                f.write(contents)
        except OSError as e:
            raise RepositoryIOError("write ref", filename, e) from e

    def read_ref(self, name: Ref) -> Optional[ObjectID]:
        """Read the commit id a branch ref holds.

        Args:
          name: Full ref name, e.g. b"refs/heads/main"
        Returns: The commit id, b"" for a branch without commits, or None if
            the ref does not exist
        Raises:
          RefResolutionError: if the file does not hold a commit id
        """
        self._check_refname(name)
        contents = self._read(name)
        if contents is None:
            return None
        sha = contents.strip()
        if sha and not valid_hexsha(sha):
            raise RefResolutionError(
                f"ref {name.decode('utf-8', 'replace')} holds an invalid "
                f"commit id {sha!r}"
            )
        return sha

    def set_ref(self, name: Ref, sha: ObjectID) -> None:
        """Overwrite a branch ref with a commit id."""
        self._check_refname(name)
        self._write(name, sha)

    def __contains__(self, name: Ref) -> bool:
        try:
            return self.read_ref(name) is not None
        except RefFormatError:
            return False

    def branches(self) -> list[bytes]:
        """List the short names of all branches."""
        heads_dir = self.refpath(LOCAL_BRANCH_PREFIX.rstrip(b"/"))
        ret = []
        for root, dirs, files in os.walk(heads_dir):
            for filename in files:
                full = os.path.join(root, filename)
                relative = os.path.relpath(full, heads_dir)
                if os.path.sep != "/":
                    relative = relative.replace(os.fsencode(os.path.sep), b"/")
                if check_ref_format(LOCAL_BRANCH_PREFIX + relative):
                    ret.append(relative)
        return sorted(ret)

    def has_head(self) -> bool:
        """Check whether HEAD exists and is non-empty."""
        contents = self._read(HEADREF)
        return bool(contents and contents.strip())

    def read_head(self) -> Ref:
        """Return the ref HEAD points at, e.g. b"refs/heads/main".

        Raises:
          NotFoundError: if HEAD does not exist
          RefResolutionError: if HEAD does not point at a branch ref
        """
        contents = self._read(HEADREF)
        if contents is None:
            raise NotFoundError(self.refpath(HEADREF), "HEAD file")
        target = contents.strip()
        if not target.startswith(LOCAL_BRANCH_PREFIX) or not check_ref_format(target):
            raise RefResolutionError(f"HEAD does not point at a branch: {target!r}")
        return target

    def current_branch(self) -> bytes:
        """Return the short name of the active branch."""
        return extract_branch_name(self.read_head())

    def current_head(self) -> ObjectID:
        """Return the commit id the active branch holds.

        Returns: The commit id, or b"" if the branch has no commits yet
        Raises:
          NotFoundError: if HEAD or the branch ref file is missing
          RefResolutionError: if HEAD or the branch cannot be resolved
        """
        target = self.read_head()
        sha = self.read_ref(target)
        if sha is None:
            raise NotFoundError(self.refpath(target), "ref file")
        return sha

    def advance_current_branch(self, sha: ObjectID) -> None:
        """Point the active branch at a new commit."""
        target = self.read_head()
        self.set_ref(target, sha)
        logger.debug(
            "%s now at %s", target.decode("utf-8", "replace"), sha.decode("ascii")
        )

    def switch_head(self, branch: bytes) -> None:
        """Point HEAD at a branch.

        Neither the branch nor its commit is checked for existence.
        """
        target = local_branch_name(branch)
        self._check_refname(target)
        self._write(HEADREF, target)

    def create_branch(self, branch: bytes) -> bool:
        """Create a branch at the current head and switch HEAD to it.

        Args:
          branch: Short name of the new branch
        Returns: False if a branch of that name already has a commit, in
            which case nothing is changed; True otherwise
        """
        target = local_branch_name(branch)
        self._check_refname(target)
        if self.read_ref(target):
            logger.info('Branch "%s" already exists', branch.decode("utf-8", "replace"))
            return False
        self.set_ref(target, self.current_head())
        self.switch_head(branch)
        return True
