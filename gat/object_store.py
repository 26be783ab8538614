# object_store.py -- Object store for gat objects
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

"""Content-addressed object storage on disk.

Objects live at ``objects/<sha[:2]>/<sha[2:]>`` as zlib streams. Every write
goes through a scratch file in the temp directory which is renamed into
place once complete, so an object is either fully present or absent.
"""

__all__ = [
    "CHUNK_SIZE",
    "DiskObjectStore",
    "read_object_file",
]

import os
import zlib
from collections.abc import Iterator
from typing import IO, TYPE_CHECKING, Optional, Union

from .errors import CorruptObjectError, NotFoundError, RepositoryIOError
from .file import AtomicFile, ensure_dir_exists
from .log_utils import getLogger
from .objects import (
    Commit,
    ObjectID,
    ShaFile,
    Tree,
    hex_to_filename,
    hexdigest,
    make_sha,
    valid_hexsha,
)

if TYPE_CHECKING:
    from .config import ConfigFile

logger = getLogger(__name__)

CHUNK_SIZE = 64 * 1024

OBJECT_MODE = 0o444


def _decompress_stream(
    f: IO[bytes], sha: Optional[ObjectID] = None
) -> Iterator[bytes]:
    """Yield decompressed chunks of a zlib stream read from f.

    Raises:
      CorruptObjectError: if the stream is not valid or is truncated
    """
    decomp = zlib.decompressobj()
    try:
        while True:
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            data = decomp.decompress(chunk)
            if data:
                yield data
        tail = decomp.flush()
    except zlib.error as e:
        raise CorruptObjectError(sha, f"failed to decompress: {e}") from e
    if not decomp.eof:
        raise CorruptObjectError(sha, "compressed stream is truncated")
    if tail:
        yield tail


def read_object_file(path: Union[str, "os.PathLike[str]"]) -> bytes:
    """Decompress an object file given by path, wherever it is.

    Raises:
      NotFoundError: if path does not exist
      CorruptObjectError: if the file is not a valid object
    """
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        raise NotFoundError(os.fspath(path), "object file") from None
    except OSError as e:
        raise RepositoryIOError("open object", path, e) from e
    with f:
        return b"".join(_decompress_stream(f))


class DiskObjectStore:
    """Object store that keeps loose zlib-compressed objects on disk."""

    def __init__(
        self,
        path: Union[str, "os.PathLike[str]"],
        tempdir: Union[str, "os.PathLike[str]"],
        *,
        compression_level: int = -1,
        fsync_object_files: bool = False,
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the objects directory
          tempdir: Scratch directory used for atomic writes; must be on the
            same filesystem as path
          compression_level: zlib compression level
          fsync_object_files: whether to fsync object files before renaming
        """
        self.path = os.fspath(path)
        self.tempdir = os.fspath(tempdir)
        self.compression_level = compression_level
        self.fsync_object_files = fsync_object_files

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @classmethod
    def from_config(
        cls,
        path: Union[str, "os.PathLike[str]"],
        tempdir: Union[str, "os.PathLike[str]"],
        config: "ConfigFile",
    ) -> "DiskObjectStore":
        """Open an object store using settings from a repository config."""
        compression_level = config.get_int("core", b"compression", -1)
        if not -1 <= compression_level <= 9:
            raise ValueError(f"invalid compression level {compression_level}")
        fsync_object_files = config.get_boolean("core", b"fsyncObjectFiles", False)
        return cls(
            path,
            tempdir,
            compression_level=compression_level,
            fsync_object_files=fsync_object_files,
        )

    @classmethod
    def init(
        cls,
        path: Union[str, "os.PathLike[str]"],
        tempdir: Union[str, "os.PathLike[str]"],
    ) -> "DiskObjectStore":
        """Create the store directories if needed and open the store."""
        ensure_dir_exists(path)
        ensure_dir_exists(tempdir)
        return cls(path, tempdir)

    def _get_shafile_path(self, sha: ObjectID) -> str:
        return hex_to_filename(self.path, sha)

    def _open_tempfile(self) -> AtomicFile:
        try:
            return AtomicFile(
                self.tempdir, mask=OBJECT_MODE, fsync=self.fsync_object_files
            )
        except FileNotFoundError:
            pass
        except OSError as e:
            raise RepositoryIOError("create temporary file", self.tempdir, e) from e
        # temp/ may have been purged since the repository was opened
        try:
            ensure_dir_exists(self.tempdir)
            return AtomicFile(
                self.tempdir, mask=OBJECT_MODE, fsync=self.fsync_object_files
            )
        except OSError as e:
            raise RepositoryIOError("create temporary file", self.tempdir, e) from e

    def _move_into_place(self, f: AtomicFile, sha: ObjectID) -> None:
        path = self._get_shafile_path(sha)
        try:
            ensure_dir_exists(os.path.dirname(path))
            f.close(path)
        except OSError as e:
            f.abort()
            raise RepositoryIOError("rename object", path, e) from e
        logger.debug("stored object %s", sha.decode("ascii"))

    def add_raw(self, data: bytes) -> ObjectID:
        """Store a byte string as an object.

        The object is always written, even if an object with the same id
        already exists.

        Args:
          data: Bytes to store
        Returns: Hex id of the object
        Raises:
          RepositoryIOError: if the object could not be written
          HashError: if the digest has an unexpected length
        """
        sha = hexdigest(make_sha(data))
        f = self._open_tempfile()
        try:
            try:
                f.write(zlib.compress(data, self.compression_level))
            except OSError as e:
                raise RepositoryIOError("write object", f.name, e) from e
        except BaseException:
            f.abort()
            raise
        self._move_into_place(f, sha)
        return sha

    def add_file(self, path: Union[str, bytes, "os.PathLike[str]"]) -> ObjectID:
        """Store the contents of a file as an object.

        The file is read in chunks which are hashed and compressed as they
        arrive.

        Args:
          path: Path of the file to store
        Returns: Hex id of the object
        Raises:
          RepositoryIOError: if the file could not be read or the object
            could not be written
        """
        hasher = make_sha()
        compobj = zlib.compressobj(self.compression_level)
        f = self._open_tempfile()
        try:
            try:
                src = open(path, "rb")
            except OSError as e:
                raise RepositoryIOError("read file", path, e) from e
            with src:
                while True:
                    try:
                        chunk = src.read(CHUNK_SIZE)
                    except OSError as e:
                        raise RepositoryIOError("read file", path, e) from e
                    if not chunk:
                        break
                    hasher.update(chunk)
                    f.write(compobj.compress(chunk))
            f.write(compobj.flush())
            sha = hexdigest(hasher)
        except BaseException:
            f.abort()
            raise
        self._move_into_place(f, sha)
        return sha

    def add_object(self, obj: ShaFile) -> ObjectID:
        """Store a Blob, Tree or Commit.

        Returns: Hex id of the object
        """
        return self.add_raw(obj.as_raw_string())

    def contains(self, sha: ObjectID) -> bool:
        """Check if an object is present."""
        if not valid_hexsha(sha):
            return False
        return os.path.isfile(self._get_shafile_path(sha))

    __contains__ = contains

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the ids of all stored objects."""
        try:
            bases = sorted(os.listdir(self.path))
        except FileNotFoundError:
            return
        for base in bases:
            if len(base) != 2:
                continue
            for rest in sorted(os.listdir(os.path.join(self.path, base))):
                sha = os.fsencode(base + rest)
                if not valid_hexsha(sha):
                    continue
                yield sha

    def _open_object(self, sha: ObjectID) -> IO[bytes]:
        if not valid_hexsha(sha):
            raise NotFoundError(sha)
        path = self._get_shafile_path(sha)
        try:
            return open(path, "rb")
        except FileNotFoundError:
            raise NotFoundError(sha) from None
        except OSError as e:
            raise RepositoryIOError("open object", path, e) from e

    def get_raw(self, sha: ObjectID) -> bytes:
        """Load the decompressed contents of an object.

        Args:
          sha: Hex id of the object
        Returns: The stored bytes
        Raises:
          NotFoundError: if there is no such object
          CorruptObjectError: if the object cannot be decompressed
        """
        with self._open_object(sha) as f:
            return b"".join(_decompress_stream(f, sha))

    def copy_to(self, sha: ObjectID, outf: IO[bytes]) -> None:
        """Write the decompressed contents of an object to a file object.

        Raises:
          NotFoundError: if there is no such object
          CorruptObjectError: if the object cannot be decompressed
        """
        with self._open_object(sha) as f:
            for chunk in _decompress_stream(f, sha):
                outf.write(chunk)

    def get_tree(self, sha: ObjectID) -> Tree:
        """Load and parse a tree."""
        return Tree.from_raw_string(self.get_raw(sha), sha)

    def get_commit(self, sha: ObjectID) -> Commit:
        """Load and parse a commit."""
        return Commit.from_raw_string(self.get_raw(sha), sha)

    def __getitem__(self, sha: ObjectID) -> bytes:
        return self.get_raw(sha)
