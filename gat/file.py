# file.py -- Safe access to gat files
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

"""Safe access to gat files."""

__all__ = [
    "AtomicFile",
    "ensure_dir_exists",
]

import os
import tempfile
import warnings
from types import TracebackType
from typing import IO, Optional, Union

PathLike = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]

TEMPFILE_PREFIX = "tmp_"


def ensure_dir_exists(dirname: PathLike) -> None:
    """Ensure a directory exists, creating if necessary."""
    try:
        os.makedirs(dirname)
    except FileExistsError:
        pass


class AtomicFile:
    """Write-only file that appears at its final path all at once.

    Data is written to a freshly created file in a scratch directory; on
    close() the scratch file is renamed over the target path. The target is
    never visible half-written, and abort() leaves it untouched.

    The target path may be unknown when the file is opened (an object's name
    is its content hash); in that case pass it to close() instead.

    Note: You *must* call close() or abort() on an AtomicFile for the scratch
        file to be released. Typically this will happen in a finally block.
    """

    def __init__(
        self,
        tempdir: PathLike,
        filename: Optional[PathLike] = None,
        mask: int = 0o644,
        fsync: bool = False,
    ) -> None:
        """Open a scratch file.

        Args:
          tempdir: Directory to create the scratch file in; must be on the
            same filesystem as the target
          filename: Final path, if already known
          mask: Permission bits for the created file
          fsync: Whether to call fsync() before renaming
        """
        self._filename = None if filename is None else os.fsdecode(filename)
        self._fsync = fsync
        fd, self._tempname = tempfile.mkstemp(
            prefix=TEMPFILE_PREFIX, dir=os.fsdecode(tempdir)
        )
        os.chmod(self._tempname, mask)
        self._file: IO[bytes] = os.fdopen(fd, "wb")
        self._closed = False

    @property
    def name(self) -> str:
        """Path of the scratch file."""
        return self._tempname

    @property
    def closed(self) -> bool:
        """Return whether the file is closed."""
        return self._closed

    def write(self, data: bytes) -> int:
        return self._file.write(data)

    def flush(self) -> None:
        self._file.flush()

    def abort(self) -> None:
        """Close and discard the scratch file without touching the target.

        If the file is already closed, this is a no-op.
        """
        if self._closed:
            return
        self._file.close()
        try:
            os.remove(self._tempname)
        except FileNotFoundError:
            # Already renamed into place or removed
            pass
        self._closed = True

    def close(self, filename: Optional[PathLike] = None) -> None:
        """Close this file, renaming the scratch file over the target.

        Args:
          filename: Final path; required if not given to the constructor

        Raises:
          OSError: if the target could not be replaced. The scratch file is
            removed in that case.
        """
        if self._closed:
            return
        if filename is not None:
            self._filename = os.fsdecode(filename)
        if self._filename is None:
            self.abort()
            raise ValueError("no target filename for atomic file")
        self._file.flush()
        if self._fsync:
            os.fsync(self._file.fileno())
        self._file.close()
        try:
            os.replace(self._tempname, self._filename)
        finally:
            self.abort()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self._tempname!r} -> {self._filename!r})>"

    def __enter__(self) -> "AtomicFile":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()
