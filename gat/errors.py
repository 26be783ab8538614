# errors.py -- errors for gat
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

"""gat-related exception classes."""

# Please do not add more errors here, but instead add them close to the code
# that raises the error.

import os
from typing import Optional, Union

__all__ = [
    "CorruptObjectError",
    "FileFormatException",
    "HashError",
    "NotFoundError",
    "NotGatRepository",
    "RefFormatError",
    "RefResolutionError",
    "RepositoryIOError",
]


def _to_str(value: Union[str, bytes, "os.PathLike[str]"]) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", "surrogateescape")
    return os.fspath(value)


class RepositoryIOError(OSError):
    """An I/O operation on the repository or working tree failed.

    Wraps the underlying OSError, recording what was being done and where.
    """

    def __init__(
        self,
        operation: str,
        path: Union[str, bytes, "os.PathLike[str]"],
        reason: Optional[BaseException] = None,
    ) -> None:
        """Initialize a RepositoryIOError.

        Args:
          operation: Short description of the failed operation
          path: Path the operation was acting on
          reason: The original exception, if any
        """
        self.operation = operation
        self.path = _to_str(path)
        self.reason = reason
        message = f"{operation} failed for {self.path}"
        if reason is not None:
            message += f": {reason}"
        errno = getattr(reason, "errno", None)
        if errno is not None:
            super().__init__(errno, message)
        else:
            super().__init__(message)

    def __str__(self) -> str:
        message = f"{self.operation} failed for {self.path}"
        if self.reason is not None:
            message += f": {self.reason}"
        return message


class FileFormatException(Exception):
    """Base class for exceptions relating to reading gat file formats."""


class CorruptObjectError(FileFormatException):
    """An object could not be decompressed or parsed."""

    def __init__(self, sha: Optional[bytes], msg: str) -> None:
        """Initialize a CorruptObjectError.

        Args:
          sha: Hex id of the offending object, if known
          msg: What was wrong with it
        """
        self.sha = sha
        if sha is not None:
            msg = f"object {sha.decode('ascii', 'replace')}: {msg}"
        super().__init__(msg)


class HashError(Exception):
    """A computed digest did not have the expected length."""

    def __init__(self, expected_length: int, got: Union[bytes, str]) -> None:
        """Initialize a HashError.

        Args:
          expected_length: Number of hex characters a digest must have
          got: The digest that was produced
        """
        if isinstance(got, bytes):
            got = got.decode("ascii", "replace")
        self.expected_length = expected_length
        self.got = got
        super().__init__(
            f"failed to hash object, expected hash length {expected_length} "
            f"got {len(got)}"
        )


class NotFoundError(KeyError):
    """A hash has no stored object, or a ref or HEAD file is missing."""

    def __init__(self, name: Union[str, bytes], what: str = "object") -> None:
        """Initialize a NotFoundError.

        Args:
          name: Hash or path that could not be found
          what: Kind of thing that was looked up
        """
        self.name = name
        self.what = what
        super().__init__(name)

    def __str__(self) -> str:
        return f"{self.what} {_to_str(self.name)} not found"


class RefResolutionError(Exception):
    """HEAD or a branch could not be resolved to a usable target."""


class RefFormatError(Exception):
    """Indicates an invalid ref name."""


class NotGatRepository(Exception):
    """Indicates that no gat repository was found."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        """Initialize a NotGatRepository exception.

        Args:
            *args: Error message and additional positional arguments.
            **kwargs: Additional keyword arguments.
        """
        Exception.__init__(self, *args, **kwargs)
