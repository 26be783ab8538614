# objects.py -- Access to base gat objects
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

"""Access to base gat objects.

Objects are untyped on disk: a blob, a tree and a commit are all stored as
the compressed bytes of their encoding, addressed by the SHA-1 of those
bytes. The classes here only give the encodings a shape.

Tree encoding: one line per entry, ``kind<TAB>sha<TAB>name<LF>``.

Commit encoding::

    format 1
    tree <sha>
    parent <sha>
    timestamp <seconds since epoch>

    <message>

The ``parent`` line is absent for a root commit.
"""

__all__ = [
    "BLOB",
    "COMMIT_FORMAT_VERSION",
    "HEX_LENGTH",
    "TREE",
    "Blob",
    "Commit",
    "ObjectID",
    "ShaFile",
    "Tree",
    "TreeEntry",
    "check_hexsha",
    "hex_to_filename",
    "make_sha",
    "sha_to_filename_parts",
    "valid_hexsha",
]

import binascii
import hashlib
import os
import time
from collections.abc import Iterable, Iterator
from typing import NamedTuple, Optional, Union

from .errors import CorruptObjectError, HashError

ObjectID = bytes

HEX_LENGTH = 40

BLOB = b"blob"
TREE = b"tree"
_ENTRY_KINDS = (BLOB, TREE)

COMMIT_FORMAT_VERSION = 1

# Header fields for commits
_FORMAT_HEADER = b"format"
_TREE_HEADER = b"tree"
_PARENT_HEADER = b"parent"
_TIMESTAMP_HEADER = b"timestamp"


def make_sha(data: bytes = b"") -> "hashlib._Hash":
    """Return a new hash object for object ids."""
    return hashlib.sha1(data)


def valid_hexsha(hex: Union[bytes, str]) -> bool:
    """Check if a string is a valid hex object id."""
    if len(hex) != HEX_LENGTH:
        return False
    try:
        binascii.unhexlify(hex)
    except (TypeError, ValueError):
        return False
    else:
        return True


def check_hexsha(hex: Union[bytes, str], error_msg: str) -> None:
    """Check if a string is a valid hex sha string.

    Args:
      hex: Hex string to check
      error_msg: Error message to use in exception
    Raises:
      CorruptObjectError: Raised when the string is not valid
    """
    if not valid_hexsha(hex):
        raise CorruptObjectError(None, f"{error_msg} {hex!r}")


def hexdigest(hasher: "hashlib._Hash") -> ObjectID:
    """Return the hex digest of hasher as an object id.

    Raises:
      HashError: if the digest does not have the object id length
    """
    sha = hasher.hexdigest().encode("ascii")
    if len(sha) != HEX_LENGTH:
        raise HashError(HEX_LENGTH, sha)
    return sha


def sha_to_filename_parts(sha: Union[bytes, str]) -> tuple[str, str]:
    """Split a hex sha into its directory and file name parts."""
    if isinstance(sha, bytes):
        sha = sha.decode("ascii")
    return sha[:2], sha[2:]


def hex_to_filename(path: Union[str, bytes], hex: Union[str, bytes]) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    directory, filename = sha_to_filename_parts(hex)
    return os.path.join(os.fsdecode(path), directory, filename)


class ShaFile:
    """An object that is stored by the hash of its encoding."""

    type_name: bytes

    def as_raw_string(self) -> bytes:
        """Return the encoding of this object."""
        raise NotImplementedError(self.as_raw_string)

    @classmethod
    def from_raw_string(
        cls, data: bytes, sha: Optional[ObjectID] = None
    ) -> "ShaFile":
        """Parse an encoding, as read back from the object store."""
        raise NotImplementedError(cls.from_raw_string)

    @property
    def id(self) -> ObjectID:
        """The hex object id of this object."""
        return hexdigest(make_sha(self.as_raw_string()))

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, ShaFile)
            and self.type_name == other.type_name
            and self.as_raw_string() == other.as_raw_string()
        )

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id.decode('ascii')}>"


class Blob(ShaFile):
    """Raw file content."""

    type_name = BLOB

    __slots__ = ("data",)

    def __init__(self, data: bytes = b"") -> None:
        self.data = data

    def as_raw_string(self) -> bytes:
        return self.data

    @classmethod
    def from_raw_string(cls, data: bytes, sha: Optional[ObjectID] = None) -> "Blob":
        return cls(data)


class TreeEntry(NamedTuple):
    """Named entry in a tree."""

    kind: bytes
    sha: ObjectID
    name: bytes

    def is_tree(self) -> bool:
        return self.kind == TREE

    def is_blob(self) -> bool:
        return self.kind == BLOB


def parse_tree(text: bytes, sha: Optional[ObjectID] = None) -> Iterator[TreeEntry]:
    """Parse a tree text.

    Lines that do not have exactly three fields are skipped.

    Args:
      text: Serialized text to parse
      sha: Id of the tree, for error messages
    Returns: iterator of TreeEntry
    Raises:
      CorruptObjectError: if an entry has an unknown kind or a bad hash
    """
    for line in text.split(b"\n"):
        fields = line.split(b"\t")
        if len(fields) != 3:
            continue
        kind, hexsha, name = fields
        if kind not in _ENTRY_KINDS:
            raise CorruptObjectError(sha, f"unknown tree entry kind {kind!r}")
        if not valid_hexsha(hexsha):
            raise CorruptObjectError(sha, f"invalid sha {hexsha!r} for {name!r}")
        yield TreeEntry(kind, hexsha, name)


def serialize_tree(entries: Iterable[TreeEntry]) -> Iterator[bytes]:
    """Serialize the entries of a tree.

    Args:
      entries: Iterable over TreeEntry tuples
    Returns: Serialized tree lines
    """
    for kind, sha, name in entries:
        if b"\t" in name or b"\n" in name:
            raise ValueError(f"name {name!r} cannot be stored in a tree")
        yield kind + b"\t" + sha + b"\t" + name + b"\n"


class Tree(ShaFile):
    """A directory snapshot: an ordered list of named blobs and subtrees.

    The order is the order entries were added in; it is not normalized.
    """

    type_name = TREE

    def __init__(self, entries: Optional[Iterable[TreeEntry]] = None) -> None:
        self._entries: list[TreeEntry] = list(entries or [])

    def add(self, kind: bytes, sha: ObjectID, name: bytes) -> None:
        """Append an entry.

        Args:
          kind: BLOB or TREE
          sha: Hex id of the blob or subtree
          name: File or directory name
        """
        if kind not in _ENTRY_KINDS:
            raise ValueError(f"unknown tree entry kind {kind!r}")
        self._entries.append(TreeEntry(kind, sha, name))

    def entries(self) -> list[TreeEntry]:
        """Return the entries in this tree, in stored order."""
        return list(self._entries)

    def __iter__(self) -> Iterator[TreeEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: bytes) -> bool:
        return any(entry.name == name for entry in self._entries)

    def __getitem__(self, name: bytes) -> TreeEntry:
        for entry in self._entries:
            if entry.name == name:
                return entry
        raise KeyError(name)

    def has_entry(self, kind: bytes, name: bytes) -> bool:
        """Check for an entry with the given name and kind."""
        return any(
            entry.kind == kind and entry.name == name for entry in self._entries
        )

    def sort(self) -> None:
        """Order the entries by name."""
        self._entries.sort(key=lambda entry: entry.name)

    def as_raw_string(self) -> bytes:
        return b"".join(serialize_tree(self._entries))

    @classmethod
    def from_raw_string(cls, data: bytes, sha: Optional[ObjectID] = None) -> "Tree":
        return cls(parse_tree(data, sha))


class Commit(ShaFile):
    """A snapshot in history: a tree, an optional parent, message and time."""

    type_name = b"commit"

    def __init__(
        self,
        tree: ObjectID,
        parent: Optional[ObjectID] = None,
        message: bytes = b"",
        timestamp: Optional[int] = None,
    ) -> None:
        """Create a commit.

        Args:
          tree: Hex id of the root tree
          parent: Hex id of the parent commit; None or b"" for a root commit
          message: Commit message
          timestamp: Seconds since the epoch; defaults to now
        """
        self.tree = tree
        self.parent = parent or None
        self.message = message
        if timestamp is None:
            timestamp = int(time.time())
        self.timestamp = timestamp

    def as_raw_string(self) -> bytes:
        lines = [
            _FORMAT_HEADER + b" " + str(COMMIT_FORMAT_VERSION).encode("ascii"),
            _TREE_HEADER + b" " + self.tree,
        ]
        if self.parent:
            lines.append(_PARENT_HEADER + b" " + self.parent)
        lines.append(_TIMESTAMP_HEADER + b" " + str(self.timestamp).encode("ascii"))
        return b"\n".join(lines) + b"\n\n" + self.message

    @classmethod
    def from_raw_string(cls, data: bytes, sha: Optional[ObjectID] = None) -> "Commit":
        """Parse a commit encoding.

        Raises:
          CorruptObjectError: on an unknown format version or a missing or
            malformed field
        """
        header, sep, message = data.partition(b"\n\n")
        if not sep:
            raise CorruptObjectError(sha, "commit has no message separator")
        fields: dict[bytes, bytes] = {}
        for line in header.split(b"\n"):
            key, sep, value = line.partition(b" ")
            if not sep:
                raise CorruptObjectError(sha, f"malformed commit header {line!r}")
            if key in fields:
                raise CorruptObjectError(sha, f"duplicate commit header {key!r}")
            fields[key] = value

        try:
            version = int(fields[_FORMAT_HEADER])
        except KeyError:
            raise CorruptObjectError(sha, "commit has no format header") from None
        except ValueError:
            raise CorruptObjectError(
                sha, f"invalid commit format {fields[_FORMAT_HEADER]!r}"
            ) from None
        if version != COMMIT_FORMAT_VERSION:
            raise CorruptObjectError(sha, f"unsupported commit format {version}")

        try:
            tree = fields[_TREE_HEADER]
            timestamp_text = fields[_TIMESTAMP_HEADER]
        except KeyError as e:
            raise CorruptObjectError(
                sha, f"commit has no {e.args[0].decode('ascii')} header"
            ) from None
        check_hexsha(tree, "invalid tree sha")
        parent = fields.get(_PARENT_HEADER)
        if parent is not None:
            check_hexsha(parent, "invalid parent sha")
        try:
            timestamp = int(timestamp_text)
        except ValueError:
            raise CorruptObjectError(
                sha, f"invalid commit timestamp {timestamp_text!r}"
            ) from None
        return cls(tree, parent=parent, message=message, timestamp=timestamp)

    def __repr__(self) -> str:
        return f"<Commit {self.id.decode('ascii')} tree={self.tree.decode('ascii')}>"
