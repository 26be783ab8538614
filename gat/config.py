# config.py -- Reading and writing gat config files
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

"""Reading and writing the repository configuration file.

``.gat/config`` uses git's syntax restricted to flat sections::

    [core]
    	repositoryformatversion = 0
    	compression = 9

Section and variable names are case-insensitive. Subsections are not
supported.
"""

__all__ = [
    "ConfigFile",
]

import os
from typing import IO, Optional, Union

from .file import AtomicFile
from .log_utils import getLogger

logger = getLogger(__name__)

NameLike = Union[bytes, str]
ValueLike = Union[bytes, str, bool, int]

_TRUE_VALUES = (b"true", b"yes", b"on", b"1")
_FALSE_VALUES = (b"false", b"no", b"off", b"0", b"")

_UNESCAPE = {
    ord("\\"): b"\\",
    ord('"'): b'"',
    ord("n"): b"\n",
    ord("t"): b"\t",
}


def _check_name(name: bytes) -> bool:
    return bool(name) and all(
        c == ord("-") or bytes([c]).isalnum() for c in name
    )


def _strip_comment(line: bytes) -> bytes:
    """Cut a line at the first ``#`` or ``;`` outside double quotes."""
    quoted = False
    escaped = False
    for i, c in enumerate(line):
        if escaped:
            escaped = False
        elif c == ord("\\"):
            escaped = True
        elif c == ord('"'):
            quoted = not quoted
        elif c in (ord("#"), ord(";")) and not quoted:
            return line[:i]
    return line


def _parse_value(raw: bytes) -> bytes:
    ret = bytearray()
    quoted = False
    it = iter(raw.strip())
    for c in it:
        if c == ord("\\"):
            nxt = next(it, None)
            if nxt is None:
                raise ValueError("escape character at end of value")
            if nxt not in _UNESCAPE:
                raise ValueError(f"unknown escape sequence \\{chr(nxt)}")
            ret.extend(_UNESCAPE[nxt])
        elif c == ord('"'):
            quoted = not quoted
        else:
            ret.append(c)
    if quoted:
        raise ValueError("missing end quote")
    return bytes(ret)


def _format_value(value: bytes) -> bytes:
    escaped = (
        value.replace(b"\\", b"\\\\")
        .replace(b'"', b'\\"')
        .replace(b"\n", b"\\n")
        .replace(b"\t", b"\\t")
    )
    if escaped != escaped.strip() or b"#" in escaped or b";" in escaped:
        return b'"' + escaped + b'"'
    return escaped


class ConfigFile:
    """Settings of a repository, as read from or written to a config file.

    Names are looked up case-insensitively; the spelling a name was first
    given with is kept for writing.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self.path: Optional[str] = None
        # lowered section -> (section, {lowered name -> (name, value)})
        self._sections: dict[
            bytes, tuple[bytes, dict[bytes, tuple[bytes, bytes]]]
        ] = {}

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.path!r}>"

    def _to_bytes(self, value: NameLike) -> bytes:
        if isinstance(value, str):
            return value.encode(self.encoding)
        return value

    def get(self, section: NameLike, name: NameLike) -> bytes:
        """Retrieve the contents of a setting.

        Raises:
          KeyError: if the setting is not present
        """
        _, values = self._sections[self._to_bytes(section).lower()]
        return values[self._to_bytes(name).lower()][1]

    def get_boolean(self, section: NameLike, name: NameLike, default: bool) -> bool:
        """Retrieve a setting as a boolean.

        Raises:
          ValueError: if the setting is present but not a boolean
        """
        try:
            value = self.get(section, name).lower()
        except KeyError:
            return default
        if value in _TRUE_VALUES:
            return True
        if value in _FALSE_VALUES:
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def get_int(self, section: NameLike, name: NameLike, default: int) -> int:
        """Retrieve a setting as an integer.

        Raises:
          ValueError: if the setting is present but not an integer
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"not a valid integer: {value!r}") from None

    def set(self, section: NameLike, name: NameLike, value: ValueLike) -> None:
        """Set a setting, adding its section if needed.

        Raises:
          ValueError: if the section or variable name is not valid
        """
        section = self._to_bytes(section)
        name = self._to_bytes(name)
        if not _check_name(section):
            raise ValueError(f"invalid section name {section!r}")
        if not _check_name(name):
            raise ValueError(f"invalid variable name {name!r}")
        if isinstance(value, bool):
            value = b"true" if value else b"false"
        elif isinstance(value, int):
            value = str(value).encode("ascii")
        _, values = self._sections.setdefault(section.lower(), (section, {}))
        spelling = values.get(name.lower(), (name, b""))[0]
        values[name.lower()] = (spelling, self._to_bytes(value))

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object.

        Raises:
          ValueError: if the file is not valid configuration syntax
        """
        ret = cls()
        section: Optional[bytes] = None
        for lineno, line in enumerate(f.readlines(), 1):
            if lineno == 1 and line.startswith(b"\xef\xbb\xbf"):
                line = line[3:]
            line = line.strip()
            if line.startswith(b"["):
                end = line.find(b"]")
                if end == -1:
                    raise ValueError(f"line {lineno}: expected trailing ]")
                section = line[1:end].strip()
                if not _check_name(section):
                    raise ValueError(f"line {lineno}: invalid section {section!r}")
                ret._sections.setdefault(section.lower(), (section, {}))
                line = line[end + 1 :]
            if not _strip_comment(line).strip():
                continue
            if section is None:
                raise ValueError(f"line {lineno}: setting outside of a section")
            name, sep, raw = line.partition(b"=")
            name = name.strip()
            if not _check_name(name):
                raise ValueError(f"line {lineno}: invalid variable name {name!r}")
            # A bare name is a boolean switched on.
            value = _parse_value(_strip_comment(raw)) if sep else b"true"
            ret.set(section, name, value)
        return ret

    @classmethod
    def from_path(cls, path: Union[str, "os.PathLike[str]"]) -> "ConfigFile":
        """Read configuration from a file on disk."""
        path = os.fspath(path)
        with open(path, "rb") as f:
            ret = cls.from_file(f)
        ret.path = path
        logger.debug("read configuration from %s", path)
        return ret

    def write_to_file(self, f: Union[IO[bytes], AtomicFile]) -> None:
        """Write configuration to a file-like object."""
        for section, values in self._sections.values():
            f.write(b"[" + section + b"]\n")
            for name, value in values.values():
                f.write(b"\t" + name + b" = " + _format_value(value) + b"\n")

    def write_to_path(
        self,
        path: Optional[Union[str, "os.PathLike[str]"]] = None,
        tempdir: Optional[Union[str, "os.PathLike[str]"]] = None,
    ) -> None:
        """Write configuration to a file on disk.

        Args:
          path: Target path; defaults to the path the file was read from
          tempdir: Scratch directory for the atomic write; defaults to the
            directory containing the target
        """
        if path is None:
            if self.path is None:
                raise ValueError("No path specified and no default path available")
            path = self.path
        if tempdir is None:
            tempdir = os.path.dirname(os.path.abspath(path))
        with AtomicFile(tempdir, path) as f:
            self.write_to_file(f)
