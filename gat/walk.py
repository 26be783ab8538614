# walk.py -- General implementation of walking commits
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

"""Walking the history of a commit."""

__all__ = [
    "WalkEntry",
    "Walker",
]

from collections.abc import Iterator
from typing import TYPE_CHECKING, Optional

from .objects import Commit, ObjectID

if TYPE_CHECKING:
    from .object_store import DiskObjectStore


class WalkEntry:
    """Object encapsulating a single result from a walk."""

    def __init__(self, commit_id: ObjectID, commit: Commit) -> None:
        self.commit_id = commit_id
        self.commit = commit

    def __repr__(self) -> str:
        return f"<WalkEntry commit={self.commit_id.decode('ascii')}>"


class Walker:
    """Iterator over the first-parent history of a commit.

    The walk is lazy: each commit is loaded when the iterator reaches it. It
    ends after the root commit, or raises NotFoundError at the first commit
    that is not in the store.
    """

    def __init__(
        self,
        store: "DiskObjectStore",
        start: ObjectID,
        max_entries: Optional[int] = None,
    ) -> None:
        """Constructor.

        Args:
          store: ObjectStore instance for looking up commits
          start: Id of the newest commit; b"" yields nothing
          max_entries: The maximum number of entries to yield, or None for
            no limit
        """
        self.store = store
        self.start = start
        self.max_entries = max_entries

    def __iter__(self) -> Iterator[WalkEntry]:
        sha: Optional[ObjectID] = self.start or None
        num_entries = 0
        while sha is not None:
            if self.max_entries is not None and num_entries >= self.max_entries:
                return
            commit = self.store.get_commit(sha)
            yield WalkEntry(sha, commit)
            num_entries += 1
            sha = commit.parent
