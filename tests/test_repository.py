# test_repository.py -- tests for repository.py
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

"""Tests for the repository."""

import os

from gat.config import ConfigFile
from gat.errors import NotFoundError, NotGatRepository
from gat.objects import BLOB, Tree
from gat.repo import CONTROLDIR, Repo, UnsupportedVersion
from gat.walk import Walker

from . import TestCase

hello_sha = b"aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d"


class CreateRepositoryTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.path = self.make_tempdir()

    def controlpath(self, *parts: str) -> str:
        return os.path.join(self.path, CONTROLDIR, *parts)

    def read(self, *parts: str) -> bytes:
        with open(self.controlpath(*parts), "rb") as f:
            return f.read()

    def test_init_layout(self) -> None:
        repo = Repo.init(self.path)
        for d in ("objects", "refs", "temp"):
            self.assertTrue(os.path.isdir(self.controlpath(d)), d)
        self.assertTrue(os.path.isdir(self.controlpath("refs", "heads")))
        self.assertTrue(os.path.isdir(self.controlpath("refs", "tags")))
        self.assertEqual(b"refs/heads/main", self.read("HEAD"))
        self.assertEqual(b"", self.read("refs", "heads", "main"))
        self.assertEqual(b"main", repo.refs.current_branch())
        self.assertEqual(b"", repo.head())
        self.assertEqual([], list(repo.object_store))

    def test_init_config(self) -> None:
        Repo.init(self.path)
        cf = ConfigFile.from_path(self.controlpath("config"))
        self.assertEqual(b"0", cf.get("core", "repositoryformatversion"))

    def test_init_mkdir(self) -> None:
        path = os.path.join(self.path, "new")
        Repo.init(path, mkdir=True)
        self.assertTrue(os.path.isdir(os.path.join(path, CONTROLDIR, "objects")))

    def test_init_default_branch(self) -> None:
        repo = Repo.init(self.path, default_branch=b"trunk")
        self.assertEqual(b"trunk", repo.refs.current_branch())
        self.assertEqual(b"", self.read("refs", "heads", "trunk"))

    def test_init_default_branch_from_config(self) -> None:
        os.makedirs(self.controlpath())
        cf = ConfigFile()
        cf.set("init", "defaultBranch", "trunk")
        cf.write_to_path(self.controlpath("config"))
        repo = Repo.init(self.path)
        self.assertEqual(b"trunk", repo.refs.current_branch())

    def test_init_idempotent(self) -> None:
        repo = Repo.init(self.path)
        with open(os.path.join(self.path, "a.txt"), "wb") as f:
            f.write(b"hello")
        commit_id = repo.do_commit(b"first")
        repo.refs.create_branch(b"feature")

        repo = Repo.init(self.path)
        self.assertEqual(b"feature", repo.refs.current_branch())
        self.assertEqual(commit_id, repo.head())
        self.assertEqual(commit_id, repo.refs.read_ref(b"refs/heads/main"))

    def test_init_repairs_empty_head(self) -> None:
        Repo.init(self.path)
        with open(self.controlpath("HEAD"), "wb"):
            pass
        repo = Repo.init(self.path)
        self.assertEqual(b"main", repo.refs.current_branch())

    def test_init_recreates_temp(self) -> None:
        Repo.init(self.path)
        os.rmdir(self.controlpath("temp"))
        Repo.init(self.path)
        self.assertTrue(os.path.isdir(self.controlpath("temp")))

    def test_open_missing(self) -> None:
        self.assertRaises(NotGatRepository, Repo, self.path)

    def test_open_unsupported_version(self) -> None:
        Repo.init(self.path)
        cf = ConfigFile.from_path(self.controlpath("config"))
        cf.set("core", "repositoryformatversion", 1)
        cf.write_to_path()
        self.assertRaises(UnsupportedVersion, Repo, self.path)

    def test_open_settings(self) -> None:
        Repo.init(self.path)
        cf = ConfigFile.from_path(self.controlpath("config"))
        cf.set("core", "compression", 0)
        cf.set("core", "sortTreeEntries", True)
        cf.write_to_path()
        repo = Repo(self.path)
        self.assertEqual(0, repo.object_store.compression_level)
        self.assertTrue(repo.sort_tree_entries)

    def test_open_bytes_path(self) -> None:
        Repo.init(self.path)
        repo = Repo(os.fsencode(self.path))
        self.assertEqual(self.path, repo.path)

    def test_discover(self) -> None:
        Repo.init(self.path)
        subdir = os.path.join(self.path, "a", "b")
        os.makedirs(subdir)
        self.assertEqual(self.path, Repo.discover(subdir).path)

    def test_discover_missing(self) -> None:
        self.assertRaises(NotGatRepository, Repo.discover, self.path)

    def test_context_manager(self) -> None:
        Repo.init(self.path)
        with Repo(self.path) as repo:
            self.assertEqual(b"main", repo.refs.current_branch())


class RepositoryCommitTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.path = self.make_tempdir()
        self.repo = Repo.init(self.path)
        self.addCleanup(self.repo.close)

    def write(self, relpath: str, contents: bytes) -> None:
        path = os.path.join(self.path, relpath)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(contents)

    def test_first_commit_objects(self) -> None:
        self.write("a.txt", b"hello")
        commit_id = self.repo.do_commit(b"first")

        self.assertEqual(3, len(list(self.repo.object_store)))
        self.assertEqual(commit_id, self.repo.head())
        commit = self.repo.read_commit(commit_id)
        self.assertIsNone(commit.parent)
        self.assertEqual(b"first", commit.message)
        self.assertEqual(
            b"blob\t" + hello_sha + b"\ta.txt\n",
            self.repo.object_store.get_raw(commit.tree),
        )
        self.assertEqual(b"hello", self.repo.object_store.get_raw(hello_sha))
        with open(
            os.path.join(self.path, CONTROLDIR, "refs", "heads", "main"), "rb"
        ) as f:
            self.assertEqual(commit_id, f.read())

    def test_second_commit_has_parent(self) -> None:
        self.write("a.txt", b"hello")
        first = self.repo.do_commit(b"first")
        self.write("a.txt", b"bye")
        second = self.repo.do_commit(b"second")
        self.assertEqual(first, self.repo.read_commit(second).parent)
        self.assertEqual(second, self.repo.head())

    def test_unchanged_tree_still_commits(self) -> None:
        self.write("a.txt", b"hello")
        first = self.repo.do_commit(b"first", timestamp=1)
        second = self.repo.do_commit(b"second", timestamp=2)
        self.assertNotEqual(first, second)
        self.assertEqual(
            self.repo.read_commit(first).tree, self.repo.read_commit(second).tree
        )

    def test_create_commit(self) -> None:
        tree = Tree()
        tree.add(BLOB, self.repo.object_store.add_raw(b"x"), b"x")
        tree_id = self.repo.object_store.add_object(tree)
        commit_id = self.repo.create_commit(tree_id, None, b"msg", timestamp=42)
        commit = self.repo.read_commit(commit_id)
        self.assertEqual(tree_id, commit.tree)
        self.assertEqual(42, commit.timestamp)
        self.assertEqual(commit_id, self.repo.head())

    def test_create_commit_empty_parent(self) -> None:
        tree_id = self.repo.object_store.add_object(Tree())
        commit_id = self.repo.create_commit(tree_id, b"", b"root")
        self.assertIsNone(self.repo.read_commit(commit_id).parent)

    def test_commit_skips_control_dirs(self) -> None:
        self.write("a.txt", b"hello")
        self.write(os.path.join(".git", "config"), b"[core]\n")
        commit_id = self.repo.do_commit(b"first")
        tree = self.repo.object_store.get_tree(self.repo.read_commit(commit_id).tree)
        self.assertEqual([b"a.txt"], [e.name for e in tree])

    def test_read_commit_missing(self) -> None:
        self.assertRaises(NotFoundError, self.repo.read_commit, b"1" * 40)

    def test_walk(self) -> None:
        self.write("a.txt", b"hello")
        a = self.repo.do_commit(b"A")
        self.write("a.txt", b"bye")
        b = self.repo.do_commit(b"B")
        self.assertEqual([b, a], [e.commit_id for e in self.repo.get_walker()])
        self.assertEqual(
            [b"B", b"A"], [e.commit.message for e in self.repo.get_walker()]
        )

    def test_walk_from_commit(self) -> None:
        self.write("a.txt", b"hello")
        a = self.repo.do_commit(b"A")
        self.repo.do_commit(b"B")
        self.assertEqual([a], [e.commit_id for e in self.repo.get_walker(a)])

    def test_walk_max_entries(self) -> None:
        self.write("a.txt", b"hello")
        for i in range(3):
            self.repo.do_commit(b"c%d" % i, timestamp=i)
        self.assertEqual(
            [b"c2", b"c1"],
            [e.commit.message for e in self.repo.get_walker(max_entries=2)],
        )

    def test_walk_empty_branch(self) -> None:
        self.assertEqual([], list(self.repo.get_walker()))

    def test_walk_missing_commit(self) -> None:
        walker = Walker(self.repo.object_store, b"1" * 40)
        self.assertRaises(NotFoundError, list, walker)

    def test_walk_missing_parent(self) -> None:
        tree_id = self.repo.object_store.add_object(Tree())
        commit_id = self.repo.create_commit(tree_id, b"2" * 40, b"orphan")
        walker = iter(self.repo.get_walker())
        self.assertEqual(commit_id, next(walker).commit_id)
        self.assertRaises(NotFoundError, next, walker)
