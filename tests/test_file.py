# test_file.py -- Test for gat.file
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

"""Tests for gat.file."""

import os

from gat.file import AtomicFile, ensure_dir_exists

from . import TestCase


class AtomicFileTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.tempdir = self.make_tempdir()
        self.scratch = os.path.join(self.tempdir, "scratch")
        os.mkdir(self.scratch)
        self.path = os.path.join(self.tempdir, "foo")
        with open(self.path, "wb") as f:
            f.write(b"foo contents")

    def read(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def test_write_replaces_on_close(self) -> None:
        f = AtomicFile(self.scratch, self.path)
        f.write(b"new contents")
        self.assertEqual(b"foo contents", self.read(self.path))
        f.close()
        self.assertEqual(b"new contents", self.read(self.path))
        self.assertEqual([], os.listdir(self.scratch))

    def test_abort_leaves_target(self) -> None:
        f = AtomicFile(self.scratch, self.path)
        f.write(b"new contents")
        f.abort()
        self.assertTrue(f.closed)
        self.assertEqual(b"foo contents", self.read(self.path))
        self.assertEqual([], os.listdir(self.scratch))

    def test_abort_close(self) -> None:
        f = AtomicFile(self.scratch, self.path)
        f.abort()
        f.close()
        self.assertEqual(b"foo contents", self.read(self.path))

    def test_target_given_at_close(self) -> None:
        target = os.path.join(self.tempdir, "bar")
        f = AtomicFile(self.scratch)
        f.write(b"bar contents")
        f.close(target)
        self.assertEqual(b"bar contents", self.read(target))

    def test_close_without_target(self) -> None:
        f = AtomicFile(self.scratch)
        f.write(b"lost")
        self.assertRaises(ValueError, f.close)
        self.assertTrue(f.closed)
        self.assertEqual([], os.listdir(self.scratch))

    def test_context_manager(self) -> None:
        with AtomicFile(self.scratch, self.path) as f:
            f.write(b"new contents")
        self.assertEqual(b"new contents", self.read(self.path))

    def test_context_manager_aborts_on_error(self) -> None:
        def write_and_fail() -> None:
            with AtomicFile(self.scratch, self.path) as f:
                f.write(b"new contents")
                raise RuntimeError("interrupted")

        self.assertRaises(RuntimeError, write_and_fail)
        self.assertEqual(b"foo contents", self.read(self.path))
        self.assertEqual([], os.listdir(self.scratch))

    def test_mask(self) -> None:
        target = os.path.join(self.tempdir, "ro")
        with AtomicFile(self.scratch, target, mask=0o444) as f:
            f.write(b"x")
        self.assertEqual(0o444, os.stat(target).st_mode & 0o777)

    def test_fsync(self) -> None:
        with AtomicFile(self.scratch, self.path, fsync=True) as f:
            f.write(b"synced")
        self.assertEqual(b"synced", self.read(self.path))

    def test_bytes_paths(self) -> None:
        with AtomicFile(os.fsencode(self.scratch), os.fsencode(self.path)) as f:
            f.write(b"bytes")
        self.assertEqual(b"bytes", self.read(self.path))

    def test_missing_tempdir(self) -> None:
        self.assertRaises(
            FileNotFoundError,
            AtomicFile,
            os.path.join(self.tempdir, "nonexistent"),
            self.path,
        )


class EnsureDirExistsTests(TestCase):
    def test_creates_parents(self) -> None:
        path = os.path.join(self.make_tempdir(), "a", "b", "c")
        ensure_dir_exists(path)
        self.assertTrue(os.path.isdir(path))

    def test_existing(self) -> None:
        path = self.make_tempdir()
        ensure_dir_exists(path)
        self.assertTrue(os.path.isdir(path))
