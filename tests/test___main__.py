# test___main__.py -- Tests for __main__.py
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

"""Tests for __main__.py module entry point."""

import os
import subprocess
import sys

import gat

from . import TestCase


class MainModuleTests(TestCase):
    """Tests for the __main__.py module entry point."""

    def run_module(self, *args: str) -> subprocess.CompletedProcess:
        env = dict(os.environ)
        env["PYTHONPATH"] = os.path.dirname(os.path.dirname(gat.__file__))
        return subprocess.run(
            [sys.executable, "-m", "gat", *args],
            capture_output=True,
            text=True,
            cwd=self.make_tempdir(),
            env=env,
        )

    def test_main_module_help_flag(self) -> None:
        result = self.run_module("--help")
        self.assertEqual(1, result.returncode)
        self.assertTrue(result.stdout.startswith("usage: gat"))

    def test_main_module_no_args(self) -> None:
        result = self.run_module()
        self.assertEqual(1, result.returncode)
        self.assertTrue(result.stdout.startswith("usage: gat"))

    def test_main_module_status(self) -> None:
        result = self.run_module("status")
        self.assertEqual(0, result.returncode, result.stderr)
        self.assertEqual(
            "Current branch : main\nHead currently pointing to \n", result.stdout
        )
