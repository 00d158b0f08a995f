# test_cli.py -- tests for the command-line interface
# Copyright (C) 2026 The Gitlet Authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# Gitlet is dual-licensed under the Apache License, Version 2.0 and the GNU
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


"""Tests for gitlet.cli."""

import io
import os
import shutil
import tempfile
from unittest import mock

from gitlet import cli
from gitlet.repo import Repo

from . import TestCase


class CliTestCase(TestCase):
    """Runs commands in a fresh temporary directory."""

    def setUp(self) -> None:
        super().setUp()
        self.test_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.test_dir)
        old_cwd = os.getcwd()
        os.chdir(self.test_dir)
        self.addCleanup(os.chdir, old_cwd)
        patcher = mock.patch("gitlet.cli.default_logging_config")
        patcher.start()
        self.addCleanup(patcher.stop)

    def run_command(self, *args: str) -> tuple[int | None, str]:
        with mock.patch("sys.stdout", new_callable=io.StringIO) as stdout:
            ret = cli.main(list(args))
        return ret, stdout.getvalue()

    def write(self, name: str, contents: bytes) -> None:
        with open(os.path.join(self.test_dir, name), "wb") as f:
            f.write(contents)

    def read(self, name: str) -> bytes:
        with open(os.path.join(self.test_dir, name), "rb") as f:
            return f.read()

    def head(self) -> bytes:
        with Repo(self.test_dir) as r:
            return r.head()


class DispatchTests(CliTestCase):
    def test_no_arguments(self) -> None:
        self.assertEqual((1, "Please enter a command.\n"), self.run_command())

    def test_unknown_command(self) -> None:
        self.assertEqual(
            (1, "No command with that name exists.\n"), self.run_command("frobnicate")
        )

    def test_not_a_repository(self) -> None:
        self.assertEqual(
            (1, "Not in an initialized Gitlet directory.\n"), self.run_command("log")
        )

    def test_extra_operands(self) -> None:
        self.run_command("init")
        self.assertEqual((1, "Incorrect operands.\n"), self.run_command("log", "x"))
        self.assertEqual((1, "Incorrect operands.\n"), self.run_command("add"))

    def test_commands_table(self) -> None:
        self.assertEqual(
            {
                "add",
                "branch",
                "checkout",
                "commit",
                "find",
                "global-log",
                "init",
                "log",
                "merge",
                "reset",
                "rm",
                "rm-branch",
                "status",
            },
            set(cli.commands),
        )


class InitTests(CliTestCase):
    def test_init(self) -> None:
        self.assertEqual((None, ""), self.run_command("init"))
        self.assertTrue(os.path.isdir(os.path.join(self.test_dir, ".gitlet")))

    def test_init_twice(self) -> None:
        self.run_command("init")
        ret, out = self.run_command("init")
        self.assertEqual(1, ret)
        self.assertEqual(
            "A Gitlet version-control system already exists in the current directory.\n",
            out,
        )


class WorkflowTests(CliTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.run_command("init")
        self.write("wug.txt", b"wug\n")
        self.assertEqual((None, ""), self.run_command("add", "wug.txt"))
        self.assertEqual((None, ""), self.run_command("commit", "add wug"))

    def test_log(self) -> None:
        ret, out = self.run_command("log")
        self.assertIsNone(ret)
        self.assertTrue(out.startswith("===\ncommit " + self.head().decode() + "\n"))
        self.assertIn("\nadd wug\n", out)
        self.assertTrue(out.endswith("initial commit\n\n"))

    def test_add_inside_controldir(self) -> None:
        self.assertEqual(
            (1, "Invalid path: .gitlet/config is inside .gitlet\n"),
            self.run_command("add", ".gitlet/config"),
        )

    def test_commit_without_message(self) -> None:
        self.write("wug.txt", b"changed\n")
        self.run_command("add", "wug.txt")
        self.assertEqual((1, "Please enter a commit message.\n"), self.run_command("commit"))
        self.assertEqual(
            (1, "Please enter a commit message.\n"), self.run_command("commit", "")
        )

    def test_commit_nothing(self) -> None:
        self.assertEqual(
            (1, "No changes added to the commit.\n"), self.run_command("commit", "x")
        )

    def test_find(self) -> None:
        self.assertEqual(
            (None, self.head().decode() + "\n"), self.run_command("find", "add wug")
        )

    def test_status(self) -> None:
        ret, out = self.run_command("status")
        self.assertIsNone(ret)
        self.assertTrue(out.startswith("=== Branches ===\n*master\n\n"))

    def test_checkout_file(self) -> None:
        self.write("wug.txt", b"scribble")
        self.assertEqual((None, ""), self.run_command("checkout", "--", "wug.txt"))
        self.assertEqual(b"wug\n", self.read("wug.txt"))

    def test_checkout_file_from_commit(self) -> None:
        first = self.head().decode()
        self.write("wug.txt", b"second\n")
        self.run_command("add", "wug.txt")
        self.run_command("commit", "second")
        self.assertEqual(
            (None, ""), self.run_command("checkout", first[:6], "--", "wug.txt")
        )
        self.assertEqual(b"wug\n", self.read("wug.txt"))

    def test_checkout_missing_file(self) -> None:
        self.assertEqual(
            (1, "File does not exist in that commit.\n"),
            self.run_command("checkout", "--", "nope.txt"),
        )

    def test_checkout_bad_operands(self) -> None:
        for args in [
            ("checkout",),
            ("checkout", "--"),
            ("checkout", "a", "++", "wug.txt"),
            ("checkout", "a", "b", "c", "d"),
        ]:
            self.assertEqual((1, "Incorrect operands.\n"), self.run_command(*args))

    def test_branches(self) -> None:
        self.assertEqual((None, ""), self.run_command("branch", "other"))
        self.assertEqual(
            (1, "A branch with that name already exists.\n"),
            self.run_command("branch", "other"),
        )
        self.assertEqual((None, ""), self.run_command("checkout", "other"))
        self.assertEqual(
            (1, "No need to checkout the current branch.\n"),
            self.run_command("checkout", "other"),
        )
        self.assertEqual(
            (1, "Cannot remove the current branch.\n"),
            self.run_command("rm-branch", "other"),
        )
        self.run_command("checkout", "master")
        self.assertEqual((None, ""), self.run_command("rm-branch", "other"))
        self.assertEqual(
            (1, "No such branch exists.\n"), self.run_command("checkout", "other")
        )

    def test_merge_fast_forward(self) -> None:
        self.run_command("branch", "other")
        self.run_command("checkout", "other")
        self.write("wug.txt", b"other\n")
        self.run_command("add", "wug.txt")
        self.run_command("commit", "other change")
        self.run_command("checkout", "master")
        self.assertEqual(
            (None, "Current branch fast-forwarded.\n"), self.run_command("merge", "other")
        )
        self.assertEqual(b"other\n", self.read("wug.txt"))

    def test_merge_ancestor(self) -> None:
        self.run_command("branch", "old")
        self.write("wug.txt", b"newer\n")
        self.run_command("add", "wug.txt")
        self.run_command("commit", "newer")
        self.assertEqual(
            (1, "Given branch is an ancestor of the current branch.\n"),
            self.run_command("merge", "old"),
        )

    def test_reset(self) -> None:
        first = self.head()
        self.write("wug.txt", b"second\n")
        self.run_command("add", "wug.txt")
        self.run_command("commit", "second")
        self.assertEqual((None, ""), self.run_command("reset", first.decode()))
        self.assertEqual(first, self.head())
        self.assertEqual(b"wug\n", self.read("wug.txt"))

    def test_untracked_obstruction(self) -> None:
        self.run_command("branch", "other")
        self.run_command("checkout", "other")
        self.write("new.txt", b"tracked on other\n")
        self.run_command("add", "new.txt")
        self.run_command("commit", "add new")
        self.run_command("checkout", "master")
        self.write("new.txt", b"untracked\n")
        self.assertEqual(
            (
                1,
                "There is an untracked file in the way; delete it, "
                "or add and commit it first.\n",
            ),
            self.run_command("checkout", "other"),
        )
        self.assertEqual(b"untracked\n", self.read("new.txt"))

    def test_locked(self) -> None:
        with Repo(self.test_dir) as r, r.lock():
            with self.assertLogs("gitlet.cli", level="ERROR"):
                ret, out = self.run_command("branch", "x")
        self.assertEqual((1, ""), (ret, out))
