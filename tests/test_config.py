# test_config.py -- Tests for reading and writing configuration files
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


"""Tests for reading and writing configuration files."""

import os
import shutil
import tempfile
from io import BytesIO

from gitlet.config import ConfigFile, _parse_value, _quote_value

from . import TestCase


class ConfigFileTests(TestCase):
    def from_file(self, text: bytes) -> ConfigFile:
        return ConfigFile.from_file(BytesIO(text))

    def dump(self, cf: ConfigFile) -> bytes:
        f = BytesIO()
        cf.write_to_file(f)
        return f.getvalue()

    def test_default_config(self) -> None:
        cf = self.from_file(
            b"""[core]
\trepositoryformatversion = 0
\tcompression = 9
"""
        )
        self.assertEqual(b"0", cf.get(b"core", b"repositoryformatversion"))
        self.assertEqual(b"9", cf.get(b"core", b"compression"))

    def test_from_file_empty(self) -> None:
        self.assertEqual(b"", self.dump(self.from_file(b"")))

    def test_section_only(self) -> None:
        self.assertEqual(b"[section]\n", self.dump(self.from_file(b"[section]")))

    def test_comment_before_section(self) -> None:
        cf = self.from_file(b"# foo\n[section]\n")
        self.assertEqual(b"[section]\n", self.dump(cf))

    def test_comment_after_section(self) -> None:
        cf = self.from_file(b"[section] # foo\n")
        self.assertEqual(b"[section]\n", self.dump(cf))

    def test_setting_after_section_header(self) -> None:
        cf = self.from_file(b"[core] foo = bar\n")
        self.assertEqual(b"bar", cf.get(b"core", b"foo"))

    def test_comment_after_variable(self) -> None:
        cf = self.from_file(b"[section]\nbar= foo # a comment\n")
        self.assertEqual(b"foo", cf.get((b"section",), b"bar"))

    def test_semicolon_comment(self) -> None:
        cf = self.from_file(b"[section]\nbar= foo ; a comment\n")
        self.assertEqual(b"foo", cf.get((b"section",), b"bar"))

    def test_quoted_comment_chars(self) -> None:
        cf = self.from_file(b'[section]\nbar= "foo#bar"\n')
        self.assertEqual(b"foo#bar", cf.get((b"section",), b"bar"))

    def test_from_file_section_case_insensitive(self) -> None:
        cf = self.from_file(b"[cOre]\nfOo = bar\n")
        self.assertEqual(b"bar", cf.get((b"core",), b"foo"))
        self.assertEqual(b"bar", cf.get((b"CORE",), b"FOO"))

    def test_from_file_subsection(self) -> None:
        cf = self.from_file(b'[branch "Foo"]\nremote = origin\n')
        self.assertEqual(b"origin", cf.get((b"branch", b"Foo"), b"remote"))
        self.assertRaises(KeyError, cf.get, (b"branch", b"foo"), b"remote")

    def test_from_file_dotted_subsection(self) -> None:
        cf = self.from_file(b"[branch.foo]\nremote = origin\n")
        self.assertEqual(b"origin", cf.get((b"branch", b"foo"), b"remote"))

    def test_from_file_value_with_no_equals(self) -> None:
        cf = self.from_file(b"[core]\nbare # comment\n")
        self.assertTrue(cf.get_boolean(b"core", b"bare"))

    def test_from_file_with_bom(self) -> None:
        cf = self.from_file(b"\xef\xbb\xbf[core]\nfoo = bar\n")
        self.assertEqual(b"bar", cf.get(b"core", b"foo"))

    def test_invalid_section_header(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"[core")
        self.assertRaises(ValueError, self.from_file, b"[bad section]\n")
        self.assertRaises(ValueError, self.from_file, b"[]\n")

    def test_invalid_variable_name(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"[core]\nfoo_bar = 1\n")

    def test_setting_without_section(self) -> None:
        self.assertRaises(ValueError, self.from_file, b"foo = bar\n")

    def test_write_to_file_section(self) -> None:
        c = ConfigFile()
        c.set((b"core",), b"foo", b"bar")
        self.assertEqual(b"[core]\n\tfoo = bar\n", self.dump(c))

    def test_write_to_file_subsection(self) -> None:
        c = ConfigFile()
        c.set((b"branch", b"blie"), b"foo", b"bar")
        self.assertEqual(b'[branch "blie"]\n\tfoo = bar\n', self.dump(c))

    def test_write_quotes_comment_chars(self) -> None:
        c = ConfigFile()
        c.set(b"core", b"foo", b"a#b")
        self.assertEqual(b'[core]\n\tfoo = "a#b"\n', self.dump(c))
        self.assertEqual(b"a#b", self.from_file(self.dump(c)).get(b"core", b"foo"))

    def test_write_to_path(self) -> None:
        tempdir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, tempdir)
        path = os.path.join(tempdir, "config")
        c = ConfigFile()
        c.set("init", "defaultBranch", "main")
        c.write_to_path(path)
        reread = ConfigFile.from_path(path)
        self.assertEqual(path, reread.path)
        self.assertEqual(b"main", reread.get("init", "defaultbranch"))

    def test_write_to_path_without_path(self) -> None:
        self.assertRaises(ValueError, ConfigFile().write_to_path)


class GetSetTests(TestCase):
    def test_get_set(self) -> None:
        cf = ConfigFile()
        self.assertRaises(KeyError, cf.get, b"foo", b"core")
        cf.set((b"core",), b"foo", b"bla")
        self.assertEqual(b"bla", cf.get((b"core",), b"foo"))
        cf.set((b"core",), b"foo", b"bloe")
        self.assertEqual(b"bloe", cf.get((b"core",), b"foo"))

    def test_get_str(self) -> None:
        cf = ConfigFile()
        cf.set("core", "foo", "bla")
        self.assertEqual(b"bla", cf.get("core", "foo"))

    def test_get_boolean(self) -> None:
        cf = ConfigFile()
        cf.set(b"core", b"foo", b"true")
        self.assertTrue(cf.get_boolean(b"core", b"foo"))
        cf.set(b"core", b"foo", b"off")
        self.assertFalse(cf.get_boolean(b"core", b"foo"))
        cf.set(b"core", b"foo", True)
        self.assertEqual(b"true", cf.get(b"core", b"foo"))
        cf.set(b"core", b"foo", b"invalid")
        self.assertRaises(ValueError, cf.get_boolean, b"core", b"foo")
        self.assertIsNone(cf.get_boolean(b"core", b"missing"))
        self.assertTrue(cf.get_boolean(b"core", b"missing", True))

    def test_subsection_falls_back_to_section(self) -> None:
        cf = ConfigFile()
        cf.set(b"core", b"foo", b"bar")
        self.assertEqual(b"bar", cf.get((b"core", b"sub"), b"foo"))


class ValueTests(TestCase):
    def test_parse_value(self) -> None:
        self.assertEqual(b"foo", _parse_value(b"  foo  "))
        self.assertEqual(b"a b", _parse_value(b"a b"))
        self.assertEqual(b" foo ", _parse_value(b'" foo "'))
        self.assertEqual(b"a\tb\n", _parse_value(b"a\\tb\\n"))
        self.assertRaises(ValueError, _parse_value, b'"unterminated')
        self.assertRaises(ValueError, _parse_value, b"bad\\x")
        self.assertRaises(ValueError, _parse_value, b"trailing\\")

    def test_quote_value(self) -> None:
        self.assertEqual(b'a\\\\b\\n\\"', _quote_value(b'a\\b\n"'))
        self.assertEqual(b'" padded"', _quote_value(b" padded"))
