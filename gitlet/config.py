# config.py - Reading and writing gitlet config files
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


"""Reading and writing gitlet configuration files.

The syntax is that of git-config: ``[section]`` and ``[section "sub"]``
headers, ``name = value`` settings, ``#`` and ``;`` comments. Section and
variable names are case-insensitive; subsection names are not.
"""

__all__ = [
    "ConfigFile",
]

import os
import re
from typing import IO

from .file import GitFile, _GitFile

Section = tuple[bytes, ...]
SectionLike = bytes | str | tuple[bytes | str, ...]

TRUE_VALUES = frozenset([b"true", b"yes", b"on", b"1"])
FALSE_VALUES = frozenset([b"false", b"no", b"off", b"0", b""])

_UNESCAPE = {
    ord("\\"): b"\\",
    ord('"'): b'"',
    ord("n"): b"\n",
    ord("t"): b"\t",
    ord("b"): b"\b",
}
_HEADER_RE = re.compile(rb'\[([^\]"\s]*)(?:\s+"([^"]*)")?\]')
_SECTION_NAME_RE = re.compile(rb"[A-Za-z0-9.-]+\Z")
_VARIABLE_NAME_RE = re.compile(rb"[A-Za-z0-9-]+\Z")


def _to_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def _section_key(section: SectionLike) -> Section:
    if not isinstance(section, tuple):
        section = (section,)
    name, *subsection = (_to_bytes(part) for part in section)
    return (name.lower(), *subsection)


def _strip_comment(line: bytes) -> bytes:
    quoted = False
    for i, c in enumerate(line):
        if c == ord('"'):
            quoted = not quoted
        elif not quoted and c in b"#;":
            return line[:i]
    return line


def _parse_value(raw: bytes) -> bytes:
    """Unquote and unescape a setting value, dropping any trailing comment.

    Whitespace inside quotes is kept; runs of whitespace outside quotes are
    kept only between other characters.

    Raises:
      ValueError: on an unknown escape or an unterminated quote
    """
    ret = bytearray()
    space = bytearray()
    quoted = False
    chars = iter(raw.strip())
    for c in chars:
        if c == ord("\\"):
            escaped = next(chars, None)
            if escaped is None:
                raise ValueError("escape character at end of value")
            if escaped not in _UNESCAPE:
                raise ValueError(f"unknown escape \\{chr(escaped)} in {raw!r}")
            ret += space + _UNESCAPE[escaped]
            space.clear()
        elif c == ord('"'):
            quoted = not quoted
        elif not quoted and c in b"#;":
            break
        elif not quoted and c in b" \t":
            space.append(c)
        else:
            ret += space
            space.clear()
            ret.append(c)
    if quoted:
        raise ValueError("missing end quote")
    return bytes(ret)


def _quote_value(value: bytes) -> bytes:
    escaped = (
        value.replace(b"\\", b"\\\\")
        .replace(b"\n", b"\\n")
        .replace(b"\t", b"\\t")
        .replace(b'"', b'\\"')
    )
    if value != value.strip() or b"#" in value or b";" in value:
        return b'"' + escaped + b'"'
    return escaped


def _parse_section_header(line: bytes) -> tuple[Section, bytes]:
    """Parse a section header.

    ``[branch.foo]`` is shorthand for ``[branch "foo"]``.

    Returns: Tuple of (section, rest of the line after the header)
    """
    m = _HEADER_RE.match(line)
    if m is None:
        raise ValueError(f"invalid section header {line!r}")
    name, subsection = m.group(1), m.group(2)
    if subsection is None and b"." in name:
        name, subsection = name.split(b".", 1)
    if not _SECTION_NAME_RE.match(name):
        raise ValueError(f"invalid section name {name!r}")
    if subsection is None:
        return (name.lower(),), line[m.end() :]
    return (name.lower(), subsection), line[m.end() :]


class ConfigFile:
    """A gitlet configuration file, like .gitlet/config.

    Attributes:
      path: File the configuration was read from, if any
    """

    def __init__(self) -> None:
        self._values: dict[Section, dict[bytes, bytes]] = {}
        self.path: str | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._values!r})"

    def get(self, section: SectionLike, name: bytes | str) -> bytes:
        """Retrieve the contents of a configuration setting.

        A setting missing from a subsection is looked up in its section.

        Args:
          section: Section name, or tuple of section and subsection name
          name: Variable name
        Raises:
          KeyError: if the value is not set
        """
        key = _section_key(section)
        name = _to_bytes(name).lower()
        if len(key) > 1 and name in self._values.get(key, {}):
            return self._values[key][name]
        return self._values[key[:1]][name]

    def get_boolean(
        self, section: SectionLike, name: bytes | str, default: bool | None = None
    ) -> bool | None:
        """Retrieve a configuration setting as boolean.

        Returns: The setting, or default if it is not set
        Raises:
          ValueError: if the value is not a boolean
        """
        try:
            value = self.get(section, name).lower()
        except KeyError:
            return default
        if value in TRUE_VALUES:
            return True
        if value in FALSE_VALUES:
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def set(
        self, section: SectionLike, name: bytes | str, value: bytes | str | bool
    ) -> None:
        if isinstance(value, bool):
            value = b"true" if value else b"false"
        settings = self._values.setdefault(_section_key(section), {})
        settings[_to_bytes(name).lower()] = _to_bytes(value)

    @classmethod
    def from_file(cls, f: IO[bytes]) -> "ConfigFile":
        """Read configuration from a file-like object.

        Raises:
          ValueError: if the file is not valid config syntax
        """
        ret = cls()
        section: Section | None = None
        for lineno, line in enumerate(f.readlines(), 1):
            if lineno == 1:
                line = line.removeprefix(b"\xef\xbb\xbf")
            line = line.strip()
            if line.startswith(b"["):
                section, line = _parse_section_header(line)
                ret._values.setdefault(section, {})
            if not _strip_comment(line).strip():
                continue
            if section is None:
                raise ValueError(f"line {lineno}: setting outside of a section")
            name, sep, value = line.partition(b"=")
            if not sep:
                # A bare variable name means true.
                name, value = _strip_comment(name), b"true"
            name = name.strip()
            if not _VARIABLE_NAME_RE.match(name):
                raise ValueError(f"line {lineno}: invalid variable name {name!r}")
            ret._values[section][name.lower()] = _parse_value(value)
        return ret

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "ConfigFile":
        """Read configuration from a file on disk."""
        path = os.fspath(path)
        with GitFile(path, "rb") as f:
            ret = cls.from_file(f)
        ret.path = path
        return ret

    def write_to_path(self, path: str | os.PathLike[str] | None = None) -> None:
        """Write configuration to a file on disk, self.path by default."""
        if path is None:
            if self.path is None:
                raise ValueError("No path specified and no default path available")
            path = self.path
        with GitFile(path, "wb") as f:
            self.write_to_file(f)

    def write_to_file(self, f: IO[bytes] | _GitFile) -> None:
        """Write configuration to a file-like object."""
        for section, settings in self._values.items():
            if len(section) == 1:
                f.write(b"[" + section[0] + b"]\n")
            else:
                f.write(b"[" + section[0] + b' "' + section[1] + b'"]\n')
            for name, value in settings.items():
                f.write(b"\t" + name + b" = " + _quote_value(value) + b"\n")
