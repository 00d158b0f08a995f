# objects.py -- Access to base gitlet objects
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

"""Access to base gitlet objects.

There are two kinds of objects: blobs, holding the contents of one file at
one point in time, and commits, holding a snapshot (path -> blob id), up to
two parent commit ids, a timestamp and a message. Both are immutable once
constructed; their identity is the SHA-1 of their canonical serialization.
"""

__all__ = [
    "ZERO_SHA",
    "Blob",
    "Commit",
    "ObjectID",
    "ShaFile",
    "check_path",
    "format_timezone",
    "object_class",
    "parse_timezone",
    "valid_hexsha",
]

import binascii
import zlib
from collections.abc import Iterable, Iterator, Mapping
from hashlib import sha1
from types import MappingProxyType

from .errors import ObjectFormatException

ObjectID = bytes

ZERO_SHA = b"0" * 40

# Header fields for commits
_PARENT_HEADER = b"parent"
_TIME_HEADER = b"time"
_FILE_HEADER = b"file"

MAX_PARENTS = 2


def valid_hexsha(hex: bytes | str) -> bool:
    """Check if a string is a valid hex SHA.

    Args:
      hex: Hex string to check

    Returns:
      True if valid hex SHA, False otherwise
    """
    if len(hex) != 40:
        return False
    try:
        binascii.unhexlify(hex)
    except (TypeError, binascii.Error):
        return False
    else:
        return True


def check_path(path: bytes) -> None:
    """Reject paths that cannot be stored in a snapshot.

    Raises:
      ValueError: if the path is empty, absolute or contains a newline, NUL
        or a ``..`` component
    """
    if not path:
        raise ValueError("empty path")
    if b"\n" in path or b"\0" in path:
        raise ValueError(f"invalid character in path {path!r}")
    if path.startswith(b"/"):
        raise ValueError(f"path {path!r} should be relative, not absolute")
    if b".." in path.split(b"/"):
        raise ValueError(f"path {path!r} escapes the working tree")


def parse_timezone(text: bytes) -> int:
    """Parse a timezone text fragment (e.g. '+0100').

    Args:
      text: Text to parse.
    Returns: Offset from UTC in seconds.
    """
    if text[0] not in b"+-":
        raise ValueError(f"Timezone must start with + or - ({text!r})")
    sign = text[:1]
    offset = int(text[1:])
    if sign == b"-":
        offset = -offset
    signum = (offset < 0) and -1 or 1
    offset = abs(offset)
    hours = int(offset / 100)
    minutes = offset % 100
    return signum * (hours * 3600 + minutes * 60)


def format_timezone(offset: int) -> bytes:
    """Format a timezone for output.

    Args:
      offset: Timezone offset from UTC in seconds
    Returns: Timezone text, e.g. b'-0800'
    """
    if offset % 60 != 0:
        raise ValueError("Unable to handle non-minute offset.")
    if offset < 0:
        sign = "-"
        offset = -offset
    else:
        sign = "+"
    return f"{sign}{offset // 3600:02d}{(offset // 60) % 60:02d}".encode("ascii")


class ShaFile:
    """A content-addressed, immutable object."""

    type_name: bytes

    _sha: ObjectID | None = None
    _raw: bytes | None = None

    def _serialize(self) -> bytes:
        raise NotImplementedError(self._serialize)

    def as_raw_string(self) -> bytes:
        """Return the canonical serialization of this object."""
        if self._raw is None:
            self._raw = self._serialize()
        return self._raw

    def _header(self) -> bytes:
        return self.type_name + b" " + str(len(self.as_raw_string())).encode("ascii") + b"\0"

    @property
    def id(self) -> ObjectID:
        """The hex SHA of this object."""
        if self._sha is None:
            obj = sha1(self._header())
            obj.update(self.as_raw_string())
            self._sha = obj.hexdigest().encode("ascii")
        return self._sha

    def as_legacy_object(self, compression_level: int = -1) -> bytes:
        """Return the zlib-compressed on-disk form, header included."""
        return zlib.compress(self._header() + self.as_raw_string(), compression_level)

    @classmethod
    def from_legacy_object(cls, data: bytes, sha: ObjectID | None = None) -> "ShaFile":
        """Parse the on-disk form produced by as_legacy_object.

        Args:
          data: Compressed object bytes
          sha: Expected hex SHA, verified if given
        Raises:
          ObjectFormatException: if the data cannot be parsed or does not
            hash to ``sha``
        """
        try:
            text = zlib.decompress(data)
        except zlib.error as e:
            raise ObjectFormatException(f"corrupt object: {e}") from e
        header, sep, raw = text.partition(b"\0")
        if not sep:
            raise ObjectFormatException("object header not terminated")
        try:
            type_name, size = header.split(b" ", 1)
            length = int(size)
        except ValueError as e:
            raise ObjectFormatException(f"invalid object header {header!r}") from e
        if length != len(raw):
            raise ObjectFormatException(
                f"object length mismatch: header says {length}, got {len(raw)}"
            )
        obj = cls.from_raw_string(type_name, raw)
        if sha is not None and obj.id != sha:
            raise ObjectFormatException(
                f"checksum mismatch: expected {sha!r}, got {obj.id!r}"
            )
        return obj

    @staticmethod
    def from_raw_string(type_name: bytes, raw: bytes) -> "ShaFile":
        """Create a ShaFile from its type name and canonical serialization."""
        try:
            obj_class = object_class(type_name)
        except KeyError as e:
            raise ObjectFormatException(f"unknown object type {type_name!r}") from e
        return obj_class._deserialize(raw)

    @classmethod
    def _deserialize(cls, raw: bytes) -> "ShaFile":
        raise NotImplementedError(cls._deserialize)

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        """Return True if the SHAs of the two objects match."""
        return isinstance(other, ShaFile) and self.id == other.id

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id.decode('ascii')}>"


class Blob(ShaFile):
    """The contents of one file at one point in time."""

    type_name = b"blob"

    def __init__(self, data: bytes = b"") -> None:
        if not isinstance(data, bytes):
            raise TypeError(f"blob data must be bytes, not {type(data).__name__}")
        self._data = data

    @classmethod
    def from_string(cls, string: bytes) -> "Blob":
        """Create a blob from a string."""
        return cls(string)

    @property
    def data(self) -> bytes:
        """The contents of the blob."""
        return self._data

    def _serialize(self) -> bytes:
        return self._data

    @classmethod
    def _deserialize(cls, raw: bytes) -> "Blob":
        return cls(raw)


class Commit(ShaFile):
    """A snapshot of the tracked files plus its place in history."""

    type_name = b"commit"

    def __init__(
        self,
        message: bytes,
        snapshot: Mapping[bytes, ObjectID] | None = None,
        parents: Iterable[ObjectID] = (),
        commit_time: int = 0,
        commit_timezone: int = 0,
    ) -> None:
        """Create a commit.

        Args:
          message: Commit message
          snapshot: Mapping from path to blob id
          parents: Zero, one or two parent commit ids; the second is the
            merged-in parent
          commit_time: Seconds since the epoch
          commit_timezone: Offset from UTC in seconds
        """
        parents = tuple(parents)
        if len(parents) > MAX_PARENTS:
            raise ValueError(f"a commit has at most {MAX_PARENTS} parents")
        for parent in parents:
            if not valid_hexsha(parent):
                raise ValueError(f"invalid parent id {parent!r}")
        entries = dict(snapshot or {})
        for path, sha in entries.items():
            check_path(path)
            if not valid_hexsha(sha):
                raise ValueError(f"invalid blob id {sha!r} for {path!r}")
        self._message = message
        self._snapshot = MappingProxyType(entries)
        self._parents = parents
        self._commit_time = int(commit_time)
        self._commit_timezone = int(commit_timezone)

    @property
    def message(self) -> bytes:
        """The commit message."""
        return self._message

    @property
    def snapshot(self) -> Mapping[bytes, ObjectID]:
        """Read-only mapping from path to blob id."""
        return self._snapshot

    @property
    def parents(self) -> tuple[ObjectID, ...]:
        """Parent commit ids, first parent first."""
        return self._parents

    @property
    def commit_time(self) -> int:
        return self._commit_time

    @property
    def commit_timezone(self) -> int:
        return self._commit_timezone

    @property
    def first_parent(self) -> ObjectID | None:
        return self._parents[0] if self._parents else None

    @property
    def merge_parent(self) -> ObjectID | None:
        """The merged-in parent, or None for a non-merge commit."""
        return self._parents[1] if len(self._parents) > 1 else None

    def is_merge(self) -> bool:
        return len(self._parents) > 1

    def get_blob_id(self, path: bytes) -> ObjectID | None:
        """Return the blob id tracked for path, or None if untracked."""
        return self._snapshot.get(path)

    def iter_paths(self) -> Iterator[bytes]:
        """Iterate over tracked paths in sorted order."""
        return iter(sorted(self._snapshot))

    def _serialize(self) -> bytes:
        chunks = []
        for parent in self._parents:
            chunks.append(_PARENT_HEADER + b" " + parent + b"\n")
        chunks.append(
            _TIME_HEADER
            + b" "
            + str(self._commit_time).encode("ascii")
            + b" "
            + format_timezone(self._commit_timezone)
            + b"\n"
        )
        for path in sorted(self._snapshot):
            chunks.append(_FILE_HEADER + b" " + self._snapshot[path] + b" " + path + b"\n")
        chunks.append(b"\n")
        chunks.append(self._message)
        return b"".join(chunks)

    @classmethod
    def _deserialize(cls, raw: bytes) -> "Commit":
        parents = []
        snapshot = {}
        commit_time = None
        commit_timezone = 0
        pos = 0
        while True:
            eol = raw.find(b"\n", pos)
            if eol == -1:
                raise ObjectFormatException("commit header not terminated")
            line = raw[pos:eol]
            pos = eol + 1
            if line == b"":
                break
            field, _, value = line.partition(b" ")
            if field == _PARENT_HEADER:
                parents.append(value)
            elif field == _TIME_HEADER:
                try:
                    secs, tz = value.split(b" ", 1)
                    commit_time = int(secs)
                    commit_timezone = parse_timezone(tz)
                except ValueError as e:
                    raise ObjectFormatException(f"invalid time line {line!r}") from e
            elif field == _FILE_HEADER:
                sha, _, path = value.partition(b" ")
                if path in snapshot:
                    raise ObjectFormatException(f"duplicate path {path!r}")
                snapshot[path] = sha
            else:
                raise ObjectFormatException(f"unknown commit field {field!r}")
        if commit_time is None:
            raise ObjectFormatException("commit has no time")
        try:
            return cls(
                raw[pos:],
                snapshot,
                parents,
                commit_time=commit_time,
                commit_timezone=commit_timezone,
            )
        except ValueError as e:
            raise ObjectFormatException(str(e)) from e


OBJECT_CLASSES = (Blob, Commit)

_TYPE_MAP: dict[bytes, type[ShaFile]] = {cls.type_name: cls for cls in OBJECT_CLASSES}


def object_class(type_name: bytes) -> type[ShaFile]:
    """Get the object class corresponding to the given type name.

    Args:
      type_name: Either b"blob" or b"commit".
    Returns: The ShaFile subclass corresponding to the given type.
    Raises:
      KeyError: for unknown type names
    """
    return _TYPE_MAP[type_name]
