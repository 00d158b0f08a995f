# object_store.py -- Object store for gitlet objects
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

"""Object store interfaces and implementations.

Objects are write-once and keyed by their own SHA, so there is deliberately
no update or delete operation. Concurrent writers of the same object produce
byte-identical files.
"""

__all__ = [
    "BaseObjectStore",
    "DiskObjectStore",
    "MemoryObjectStore",
    "hex_to_filename",
]

import logging
import os
from collections.abc import Iterator

from .errors import (
    AmbiguousCommitId,
    CommitNotFound,
    ObjectFormatException,
    ObjectMissing,
)
from .file import GitFile, ensure_dir_exists
from .objects import Blob, Commit, ObjectID, ShaFile, valid_hexsha

logger = logging.getLogger(__name__)

MIN_ABBREV_LENGTH = 4
PACK_MODE = 0o444


def hex_to_filename(path: str, hex: ObjectID) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    hex_str = hex.decode("ascii")
    return os.path.join(path, hex_str[:2], hex_str[2:])


class BaseObjectStore:
    """Object store interface."""

    def __contains__(self, sha: ObjectID) -> bool:
        """Check if a particular object is present by SHA."""
        raise NotImplementedError(self.__contains__)

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        """Obtain an object by SHA.

        Raises:
          ObjectMissing: if no such object exists
        """
        raise NotImplementedError(self.__getitem__)

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs that are present in this store."""
        raise NotImplementedError(self.__iter__)

    def add_object(self, obj: ShaFile) -> None:
        """Add a single object to this object store.

        Adding an object that is already present is a no-op.
        """
        raise NotImplementedError(self.add_object)

    def close(self) -> None:
        """Close any files opened by this object store."""

    def put_blob(self, data: bytes) -> ObjectID:
        """Store file contents, returning the blob id.

        Calling this twice with identical contents returns the same id and
        stores a single copy.
        """
        blob = Blob.from_string(data)
        self.add_object(blob)
        return blob.id

    def get_blob(self, sha: ObjectID) -> bytes:
        """Return the contents of a blob.

        Raises:
          ObjectMissing: if there is no such blob
        """
        obj = self[sha]
        if not isinstance(obj, Blob):
            raise ObjectMissing(sha)
        return obj.data

    def put_commit(self, commit: Commit) -> ObjectID:
        """Store a commit, returning its id."""
        self.add_object(commit)
        return commit.id

    def get_commit(self, sha: ObjectID) -> Commit:
        """Return the commit with the given id.

        Raises:
          ObjectMissing: if there is no such commit
        """
        obj = self[sha]
        if not isinstance(obj, Commit):
            raise ObjectMissing(sha)
        return obj

    def iter_commits(self) -> Iterator[Commit]:
        """Iterate over every commit in the store, in id order."""
        for sha in sorted(self):
            obj = self[sha]
            if isinstance(obj, Commit):
                yield obj

    def expand_commit_id(self, prefix: ObjectID) -> ObjectID:
        """Resolve a full or abbreviated commit id.

        Args:
          prefix: Hex prefix of at least MIN_ABBREV_LENGTH characters, or a
            full id
        Returns: The full commit id
        Raises:
          CommitNotFound: if no commit matches
          AmbiguousCommitId: if more than one commit matches
        """
        prefix = prefix.lower()
        if valid_hexsha(prefix):
            if prefix in self and isinstance(self[prefix], Commit):
                return prefix
            raise CommitNotFound(prefix)
        if len(prefix) < MIN_ABBREV_LENGTH or not _is_hex(prefix):
            raise CommitNotFound(prefix)
        matches = [
            sha
            for sha in sorted(self)
            if sha.startswith(prefix) and isinstance(self[sha], Commit)
        ]
        if not matches:
            raise CommitNotFound(prefix)
        if len(matches) > 1:
            raise AmbiguousCommitId(prefix, matches)
        return matches[0]


def _is_hex(text: bytes) -> bool:
    try:
        int(text, 16)
    except ValueError:
        return False
    return True


class MemoryObjectStore(BaseObjectStore):
    """Object store that keeps all objects in memory."""

    def __init__(self) -> None:
        """Initialize an empty MemoryObjectStore."""
        self._data: dict[ObjectID, ShaFile] = {}

    def __contains__(self, sha: ObjectID) -> bool:
        return sha in self._data

    def __iter__(self) -> Iterator[ObjectID]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        try:
            return self._data[sha]
        except KeyError:
            raise ObjectMissing(sha) from None

    def add_object(self, obj: ShaFile) -> None:
        """Add a single object to this object store."""
        self._data.setdefault(obj.id, obj)


class DiskObjectStore(BaseObjectStore):
    """Object store that keeps one zlib-compressed file per object."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        loose_compression_level: int = -1,
        fsync_object_files: bool = False,
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the object store.
          loose_compression_level: zlib compression level for new objects
          fsync_object_files: Whether to fsync object files when writing
        """
        self.path = os.fspath(path)
        self.loose_compression_level = loose_compression_level
        self.fsync_object_files = fsync_object_files

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @classmethod
    def from_config(cls, path: str | os.PathLike[str], config) -> "DiskObjectStore":
        """Create a DiskObjectStore honouring core.* settings from config."""
        try:
            level = int(config.get((b"core",), b"compression"))
        except KeyError:
            level = -1
        except ValueError as e:
            raise ObjectFormatException(f"invalid core.compression: {e}") from e
        if level < -1 or level > 9:
            raise ObjectFormatException(f"invalid core.compression: {level}")
        fsync = config.get_boolean((b"core",), b"fsyncobjectfiles", False)
        return cls(path, loose_compression_level=level, fsync_object_files=fsync)

    def _get_shafile_path(self, sha: ObjectID) -> str:
        return hex_to_filename(self.path, sha)

    def __contains__(self, sha: ObjectID) -> bool:
        if not valid_hexsha(sha):
            return False
        return os.path.exists(self._get_shafile_path(sha))

    def __iter__(self) -> Iterator[ObjectID]:
        try:
            bases = sorted(os.listdir(self.path))
        except FileNotFoundError:
            return
        for base in bases:
            if len(base) != 2:
                continue
            for rest in sorted(os.listdir(os.path.join(self.path, base))):
                sha = os.fsencode(base + rest)
                if not valid_hexsha(sha):
                    continue
                yield sha

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        if not valid_hexsha(sha):
            raise ObjectMissing(sha)
        path = self._get_shafile_path(sha)
        try:
            with GitFile(path, "rb") as f:
                data = f.read()
        except FileNotFoundError:
            raise ObjectMissing(sha) from None
        return ShaFile.from_legacy_object(data, sha=sha)

    def add_object(self, obj: ShaFile) -> None:
        """Add a single object to this object store.

        Args:
          obj: Object to add
        """
        path = self._get_shafile_path(obj.id)
        ensure_dir_exists(os.path.dirname(path))
        if os.path.exists(path):
            return  # Already there, no need to write again
        with GitFile(path, "wb", mask=PACK_MODE, fsync=self.fsync_object_files) as f:
            f.write(obj.as_legacy_object(compression_level=self.loose_compression_level))
        logger.debug(
            "wrote %s %s", obj.type_name.decode("ascii"), obj.id.decode("ascii")
        )
