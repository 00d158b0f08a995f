# index.py -- File parser/writer for the gitlet staging index
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

"""Parser for the staging index file format.

The index holds the changes that the next commit will record: an addition
map (path -> blob id) and a removal set. A path is never in both at once.

On disk it is a small line-oriented file::

    GITLETIDX 1
    add <blob hex> <path>
    rm <path>

A missing file is the same as an empty (clean) index.
"""

__all__ = [
    "INDEX_HEADER",
    "Index",
    "read_index",
    "stage_add",
    "stage_remove",
    "write_index",
]

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, BinaryIO

from .errors import CorruptRepository, NothingToRemove
from .file import GitFile
from .objects import ObjectID, check_path, valid_hexsha

if TYPE_CHECKING:
    from .object_store import BaseObjectStore
    from .worktree import WorkTree

logger = logging.getLogger(__name__)

INDEX_HEADER = b"GITLETIDX"
INDEX_VERSION = 1

_ADD = b"add"
_RM = b"rm"


def read_index(f: BinaryIO) -> tuple[dict[bytes, ObjectID], set[bytes]]:
    """Read a staging index file.

    Args:
      f: File-like object to read from
    Returns: Tuple of (additions, removals)
    Raises:
      CorruptRepository: if the file is not a valid index
    """
    header = f.readline().rstrip(b"\n")
    try:
        magic, version = header.split(b" ", 1)
        version_no = int(version)
    except ValueError:
        raise CorruptRepository(f"invalid index header {header!r}") from None
    if magic != INDEX_HEADER:
        raise CorruptRepository(f"invalid index header {header!r}")
    if version_no != INDEX_VERSION:
        raise CorruptRepository(f"unsupported index version {version_no}")
    additions: dict[bytes, ObjectID] = {}
    removals: set[bytes] = set()
    for line in f:
        line = line.rstrip(b"\n")
        kind, _, rest = line.partition(b" ")
        if kind == _ADD:
            sha, _, path = rest.partition(b" ")
            if not valid_hexsha(sha) or not path:
                raise CorruptRepository(f"invalid index entry {line!r}")
            additions[path] = sha
        elif kind == _RM:
            if not rest:
                raise CorruptRepository(f"invalid index entry {line!r}")
            removals.add(rest)
        else:
            raise CorruptRepository(f"invalid index entry {line!r}")
    return additions, removals


def write_index(
    f: BinaryIO, additions: Mapping[bytes, ObjectID], removals: Iterable[bytes]
) -> None:
    """Write a staging index file.

    Args:
      f: File-like object to write to
      additions: Path to blob id map of staged additions
      removals: Paths staged for removal
    """
    f.write(INDEX_HEADER + b" " + str(INDEX_VERSION).encode("ascii") + b"\n")
    for path in sorted(additions):
        f.write(_ADD + b" " + additions[path] + b" " + path + b"\n")
    for path in sorted(removals):
        f.write(_RM + b" " + path + b"\n")


class Index:
    """The staging index of one working tree."""

    def __init__(
        self, filename: bytes | str | os.PathLike[str] | None = None, read: bool = True
    ) -> None:
        """Create an index object associated with the given filename.

        Args:
          filename: Path to the index file, or None for an index that only
            lives in memory
          read: Whether to initialize the index from the given file, should it
            exist.
        """
        self._filename = None if filename is None else os.fspath(filename)
        self.clear()
        if read and self._filename is not None:
            self.read()

    @property
    def path(self) -> bytes | str | None:
        return self._filename

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._filename!r})"

    def write(self) -> None:
        """Write current contents of index to disk."""
        if self._filename is None:
            return
        with GitFile(self._filename, "wb") as f:
            write_index(f, self._additions, self._removals)

    def read(self) -> None:
        """Read current contents of index from disk."""
        if self._filename is None or not os.path.exists(self._filename):
            self.clear()
            return
        with GitFile(self._filename, "rb") as f:
            additions, removals = read_index(f)
        both = additions.keys() & removals
        if both:
            raise CorruptRepository(
                f"paths both staged and removed: {sorted(both)!r}"
            )
        self._additions = additions
        self._removals = removals

    def __len__(self) -> int:
        """Number of staged changes."""
        return len(self._additions) + len(self._removals)

    def __contains__(self, path: object) -> bool:
        return path in self._additions or path in self._removals

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over every staged path, sorted."""
        return iter(sorted(self._additions.keys() | self._removals))

    @property
    def additions(self) -> Mapping[bytes, ObjectID]:
        """Read-only view of staged additions."""
        return MappingProxyType(self._additions)

    @property
    def removals(self) -> frozenset[bytes]:
        return frozenset(self._removals)

    def is_clean(self) -> bool:
        return not self._additions and not self._removals

    def clear(self) -> None:
        """Remove all contents from this index."""
        self._additions: dict[bytes, ObjectID] = {}
        self._removals: set[bytes] = set()

    def stage_addition(self, path: bytes, sha: ObjectID) -> None:
        """Record that the next commit stores sha at path."""
        check_path(path)
        self._removals.discard(path)
        self._additions[path] = sha

    def stage_removal(self, path: bytes) -> None:
        """Record that the next commit drops path."""
        check_path(path)
        self._additions.pop(path, None)
        self._removals.add(path)

    def unstage(self, path: bytes) -> None:
        """Forget any staged change for path."""
        self._additions.pop(path, None)
        self._removals.discard(path)

    def apply(self, snapshot: Mapping[bytes, ObjectID]) -> dict[bytes, ObjectID]:
        """Return the snapshot that results from committing this index.

        Args:
          snapshot: Snapshot of the commit the changes are staged against
        """
        ret = {path: sha for path, sha in snapshot.items() if path not in self._removals}
        ret.update(self._additions)
        return ret


def stage_add(
    index: Index,
    object_store: "BaseObjectStore",
    head_snapshot: Mapping[bytes, ObjectID],
    path: bytes,
    content: bytes,
) -> ObjectID | None:
    """Stage the given contents of a working-tree file.

    Any pending removal of path is cleared. When the contents are the same as
    the version tracked by the head commit, nothing is staged and any earlier
    staged addition is dropped.

    Args:
      index: Staging index to update
      object_store: Store that receives the blob
      head_snapshot: Snapshot of the active head commit
      path: Path of the file
      content: Current file contents
    Returns: The staged blob id, or None when the file matches the head
    """
    sha = object_store.put_blob(content)
    if head_snapshot.get(path) == sha:
        index.unstage(path)
        logger.debug("%r matches head, not staged", path)
        return None
    index.stage_addition(path, sha)
    logger.debug("staged %r as %s", path, sha.decode("ascii"))
    return sha


def stage_remove(
    index: Index,
    head_snapshot: Mapping[bytes, ObjectID],
    path: bytes,
    worktree: "WorkTree",
) -> None:
    """Unstage path, and stage its removal if the head commit tracks it.

    The working-tree file is deleted when the path is tracked.

    Raises:
      NothingToRemove: if path is neither staged for addition nor tracked
    """
    staged = path in index.additions
    tracked = path in head_snapshot
    if not staged and not tracked:
        raise NothingToRemove(path)
    if staged:
        index.unstage(path)
    if tracked:
        index.stage_removal(path)
        worktree.remove_file(path)
    logger.debug("removed %r (staged=%s, tracked=%s)", path, staged, tracked)
