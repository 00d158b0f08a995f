# worktree.py -- Working tree access
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

"""Access to the files of a working tree.

Paths are ``/``-separated bytes relative to the top of the tree. The control
directory is never listed or touched.
"""

__all__ = [
    "CONTROLDIR",
    "DiskWorkTree",
    "MemoryWorkTree",
    "WorkTree",
]

import logging
import os
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from .errors import FileNotInWorkingTree
from .objects import ObjectID, check_path

if TYPE_CHECKING:
    from .object_store import BaseObjectStore

logger = logging.getLogger(__name__)

CONTROLDIR = ".gitlet"


class WorkTree:
    """Files of a working tree."""

    def read_file(self, path: bytes) -> bytes:
        """Return the contents of a file.

        Raises:
          FileNotInWorkingTree: if there is no such file
        """
        raise NotImplementedError(self.read_file)

    def write_file(self, path: bytes, contents: bytes) -> None:
        """Create or overwrite a file."""
        raise NotImplementedError(self.write_file)

    def remove_file(self, path: bytes) -> None:
        """Delete a file; a missing file is not an error."""
        raise NotImplementedError(self.remove_file)

    def exists(self, path: bytes) -> bool:
        raise NotImplementedError(self.exists)

    def is_dir(self, path: bytes) -> bool:
        """Whether path names a directory rather than a file."""
        raise NotImplementedError(self.is_dir)

    def list_files(self) -> list[bytes]:
        """Return the paths of all files, sorted."""
        raise NotImplementedError(self.list_files)

    def find_obstructions(
        self,
        target: Iterable[bytes],
        tracked: Mapping[bytes, ObjectID],
        removals: Iterable[bytes] | None = None,
    ) -> list[bytes]:
        """Find untracked files that writing target would overwrite or clash with.

        A path is in the way when it is an untracked file about to be
        overwritten, a file inside a directory that has to become a file, or
        a file standing where one of target's directories has to be created.
        Files that will be deleted before target is written never obstruct.

        Args:
          target: Paths about to be written
          tracked: Snapshot of the commit currently checked out
          removals: Paths deleted before the writes; defaults to every
            tracked path not in target
        Returns: Sorted list of obstructing paths
        """
        wanted = set(target)
        if removals is None:
            removed = {path for path in tracked if path not in wanted}
        else:
            removed = set(removals)
        obstructions: set[bytes] = set()
        files: list[bytes] | None = None
        for path in wanted:
            if path not in tracked and self.exists(path):
                obstructions.add(path)
            elif self.is_dir(path):
                if files is None:
                    files = self.list_files()
                prefix = path + b"/"
                inside = [f for f in files if f.startswith(prefix)]
                blocking = [f for f in inside if f not in removed]
                if blocking:
                    obstructions.update(blocking)
                elif not inside:
                    # An empty directory.
                    obstructions.add(path)
            parent = path
            while b"/" in parent:
                parent = parent.rsplit(b"/", 1)[0]
                if parent not in removed and self.exists(parent):
                    obstructions.add(parent)
        return sorted(obstructions)

    def materialize(
        self,
        object_store: "BaseObjectStore",
        target: Mapping[bytes, ObjectID],
        tracked: Mapping[bytes, ObjectID],
    ) -> None:
        """Make the tree match target.

        Every path in tracked but not in target is deleted, then every path in
        target is written. Untracked files are left alone.

        Args:
          object_store: Store holding the target blobs
          target: Snapshot to check out
          tracked: Snapshot of the commit currently checked out
        """
        # Load every blob first, so a missing object fails before any write.
        contents = {path: object_store.get_blob(sha) for path, sha in target.items()}
        for path in sorted(tracked):
            if path not in target:
                self.remove_file(path)
        for path in sorted(contents):
            self.write_file(path, contents[path])
        logger.debug("materialized %d files", len(contents))


class MemoryWorkTree(WorkTree):
    """Working tree that keeps its files in a dict."""

    def __init__(self, files: Mapping[bytes, bytes] | None = None) -> None:
        self._files: dict[bytes, bytes] = dict(files or {})

    def read_file(self, path: bytes) -> bytes:
        try:
            return self._files[path]
        except KeyError:
            raise FileNotInWorkingTree(path) from None

    def write_file(self, path: bytes, contents: bytes) -> None:
        check_path(path)
        self._files[path] = contents

    def remove_file(self, path: bytes) -> None:
        self._files.pop(path, None)

    def exists(self, path: bytes) -> bool:
        return path in self._files

    def is_dir(self, path: bytes) -> bool:
        prefix = path + b"/"
        return any(name.startswith(prefix) for name in self._files)

    def list_files(self) -> list[bytes]:
        return sorted(self._files)


class DiskWorkTree(WorkTree):
    """Working tree rooted at a directory on disk."""

    def __init__(self, path: str | os.PathLike[str], controldir: str = CONTROLDIR) -> None:
        self.path = os.fspath(path)
        self._controldir = controldir

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def _fs_path(self, path: bytes) -> str:
        check_path(path)
        parts = os.fsdecode(path).split("/")
        if parts[0] == self._controldir:
            raise ValueError(f"path {path!r} is inside the control directory")
        return os.path.join(self.path, *parts)

    def read_file(self, path: bytes) -> bytes:
        try:
            with open(self._fs_path(path), "rb") as f:
                return f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            raise FileNotInWorkingTree(path) from None

    def write_file(self, path: bytes, contents: bytes) -> None:
        full_path = self._fs_path(path)
        dirname = os.path.dirname(full_path)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        with open(full_path, "wb") as f:
            f.write(contents)

    def remove_file(self, path: bytes) -> None:
        full_path = self._fs_path(path)
        try:
            os.unlink(full_path)
        except FileNotFoundError:
            return
        self._prune_empty_dirs(os.path.dirname(full_path))

    def _prune_empty_dirs(self, dirname: str) -> None:
        top = os.path.abspath(self.path)
        dirname = os.path.abspath(dirname)
        while dirname != top and dirname.startswith(top):
            try:
                os.rmdir(dirname)
            except OSError:
                break
            dirname = os.path.dirname(dirname)

    def exists(self, path: bytes) -> bool:
        return os.path.isfile(self._fs_path(path))

    def is_dir(self, path: bytes) -> bool:
        return os.path.isdir(self._fs_path(path))

    def list_files(self) -> list[bytes]:
        ret = []
        for root, dirs, files in os.walk(self.path):
            if root == self.path and self._controldir in dirs:
                dirs.remove(self._controldir)
            relroot = os.path.relpath(root, self.path)
            for name in files:
                if relroot == os.curdir:
                    relpath = name
                else:
                    relpath = os.path.join(relroot, name)
                ret.append(os.fsencode(relpath.replace(os.path.sep, "/")))
        return sorted(ret)

