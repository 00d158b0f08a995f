# repo.py -- For dealing with gitlet repositories.
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

"""Repository access.

A repository ties together an object store, the branch refs, the staging
index and a working tree. Every operation checks all of its preconditions
before it changes anything, so a failed operation leaves the repository as
it was.
"""

__all__ = [
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "INITIAL_MESSAGE",
    "BaseRepo",
    "MemoryRepo",
    "Repo",
    "StatusReport",
]

import contextlib
import logging
import os
import time
from collections.abc import Iterator
from types import TracebackType
from typing import NamedTuple

from .config import ConfigFile
from .errors import (
    BranchExists,
    BranchNotFound,
    CommitNotFound,
    CorruptRepository,
    InvalidOperand,
    MessageNotFound,
    NoOpCheckout,
    NotGitletRepository,
    NothingToCommit,
    ObjectMissing,
    PathNotInCommit,
    RemoveActiveBranch,
    RepositoryExists,
    UntrackedObstruction,
)
from .file import exclusive_lock
from .graph import walk_first_parent
from .index import Index, stage_add, stage_remove
from .merge import MergeResult, merge
from .object_store import BaseObjectStore, DiskObjectStore, MemoryObjectStore
from .objects import Blob, Commit, ObjectID, check_path
from .refs import (
    HEADREF,
    DictRefsContainer,
    DiskRefsContainer,
    RefsContainer,
    local_branch_name,
)
from .worktree import CONTROLDIR, DiskWorkTree, MemoryWorkTree, WorkTree

logger = logging.getLogger(__name__)

OBJECTDIR = "objects"
REFSDIR = "refs"
REFSDIR_HEADS = "heads"
INDEX_FILENAME = "index"
CONFIG_FILENAME = "config"
LOCK_FILENAME = "gitlet"

BASE_DIRECTORIES = [
    [OBJECTDIR],
    [REFSDIR],
    [REFSDIR, REFSDIR_HEADS],
]

DEFAULT_BRANCH = b"master"
INITIAL_MESSAGE = b"initial commit"
REPOSITORY_FORMAT_VERSION = 0


class StatusReport(NamedTuple):
    """State of the working tree and index relative to the head commit.

    ``modified`` holds (path, kind) tuples where kind is b"modified" or
    b"deleted". All path lists are sorted.
    """

    active_branch: bytes
    branches: list[bytes]
    staged: list[bytes]
    removed: list[bytes]
    modified: list[tuple[bytes, bytes]]
    untracked: list[bytes]


def _local_timezone() -> int:
    offset = time.localtime().tm_gmtoff
    return offset - offset % 60


def _check_operand_path(path: bytes) -> None:
    try:
        check_path(path)
    except ValueError as e:
        raise InvalidOperand(f"Invalid path: {e}") from e
    if path.split(b"/", 1)[0] == os.fsencode(CONTROLDIR):
        raise InvalidOperand(
            f"Invalid path: {os.fsdecode(path)} is inside {CONTROLDIR}"
        )


class BaseRepo:
    """Base class for a gitlet repository.

    Attributes:
      object_store: Store holding blobs and commits
      refs: Branch heads and the active-branch pointer
      index: Staging index of the working tree
      worktree: The working tree
    """

    def __init__(
        self,
        object_store: BaseObjectStore,
        refs: RefsContainer,
        index: Index,
        worktree: WorkTree,
    ) -> None:
        """Open a repository.

        This shouldn't be called directly, but rather through one of the
        subclasses, such as MemoryRepo or Repo.
        """
        self.object_store = object_store
        self.refs = refs
        self.index = index
        self.worktree = worktree

    def lock(self) -> contextlib.AbstractContextManager[None]:
        """Hold exclusive access to the repository's mutable state."""
        return contextlib.nullcontext()

    def get_config(self) -> ConfigFile:
        """Retrieve the config object."""
        raise NotImplementedError(self.get_config)

    def close(self) -> None:
        """Close any files opened by this repository."""
        self.object_store.close()

    def __enter__(self) -> "BaseRepo":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _init_root(self, default_branch: bytes = DEFAULT_BRANCH) -> ObjectID:
        """Create the root commit and make default_branch point at it."""
        root = Commit(INITIAL_MESSAGE, {}, (), commit_time=0, commit_timezone=0)
        self.object_store.put_commit(root)
        branch_ref = local_branch_name(default_branch)
        self.refs.set_symbolic_ref(HEADREF, branch_ref)
        self.refs[branch_ref] = root.id
        logger.debug("initialized %s with root %s", default_branch, root.id)
        return root.id

    # Reading state

    def active_branch(self) -> bytes:
        """Return the name of the active branch."""
        try:
            return self.refs.active_branch()
        except KeyError as e:
            raise CorruptRepository("HEAD does not name a branch") from e

    def head(self) -> ObjectID:
        """Return the commit id of the active branch head.

        Raises:
          CorruptRepository: if HEAD is dangling
        """
        try:
            sha = self.refs[HEADREF]
        except KeyError as e:
            raise CorruptRepository("HEAD does not resolve to a commit") from e
        if sha not in self.object_store:
            raise CorruptRepository(
                f"HEAD points at missing commit {sha.decode('ascii')}"
            )
        return sha

    def get_commit(self, sha: ObjectID) -> Commit:
        """Return a commit by full id."""
        try:
            return self.object_store.get_commit(sha)
        except ObjectMissing:
            raise CommitNotFound(sha) from None

    def head_commit(self) -> Commit:
        return self.object_store.get_commit(self.head())

    def resolve_commit(self, committish: bytes) -> ObjectID:
        """Expand a full or abbreviated commit id.

        Raises:
          CommitNotFound: if nothing matches
          AmbiguousCommitId: if more than one commit matches
        """
        return self.object_store.expand_commit_id(committish)

    def branch_head(
        self, name: bytes, msg: str = "A branch with that name does not exist."
    ) -> ObjectID:
        """Return the head commit of a branch.

        Raises:
          BranchNotFound: with msg, if there is no such branch
          CorruptRepository: if the branch points at a missing commit
        """
        try:
            sha = self.refs.get_branch(name)
        except KeyError:
            raise BranchNotFound(name, msg) from None
        if sha not in self.object_store:
            raise CorruptRepository(
                f"branch {name!r} points at missing commit {sha.decode('ascii')}"
            )
        return sha

    def log(self) -> Iterator[Commit]:
        """Iterate over the active history, newest first, first parents only."""
        return walk_first_parent(self.object_store, self.head())

    def find(self, message: bytes) -> list[ObjectID]:
        """Return the ids of all commits with the given message, sorted.

        Raises:
          MessageNotFound: if no commit has that message
        """
        ret = [c.id for c in self.object_store.iter_commits() if c.message == message]
        if not ret:
            raise MessageNotFound(message)
        return ret

    def get_status(self) -> StatusReport:
        """Compare the working tree and index with the head commit."""
        head = self.head_commit().snapshot
        additions = self.index.additions
        removals = self.index.removals
        files = set(self.worktree.list_files())

        def changed(path: bytes, sha: ObjectID) -> bool:
            return Blob.from_string(self.worktree.read_file(path)).id != sha

        modified: list[tuple[bytes, bytes]] = []
        for path in sorted(head.keys() | additions.keys()):
            if path in removals:
                continue
            expected = additions[path] if path in additions else head[path]
            if path not in files:
                modified.append((path, b"deleted"))
            elif changed(path, expected):
                modified.append((path, b"modified"))

        tracked = head.keys() - removals
        untracked = sorted(
            path for path in files if path not in additions and path not in tracked
        )
        return StatusReport(
            active_branch=self.active_branch(),
            branches=self.refs.branch_names(),
            staged=sorted(additions),
            removed=sorted(removals),
            modified=modified,
            untracked=untracked,
        )

    # Changing state

    def stage(self, path: bytes) -> ObjectID | None:
        """Stage the current contents of a working-tree file.

        Returns: The staged blob id, or None if the file matches the head
        Raises:
          FileNotInWorkingTree: if the file does not exist
        """
        _check_operand_path(path)
        content = self.worktree.read_file(path)
        sha = stage_add(
            self.index, self.object_store, self.head_commit().snapshot, path, content
        )
        self.index.write()
        return sha

    def remove(self, path: bytes) -> None:
        """Unstage a file, and stage its removal if it is tracked.

        Raises:
          NothingToRemove: if the file is neither staged nor tracked
        """
        _check_operand_path(path)
        stage_remove(self.index, self.head_commit().snapshot, path, self.worktree)
        self.index.write()

    def do_commit(
        self,
        message: bytes,
        merge_heads: list[ObjectID] | None = None,
        commit_time: int | None = None,
        commit_timezone: int | None = None,
        allow_empty: bool = False,
    ) -> ObjectID:
        """Create a new commit from the staging index.

        The new commit's first parent is the active head; the active branch
        is moved to it and the index is cleared.

        Args:
          message: Commit message
          merge_heads: Merged-in parent, for merge commits
          commit_time: Commit timestamp (defaults to now)
          commit_timezone: Commit timestamp timezone (defaults to local)
          allow_empty: Commit even if nothing is staged
        Returns: New commit SHA1
        Raises:
          InvalidOperand: if message is empty
          NothingToCommit: if nothing is staged and allow_empty is False
        """
        if not message:
            raise InvalidOperand("Please enter a commit message.")
        if self.index.is_clean() and not allow_empty:
            raise NothingToCommit()
        head_id = self.head()
        head = self.object_store.get_commit(head_id)
        if commit_time is None:
            commit_time = int(time.time())
        if commit_timezone is None:
            commit_timezone = _local_timezone()
        commit = Commit(
            message,
            self.index.apply(head.snapshot),
            [head_id] + list(merge_heads or []),
            commit_time=commit_time,
            commit_timezone=commit_timezone,
        )
        self.object_store.put_commit(commit)
        if not self.refs.set_if_equals(HEADREF, head_id, commit.id):
            raise CorruptRepository("active branch moved during commit")
        self.index.clear()
        self.index.write()
        logger.debug("committed %s", commit.id.decode("ascii"))
        return commit.id

    def checkout_path(self, path: bytes, committish: bytes | None = None) -> None:
        """Restore one file from a commit, the active head by default.

        The staging index is not changed.

        Raises:
          CommitNotFound: if committish matches no commit
          PathNotInCommit: if the commit does not track path
        """
        _check_operand_path(path)
        if committish is None:
            commit = self.head_commit()
        else:
            commit = self.object_store.get_commit(self.resolve_commit(committish))
        sha = commit.get_blob_id(path)
        if sha is None:
            raise PathNotInCommit(path)
        self.worktree.write_file(path, self.object_store.get_blob(sha))

    def _switch_to(self, target_id: ObjectID) -> None:
        """Make the working tree match target_id, checking for obstructions."""
        current = self.head_commit()
        target = self.object_store.get_commit(target_id)
        obstructions = self.worktree.find_obstructions(target.snapshot, current.snapshot)
        if obstructions:
            raise UntrackedObstruction(obstructions)
        self.worktree.materialize(self.object_store, target.snapshot, current.snapshot)

    def checkout_branch(self, name: bytes) -> None:
        """Switch to another branch.

        Raises:
          NoOpCheckout: if name is the active branch
          BranchNotFound: if there is no such branch
          UntrackedObstruction: if an untracked file would be overwritten
        """
        if name == self.active_branch():
            raise NoOpCheckout()
        target_id = self.branch_head(name, "No such branch exists.")
        self._switch_to(target_id)
        self.refs.set_active_branch(name)

    def reset(self, committish: bytes) -> ObjectID:
        """Move the active branch to a commit and check it out.

        The staging index is cleared.

        Returns: The full id of the commit
        Raises:
          CommitNotFound: if committish matches no commit
          UntrackedObstruction: if an untracked file would be overwritten
        """
        target_id = self.resolve_commit(committish)
        head_id = self.head()
        self._switch_to(target_id)
        self.index.clear()
        self.index.write()
        self.refs.set_if_equals(HEADREF, head_id, target_id)
        logger.debug("reset to %s", target_id.decode("ascii"))
        return target_id

    def create_branch(self, name: bytes) -> None:
        """Create a branch at the active head; the active branch is unchanged.

        Raises:
          InvalidBranchName: if name is not a valid branch name
          BranchExists: if the branch already exists
        """
        ref = local_branch_name(name)
        if not self.refs.add_if_new(ref, self.head()):
            raise BranchExists(name)

    def delete_branch(self, name: bytes) -> None:
        """Delete a branch pointer; its commits are kept.

        Raises:
          BranchNotFound: if there is no such branch
          RemoveActiveBranch: if name is the active branch
        """
        if not self.refs.has_branch(name):
            raise BranchNotFound(name, "A branch with that name does not exist.")
        if name == self.active_branch():
            raise RemoveActiveBranch(name)
        del self.refs[local_branch_name(name)]

    def merge(
        self,
        name: bytes,
        commit_time: int | None = None,
        commit_timezone: int | None = None,
    ) -> MergeResult:
        """Merge a branch into the active branch.

        Raises:
          BranchNotFound: if there is no such branch
          UncommittedChanges, SelfMerge, AlreadyAncestor, UntrackedObstruction:
            see gitlet.merge.merge
        """
        other_id = self.branch_head(name)
        message = b"Merged " + name + b" into " + self.active_branch() + b"."
        return merge(
            self,
            other_id,
            message,
            commit_time=commit_time,
            commit_timezone=commit_timezone,
        )


class Repo(BaseRepo):
    """A gitlet repository backed by local disk.

    To open an existing repository, call the constructor with the path of the
    working tree. To create a new repository, use the Repo.init class method.

    Attributes:
      path: Path to the working tree
    """

    path: str
    object_store: DiskObjectStore

    def __init__(self, root: str | os.PathLike[str]) -> None:
        """Open a repository on disk.

        Raises:
          NotGitletRepository: if root holds no repository
          CorruptRepository: if the repository format is not supported
        """
        root = os.fspath(root)
        controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(os.path.join(controldir, OBJECTDIR)):
            raise NotGitletRepository(root)
        self.path = root
        self._controldir = controldir
        config = self.get_config()
        try:
            format_version = int(config.get("core", "repositoryformatversion"))
        except KeyError:
            format_version = 0
        except ValueError as e:
            raise CorruptRepository(f"invalid repositoryformatversion: {e}") from e
        if format_version != REPOSITORY_FORMAT_VERSION:
            raise CorruptRepository(
                f"unsupported repository format version {format_version}"
            )
        object_store = DiskObjectStore.from_config(
            os.path.join(controldir, OBJECTDIR), config
        )
        super().__init__(
            object_store,
            DiskRefsContainer(controldir),
            Index(self.index_path()),
            DiskWorkTree(root, CONTROLDIR),
        )

    def __repr__(self) -> str:
        return f"<Repo at {self.path!r}>"

    @classmethod
    def discover(cls, start: str | os.PathLike[str] = ".") -> "Repo":
        """Iterate parent directories to discover a repository.

        Return a Repo object for the first parent directory that looks like a
        gitlet repository.

        Args:
          start: The directory to start discovery from (defaults to '.')
        """
        path = os.path.abspath(start)
        while True:
            try:
                return cls(path)
            except NotGitletRepository:
                new_path, _tail = os.path.split(path)
                if new_path == path:  # Root reached
                    break
                path = new_path
        raise NotGitletRepository(os.fspath(start))

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    def index_path(self) -> str:
        """Return path to the index file."""
        return os.path.join(self.controldir(), INDEX_FILENAME)

    def get_config(self) -> ConfigFile:
        """Retrieve the config object."""
        path = os.path.join(self._controldir, CONFIG_FILENAME)
        try:
            return ConfigFile.from_path(path)
        except FileNotFoundError:
            ret = ConfigFile()
            ret.path = path
            return ret
        except ValueError as e:
            raise CorruptRepository(f"invalid config file: {e}") from e

    @contextlib.contextmanager
    def lock(self) -> Iterator[None]:
        """Hold the repository lock file.

        The staging index is re-read once the lock is held, so changes
        written by another holder since this object was opened are kept.

        Raises:
          FileLocked: if another process holds the lock
        """
        with exclusive_lock(os.path.join(self._controldir, LOCK_FILENAME)):
            self.index.read()
            yield

    @classmethod
    def init(
        cls,
        path: str | os.PathLike[str],
        *,
        mkdir: bool = False,
        config: ConfigFile | None = None,
        default_branch: bytes | None = None,
    ) -> "Repo":
        """Create a new repository.

        Args:
          path: Path in which to create the repository
          mkdir: Whether to create the directory
          config: Configuration to read init.defaultBranch from
          default_branch: Default branch name
        Returns: `Repo` instance
        Raises:
          RepositoryExists: if path already holds a repository
        """
        path = os.fspath(path)
        if mkdir:
            os.mkdir(path)
        controldir = os.path.join(path, CONTROLDIR)
        try:
            os.mkdir(controldir)
        except FileExistsError:
            raise RepositoryExists() from None
        for d in BASE_DIRECTORIES:
            os.mkdir(os.path.join(controldir, *d))
        cf = ConfigFile()
        cf.set("core", "repositoryformatversion", str(REPOSITORY_FORMAT_VERSION))
        cf.write_to_path(os.path.join(controldir, CONFIG_FILENAME))
        if default_branch is None:
            try:
                default_branch = config.get("init", "defaultBranch") if config else None
            except KeyError:
                default_branch = None
        ret = cls(path)
        ret._init_root(default_branch or DEFAULT_BRANCH)
        return ret


class MemoryRepo(BaseRepo):
    """Repo that keeps objects, refs, the index and working files in memory."""

    def __init__(self) -> None:
        """Create a new, uninitialized repository in memory."""
        super().__init__(
            MemoryObjectStore(), DictRefsContainer({}), Index(), MemoryWorkTree()
        )
        self._config = ConfigFile()

    def get_config(self) -> ConfigFile:
        return self._config

    @classmethod
    def init(cls, default_branch: bytes = DEFAULT_BRANCH) -> "MemoryRepo":
        """Create a new repository in memory holding only the root commit."""
        ret = cls()
        ret._init_root(default_branch)
        return ret
