# merge.py -- Three-way merge of branches
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

"""Gitlet merge implementation.

Files are merged whole: a path changed in different ways on both sides is a
conflict, and the working-tree file gets both versions between conflict
markers. Conflicts do not abort the merge; the merge commit records the
marked-up files.
"""

__all__ = [
    "CONFLICT",
    "FAST_FORWARD",
    "KEEP",
    "MERGED",
    "REMOVE",
    "TAKE_OTHER",
    "MergeResult",
    "Merger",
    "classify_path",
    "conflict_contents",
    "merge",
]

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import (
    AlreadyAncestor,
    SelfMerge,
    UncommittedChanges,
    UntrackedObstruction,
)
from .graph import lowest_common_ancestor
from .index import stage_add, stage_remove
from .object_store import BaseObjectStore
from .objects import ObjectID
from .refs import HEADREF

if TYPE_CHECKING:
    from .repo import BaseRepo

logger = logging.getLogger(__name__)

# Per-path actions
KEEP = "keep"
TAKE_OTHER = "take-other"
REMOVE = "remove"
CONFLICT = "conflict"

# Merge outcomes
FAST_FORWARD = "fast-forward"
MERGED = "merged"

CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END = b">>>>>>>\n"


def classify_path(
    base: ObjectID | None, current: ObjectID | None, other: ObjectID | None
) -> str:
    """Decide what merging does to one path.

    Each argument is the blob id of the path in that commit, or None when
    the commit does not track it.

    Returns: One of KEEP, TAKE_OTHER, REMOVE or CONFLICT
    """
    if other == base:
        return KEEP
    if current == base:
        if other is None:
            return REMOVE
        return TAKE_OTHER
    if current == other:
        # Same change on both sides
        return KEEP
    return CONFLICT


def conflict_contents(current: bytes | None, other: bytes | None) -> bytes:
    """Build the contents of a conflicted file.

    Args:
      current: Contents on the current branch, or None if absent
      other: Contents on the merged-in branch, or None if absent
    """
    return b"".join(
        [
            CONFLICT_START,
            current or b"",
            CONFLICT_SEPARATOR,
            other or b"",
            CONFLICT_END,
        ]
    )


@dataclass
class MergeResult:
    """Outcome of a merge."""

    kind: str
    commit_id: ObjectID
    conflicts: list[bytes] = field(default_factory=list)

    @property
    def fast_forward(self) -> bool:
        return self.kind == FAST_FORWARD

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


class Merger:
    """Computes per-path merge results."""

    def __init__(self, object_store: BaseObjectStore) -> None:
        """Initialize merger.

        Args:
            object_store: Object store to read blobs from
        """
        self.object_store = object_store

    def plan(
        self,
        base: Mapping[bytes, ObjectID],
        current: Mapping[bytes, ObjectID],
        other: Mapping[bytes, ObjectID],
    ) -> list[tuple[bytes, str]]:
        """Classify every path of the three snapshots.

        Returns: Sorted list of (path, action) tuples, KEEP entries omitted
        """
        ret = []
        for path in sorted(base.keys() | current.keys() | other.keys()):
            action = classify_path(base.get(path), current.get(path), other.get(path))
            logger.debug("merge %r: %s", path, action)
            if action != KEEP:
                ret.append((path, action))
        return ret

    def merge_snapshots(
        self,
        base: Mapping[bytes, ObjectID],
        current: Mapping[bytes, ObjectID],
        other: Mapping[bytes, ObjectID],
    ) -> tuple[dict[bytes, bytes], list[bytes], list[bytes]]:
        """Work out the working-tree changes of a merge.

        Nothing is written; every blob needed is read up front.

        Returns: Tuple of (files to write, paths to remove, conflicted paths)
        """
        writes: dict[bytes, bytes] = {}
        removals: list[bytes] = []
        conflicts: list[bytes] = []
        for path, action in self.plan(base, current, other):
            if action == TAKE_OTHER:
                writes[path] = self.object_store.get_blob(other[path])
            elif action == REMOVE:
                removals.append(path)
            elif action == CONFLICT:
                writes[path] = conflict_contents(
                    self._read(current.get(path)), self._read(other.get(path))
                )
                conflicts.append(path)
        return writes, removals, conflicts

    def _read(self, sha: ObjectID | None) -> bytes | None:
        if sha is None:
            return None
        return self.object_store.get_blob(sha)


def merge(
    repo: "BaseRepo",
    other_id: ObjectID,
    message: bytes,
    commit_time: int | None = None,
    commit_timezone: int | None = None,
) -> MergeResult:
    """Merge a commit into the active branch.

    All checks run before the working tree, the index or any ref is touched.

    Args:
      repo: Repository to merge in
      other_id: Commit to merge
      message: Message of the merge commit
      commit_time: Time of the merge commit (defaults to now)
      commit_timezone: Timezone of the merge commit (defaults to local)
    Returns: A MergeResult
    Raises:
      UncommittedChanges: if the index is not clean
      SelfMerge: if other_id is the active head
      AlreadyAncestor: if other_id is already part of the active history
      UntrackedObstruction: if an untracked file would be overwritten
    """
    if not repo.index.is_clean():
        raise UncommittedChanges()
    current_id = repo.head()
    if current_id == other_id:
        raise SelfMerge()
    store = repo.object_store
    base_id = lowest_common_ancestor(store, current_id, other_id)
    if base_id == other_id:
        raise AlreadyAncestor()
    current = store.get_commit(current_id)
    other = store.get_commit(other_id)
    untracked = sorted(
        path
        for path in other.snapshot
        if path not in current.snapshot and repo.worktree.exists(path)
    )
    if untracked:
        raise UntrackedObstruction(untracked)

    if base_id == current_id:
        obstructions = repo.worktree.find_obstructions(
            other.snapshot, current.snapshot
        )
        if obstructions:
            raise UntrackedObstruction(obstructions)
        repo.worktree.materialize(store, other.snapshot, current.snapshot)
        repo.refs.set_if_equals(HEADREF, current_id, other_id)
        logger.info(
            "fast-forwarded %s to %s",
            current_id.decode("ascii"),
            other_id.decode("ascii"),
        )
        return MergeResult(FAST_FORWARD, other_id)

    if base_id is None:
        base_snapshot: Mapping[bytes, ObjectID] = {}
    else:
        base_snapshot = store.get_commit(base_id).snapshot
    writes, removals, conflicts = Merger(store).merge_snapshots(
        base_snapshot, current.snapshot, other.snapshot
    )
    obstructions = repo.worktree.find_obstructions(
        writes, current.snapshot, removals
    )
    if obstructions:
        raise UntrackedObstruction(obstructions)
    for path in removals:
        stage_remove(repo.index, current.snapshot, path, repo.worktree)
    for path, contents in writes.items():
        repo.worktree.write_file(path, contents)
        stage_add(repo.index, store, current.snapshot, path, contents)
    if conflicts:
        logger.info("merge conflicts in %r", conflicts)
    commit_id = repo.do_commit(
        message,
        merge_heads=[other_id],
        commit_time=commit_time,
        commit_timezone=commit_timezone,
        allow_empty=True,
    )
    return MergeResult(MERGED, commit_id, conflicts)
