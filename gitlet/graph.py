# graph.py -- Commit graph queries
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

"""Ancestry queries over the commit DAG.

Commits refer to their parents by id only; every traversal here resolves
parents lazily through the object store.
"""

__all__ = [
    "ancestor_set",
    "can_fast_forward",
    "lowest_common_ancestor",
    "parents_of",
    "walk_first_parent",
]

from collections import deque
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .objects import Commit, ObjectID

if TYPE_CHECKING:
    from .object_store import BaseObjectStore


def parents_of(store: "BaseObjectStore", commit_id: ObjectID) -> tuple[ObjectID, ...]:
    """Return the parents of a commit, first parent first.

    Raises:
      ObjectMissing: if the commit is not in the store
    """
    return store.get_commit(commit_id).parents


def ancestor_set(store: "BaseObjectStore", commit_id: ObjectID) -> set[ObjectID]:
    """Return every commit reachable from commit_id, itself included.

    Both parent and merge-parent edges are followed. Each commit is loaded at
    most once, however many paths lead to it.
    """
    seen = {commit_id}
    pending = [commit_id]
    while pending:
        for parent in parents_of(store, pending.pop()):
            if parent not in seen:
                seen.add(parent)
                pending.append(parent)
    return seen


def lowest_common_ancestor(
    store: "BaseObjectStore", current: ObjectID, other: ObjectID
) -> ObjectID | None:
    """Find the merge base of two commits.

    Walks breadth-first from ``current`` over parent, then merge-parent
    edges and returns the first commit that is also an ancestor of
    ``other``. With several merge bases the one discovered first wins, even
    when it is not the graph-theoretically lowest.

    Args:
      store: Object store to load commits from
      current: Commit the walk starts from
      other: Commit whose ancestors are candidates
    Returns: Commit id of the merge base, or None if the histories are
      unrelated
    """
    candidates = ancestor_set(store, other)
    queue = deque([current])
    visited = {current}
    while queue:
        commit_id = queue.popleft()
        if commit_id in candidates:
            return commit_id
        for parent in parents_of(store, commit_id):
            if parent not in visited:
                visited.add(parent)
                queue.append(parent)
    return None


def can_fast_forward(store: "BaseObjectStore", c1: ObjectID, c2: ObjectID) -> bool:
    """Is it possible to fast-forward from c1 to c2?

    Args:
      store: Object store to load commits from
      c1: Commit id for first commit
      c2: Commit id for second commit
    """
    if c1 == c2:
        return True
    return c1 in ancestor_set(store, c2)


def walk_first_parent(store: "BaseObjectStore", commit_id: ObjectID) -> Iterator[Commit]:
    """Yield commits from commit_id back to the root along first parents.

    Merge parents are not followed.
    """
    next_id: ObjectID | None = commit_id
    while next_id is not None:
        commit = store.get_commit(next_id)
        yield commit
        next_id = commit.first_parent
