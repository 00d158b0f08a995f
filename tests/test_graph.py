# test_graph.py -- Tests for graph.py
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


"""Tests for gitlet.graph."""

from collections import Counter

from gitlet.errors import ObjectMissing
from gitlet.graph import (
    ancestor_set,
    can_fast_forward,
    lowest_common_ancestor,
    parents_of,
    walk_first_parent,
)
from gitlet.object_store import MemoryObjectStore
from gitlet.objects import Commit, ObjectID

from . import TestCase
from .utils import build_commit_graph


class CountingStore(MemoryObjectStore):
    """Object store that records how often each commit is loaded."""

    def __init__(self) -> None:
        super().__init__()
        self.loads: Counter[ObjectID] = Counter()

    def get_commit(self, sha: ObjectID) -> Commit:
        self.loads[sha] += 1
        return super().get_commit(sha)


class AncestorSetTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = MemoryObjectStore()

    def test_root(self) -> None:
        (c1,) = build_commit_graph(self.store, [[1]])
        self.assertEqual({c1.id}, ancestor_set(self.store, c1.id))

    def test_linear(self) -> None:
        c1, c2, c3 = build_commit_graph(self.store, [[1], [2, 1], [3, 2]])
        self.assertEqual({c1.id, c2.id, c3.id}, ancestor_set(self.store, c3.id))
        self.assertEqual({c1.id, c2.id}, ancestor_set(self.store, c2.id))

    def test_follows_merge_parent(self) -> None:
        c1, c2, c3, c4 = build_commit_graph(
            self.store, [[1], [2, 1], [3, 1], [4, 2, 3]]
        )
        self.assertEqual(
            {c1.id, c2.id, c3.id, c4.id}, ancestor_set(self.store, c4.id)
        )

    def test_deep_history(self) -> None:
        spec = [[1]] + [[i, i - 1] for i in range(2, 3000)]
        commits = build_commit_graph(self.store, spec)
        self.assertEqual(
            {c.id for c in commits}, ancestor_set(self.store, commits[-1].id)
        )

    def test_each_commit_loaded_once(self) -> None:
        # Twenty stacked diamonds give 2**20 paths from the tip to the root.
        spec = [[1]]
        top = 1
        for _ in range(20):
            spec += [[top + 1, top], [top + 2, top], [top + 3, top + 1, top + 2]]
            top += 3
        store = CountingStore()
        commits = build_commit_graph(store, spec)
        store.loads.clear()
        self.assertEqual(
            {c.id for c in commits}, ancestor_set(store, commits[-1].id)
        )
        self.assertEqual({c.id: 1 for c in commits}, dict(store.loads))

    def test_missing(self) -> None:
        self.assertRaises(ObjectMissing, ancestor_set, self.store, b"1" * 40)

    def test_parents_of(self) -> None:
        c1, c2, c3 = build_commit_graph(self.store, [[1], [2], [3, 1, 2]])
        self.assertEqual((c1.id, c2.id), parents_of(self.store, c3.id))
        self.assertEqual((), parents_of(self.store, c1.id))


class LowestCommonAncestorTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.store = MemoryObjectStore()

    def lca(self, current, other):
        return lowest_common_ancestor(self.store, current.id, other.id)

    def test_same(self) -> None:
        (c1,) = build_commit_graph(self.store, [[1]])
        self.assertEqual(c1.id, self.lca(c1, c1))

    def test_ancestor(self) -> None:
        c1, c2, c3 = build_commit_graph(self.store, [[1], [2, 1], [3, 2]])
        self.assertEqual(c1.id, self.lca(c3, c1))
        self.assertEqual(c1.id, self.lca(c1, c3))

    def test_fork(self) -> None:
        c1, c2, c3, c4, c5 = build_commit_graph(
            self.store, [[1], [2, 1], [3, 2], [4, 2], [5, 4]]
        )
        self.assertEqual(c2.id, self.lca(c3, c5))
        self.assertEqual(c2.id, self.lca(c5, c3))

    def test_unrelated(self) -> None:
        c1, c2 = build_commit_graph(self.store, [[1], [2]])
        self.assertIsNone(self.lca(c1, c2))

    def test_after_merge(self) -> None:
        # 1 - 2 - 4 (merge of 3) - 6
        #  \- 3 -------- 5
        c1, c2, c3, c4, c5, c6 = build_commit_graph(
            self.store, [[1], [2, 1], [3, 1], [4, 2, 3], [5, 3], [6, 4]]
        )
        self.assertEqual(c3.id, self.lca(c6, c5))

    def test_discovery_order(self) -> None:
        # Criss-cross: both 2 and 3 are merge bases of 4 and 5. The walk
        # from the current commit reaches the first parent's side first.
        c1, c2, c3, c4, c5 = build_commit_graph(
            self.store, [[1], [2, 1], [3, 1], [4, 2, 3], [5, 3, 2]]
        )
        self.assertEqual(c2.id, self.lca(c4, c5))
        self.assertEqual(c3.id, self.lca(c5, c4))

    def test_can_fast_forward(self) -> None:
        c1, c2, c3 = build_commit_graph(self.store, [[1], [2, 1], [3, 1]])
        self.assertTrue(can_fast_forward(self.store, c1.id, c1.id))
        self.assertTrue(can_fast_forward(self.store, c1.id, c2.id))
        self.assertFalse(can_fast_forward(self.store, c2.id, c1.id))
        self.assertFalse(can_fast_forward(self.store, c2.id, c3.id))


class WalkFirstParentTests(TestCase):
    def test_walk(self) -> None:
        store = MemoryObjectStore()
        c1, c2, c3, c4 = build_commit_graph(store, [[1], [2, 1], [3, 1], [4, 2, 3]])
        self.assertEqual(
            [c4.id, c2.id, c1.id], [c.id for c in walk_first_parent(store, c4.id)]
        )
