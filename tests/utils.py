# utils.py -- Test utilities for gitlet
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


"""Utility functions common to gitlet tests."""

import os
import shutil
import tempfile
from collections.abc import Iterable, Mapping

from gitlet.object_store import BaseObjectStore
from gitlet.objects import Commit, ObjectID
from gitlet.repo import Repo


def make_commit(**attrs) -> Commit:
    """Make a Commit object with a default set of members.

    Args:
      attrs: dict of attributes to overwrite from the default values.
    Returns: A newly initialized Commit object.
    """
    all_attrs = {
        "message": b"Test message.",
        "snapshot": {},
        "parents": (),
        "commit_time": 1174773719,
        "commit_timezone": 0,
    }
    all_attrs.update(attrs)
    return Commit(**all_attrs)


def build_commit_graph(
    object_store: BaseObjectStore,
    commit_spec: Iterable[list[int]],
    snapshots: Mapping[int, Mapping[bytes, bytes]] | None = None,
) -> list[Commit]:
    """Build a commit graph from a concise specification.

    Sample usage:
    >>> c1, c2, c3 = build_commit_graph(store, [[1], [2, 1], [3, 1, 2]])
    >>> c3.parents == (c1.id, c2.id)
    True

    Args:
      object_store: An object store to add the commits to.
      commit_spec: An iterable of iterables of ints defining the commit
        graph. Each entry defines one commit, and entries must be in
        topological order. The first element of each entry is a commit
        number, and the remaining elements are its parents (at most two).
      snapshots: An optional dict of commit number -> {path: contents}; the
        blobs are added to the store.
    Returns: The list of commit objects created.
    Raises:
      ValueError: If an undefined commit identifier is listed as a parent.
    """
    if snapshots is None:
        snapshots = {}
    commit_time = 0
    nums: dict[int, ObjectID] = {}
    commits = []

    for commit in commit_spec:
        commit_num = commit[0]
        try:
            parent_ids = [nums[pn] for pn in commit[1:]]
        except KeyError as e:
            (missing_parent,) = e.args
            raise ValueError(f"Unknown parent {missing_parent}") from e

        snapshot = {
            path: object_store.put_blob(contents)
            for path, contents in snapshots.get(commit_num, {}).items()
        }
        commit_obj = make_commit(
            message=f"Commit {commit_num}".encode("ascii"),
            snapshot=snapshot,
            parents=parent_ids,
            commit_time=commit_time,
        )
        commit_time += 100
        nums[commit_num] = commit_obj.id
        object_store.put_commit(commit_obj)
        commits.append(commit_obj)

    return commits


class TempRepoMixin:
    """Create a disk repository in a fresh temporary directory."""

    def make_repo(self) -> Repo:
        self.test_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.test_dir)
        repo = Repo.init(self.test_dir)
        self.addCleanup(repo.close)
        return repo

    def write_file(self, repo: Repo, name: str, contents: bytes) -> str:
        path = os.path.join(repo.path, name)
        dirname = os.path.dirname(path)
        if not os.path.isdir(dirname):
            os.makedirs(dirname)
        with open(path, "wb") as f:
            f.write(contents)
        return path

    def read_file(self, repo: Repo, name: str) -> bytes:
        with open(os.path.join(repo.path, name), "rb") as f:
            return f.read()
