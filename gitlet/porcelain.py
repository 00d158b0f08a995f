# porcelain.py -- Porcelain-like layer on top of gitlet
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

"""Simple wrapper that provides porcelain-like functions on top of gitlet.

Currently implemented:
 * add
 * branch_create
 * branch_delete
 * checkout_branch
 * checkout_file
 * commit
 * find
 * global_log
 * init
 * log
 * merge
 * reset
 * rm
 * status

These functions are meant to behave similarly to the gitlet subcommands.
Differences in behaviour are considered bugs.

Note: one of the consequences of this is that paths tend to be
interpreted relative to the repository root, and that each command that
changes the repository holds the repository lock while it runs.

Functions should generally accept both unicode strings and bytestrings.
"""

__all__ = [
    "DEFAULT_ENCODING",
    "add",
    "branch_create",
    "branch_delete",
    "checkout_branch",
    "checkout_file",
    "commit",
    "find",
    "format_commit_date",
    "global_log",
    "init",
    "log",
    "merge",
    "open_repo_closing",
    "path_to_tree_path",
    "print_commit",
    "print_status",
    "reset",
    "rm",
    "status",
]

import os
import sys
import time
from collections.abc import Iterator
from contextlib import AbstractContextManager, closing, contextmanager
from typing import TextIO, TypeVar

from .config import ConfigFile
from .errors import InvalidOperand
from .merge import MergeResult
from .objects import Commit, ObjectID, format_timezone
from .repo import BaseRepo, Repo, StatusReport

T = TypeVar("T", bound=BaseRepo)
RepoPath = str | os.PathLike[str] | BaseRepo

DEFAULT_ENCODING = "utf-8"
ABBREV_LENGTH = 7


def _to_bytes(value: str | bytes) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode(DEFAULT_ENCODING)


@contextmanager
def _noop_context_manager(obj: T) -> Iterator[T]:
    """Context manager that has the same api as closing but does nothing."""
    yield obj


def open_repo_closing(path_or_repo: RepoPath) -> AbstractContextManager[BaseRepo]:
    """Open an argument that can be a repository or a path for a repository.

    returns a context manager that will close the repo on exit if the argument
    is a path, else does nothing if the argument is a repo.
    """
    if isinstance(path_or_repo, BaseRepo):
        return _noop_context_manager(path_or_repo)
    return closing(Repo(path_or_repo))


def path_to_tree_path(repo: BaseRepo, path: str | bytes) -> bytes:
    """Convert a path to a /-separated path relative to the repository root.

    Relative paths are taken to be relative to the repository root already;
    absolute paths must lie inside the working tree.

    Raises:
      InvalidOperand: if an absolute path is outside the working tree
    """
    if isinstance(path, bytes):
        path = os.fsdecode(path)
    if os.path.isabs(path):
        root = getattr(repo, "path", None)
        if root is None:
            raise InvalidOperand(f"Invalid path: {path}")
        relpath = os.path.relpath(path, os.path.abspath(root))
        if relpath == os.pardir or relpath.startswith(os.pardir + os.sep):
            raise InvalidOperand(f"Path {path} is outside the repository")
        path = relpath
    else:
        path = os.path.normpath(path)
    return os.fsencode(path.replace(os.path.sep, "/"))


def format_commit_date(commit: Commit) -> str:
    """Format a commit's time in its own timezone.

    e.g. ``Thu Jan 01 00:00:00 1970 +0000``
    """
    time_tuple = time.gmtime(commit.commit_time + commit.commit_timezone)
    time_str = time.strftime("%a %b %d %H:%M:%S %Y", time_tuple)
    return time_str + " " + format_timezone(commit.commit_timezone).decode("ascii")


def print_commit(commit: Commit, outstream: TextIO = sys.stdout) -> None:
    """Write a human-readable commit log entry.

    Args:
      commit: A `Commit` object
      outstream: A stream file to write to
    """
    outstream.write("===\n")
    outstream.write("commit " + commit.id.decode("ascii") + "\n")
    if commit.is_merge():
        outstream.write(
            "Merge: "
            + " ".join(p[:ABBREV_LENGTH].decode("ascii") for p in commit.parents)
            + "\n"
        )
    outstream.write("Date: " + format_commit_date(commit) + "\n")
    outstream.write(commit.message.decode(DEFAULT_ENCODING, "replace") + "\n")
    outstream.write("\n")


def print_status(report: StatusReport, outstream: TextIO = sys.stdout) -> None:
    """Write a status report in the gitlet layout."""

    def section(title: str, lines: list[str]) -> None:
        outstream.write(f"=== {title} ===\n")
        for line in lines:
            outstream.write(line + "\n")
        outstream.write("\n")

    def decode(path: bytes) -> str:
        return os.fsdecode(path)

    section(
        "Branches",
        [
            ("*" if name == report.active_branch else "") + decode(name)
            for name in report.branches
        ],
    )
    section("Staged Files", [decode(p) for p in report.staged])
    section("Removed Files", [decode(p) for p in report.removed])
    section(
        "Modifications Not Staged For Commit",
        [f"{decode(p)} ({kind.decode('ascii')})" for p, kind in report.modified],
    )
    section("Untracked Files", [decode(p) for p in report.untracked])


def init(
    path: str | os.PathLike[str] = ".",
    *,
    default_branch: str | bytes | None = None,
    config: ConfigFile | None = None,
) -> Repo:
    """Create a new gitlet repository.

    Args:
      path: Path to repository.
      default_branch: Name of the first branch (defaults to init.defaultBranch
        from config, or master)
      config: Configuration to read init.defaultBranch from
    Returns: A Repo instance
    """
    if not os.path.exists(path):
        os.mkdir(path)
    if default_branch is not None:
        default_branch = _to_bytes(default_branch)
    return Repo.init(path, config=config, default_branch=default_branch)


def add(repo: RepoPath, path: str | bytes) -> ObjectID | None:
    """Stage a file for the next commit.

    Args:
      repo: Repository for the files
      path: Path of the file to stage
    Returns: The staged blob id, or None if the file matches the head
    """
    with open_repo_closing(repo) as r, r.lock():
        return r.stage(path_to_tree_path(r, path))


def rm(repo: RepoPath, path: str | bytes) -> None:
    """Unstage a file and stage its removal if it is tracked.

    Args:
      repo: Repository for the files
      path: Path of the file to remove
    """
    with open_repo_closing(repo) as r, r.lock():
        r.remove(path_to_tree_path(r, path))


def commit(
    repo: RepoPath = ".",
    message: str | bytes | None = None,
    commit_time: int | None = None,
    commit_timezone: int | None = None,
) -> ObjectID:
    """Create a new commit.

    Args:
      repo: Path to repository
      message: Optional commit message
      commit_time: Commit timestamp (defaults to now)
      commit_timezone: Commit timezone offset (defaults to local)
    Returns: SHA1 of the new commit
    """
    with open_repo_closing(repo) as r, r.lock():
        return r.do_commit(
            _to_bytes(message or b""),
            commit_time=commit_time,
            commit_timezone=commit_timezone,
        )


def log(repo: RepoPath = ".", outstream: TextIO = sys.stdout) -> None:
    """Write the active history, newest first, following first parents.

    Args:
      repo: Path to repository
      outstream: Stream to write log output to
    """
    with open_repo_closing(repo) as r:
        for entry in r.log():
            print_commit(entry, outstream)


def global_log(repo: RepoPath = ".", outstream: TextIO = sys.stdout) -> None:
    """Write every commit ever made, ordered by id.

    Args:
      repo: Path to repository
      outstream: Stream to write log output to
    """
    with open_repo_closing(repo) as r:
        for entry in r.object_store.iter_commits():
            print_commit(entry, outstream)


def find(
    repo: RepoPath = ".", message: str | bytes = b"", outstream: TextIO = sys.stdout
) -> list[ObjectID]:
    """Write the ids of all commits with the given message.

    Args:
      repo: Path to repository
      message: Commit message to look for
      outstream: Stream to write the ids to
    Returns: The matching commit ids, sorted
    """
    with open_repo_closing(repo) as r:
        ids = r.find(_to_bytes(message))
    for sha in ids:
        outstream.write(sha.decode("ascii") + "\n")
    return ids


def status(repo: RepoPath = ".", outstream: TextIO | None = None) -> StatusReport:
    """Return the status of the working tree, optionally writing it out.

    Args:
      repo: Path to repository
      outstream: Stream to write the report to, if any
    Returns: A StatusReport
    """
    with open_repo_closing(repo) as r:
        report = r.get_status()
    if outstream is not None:
        print_status(report, outstream)
    return report


def checkout_file(
    repo: RepoPath, path: str | bytes, committish: str | bytes | None = None
) -> None:
    """Restore a file from a commit, the active head by default.

    Args:
      repo: Path to repository
      path: Path of the file to restore
      committish: Full or abbreviated commit id
    """
    with open_repo_closing(repo) as r, r.lock():
        r.checkout_path(
            path_to_tree_path(r, path),
            None if committish is None else _to_bytes(committish),
        )


def checkout_branch(repo: RepoPath, name: str | bytes) -> None:
    """Switch the working tree and active branch to another branch.

    Args:
      repo: Path to repository
      name: Name of the branch
    """
    with open_repo_closing(repo) as r, r.lock():
        r.checkout_branch(_to_bytes(name))


def branch_create(repo: RepoPath, name: str | bytes) -> None:
    """Create a branch at the active head.

    Args:
      repo: Path to the repository
      name: Name of the new branch
    """
    with open_repo_closing(repo) as r, r.lock():
        r.create_branch(_to_bytes(name))


def branch_delete(repo: RepoPath, name: str | bytes) -> None:
    """Delete a branch.

    Args:
      repo: Path to the repository
      name: Name of the branch
    """
    with open_repo_closing(repo) as r, r.lock():
        r.delete_branch(_to_bytes(name))


def reset(repo: RepoPath, committish: str | bytes) -> ObjectID:
    """Check out a commit and move the active branch to it.

    Args:
      repo: Path to repository
      committish: Full or abbreviated commit id
    Returns: Full id of the commit
    """
    with open_repo_closing(repo) as r, r.lock():
        return r.reset(_to_bytes(committish))


def merge(
    repo: RepoPath,
    name: str | bytes,
    outstream: TextIO = sys.stdout,
    commit_time: int | None = None,
    commit_timezone: int | None = None,
) -> MergeResult:
    """Merge a branch into the active branch.

    Args:
      repo: Path to repository
      name: Name of the branch to merge
      outstream: Stream to report fast-forwards and conflicts to
      commit_time: Time of the merge commit (defaults to now)
      commit_timezone: Timezone of the merge commit (defaults to local)
    Returns: A MergeResult
    """
    with open_repo_closing(repo) as r, r.lock():
        result = r.merge(
            _to_bytes(name), commit_time=commit_time, commit_timezone=commit_timezone
        )
    if result.fast_forward:
        outstream.write("Current branch fast-forwarded.\n")
    elif result.has_conflicts:
        outstream.write("Encountered a merge conflict.\n")
    return result
