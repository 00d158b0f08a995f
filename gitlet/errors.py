# errors.py -- errors for gitlet
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

"""Gitlet-related exception classes.

Every error a command can report to the user derives from GitletError and
carries the human-readable message as its first argument. The CLI layer prints
that message verbatim.
"""

__all__ = [
    "AlreadyAncestor",
    "AmbiguousCommitId",
    "BranchExists",
    "BranchNotFound",
    "CommitNotFound",
    "CorruptRepository",
    "FileNotInWorkingTree",
    "GitletError",
    "InvalidBranchName",
    "InvalidOperand",
    "MessageNotFound",
    "NoOpCheckout",
    "NotFound",
    "NotGitletRepository",
    "NothingToCommit",
    "NothingToRemove",
    "ObjectFormatException",
    "ObjectMissing",
    "PathNotInCommit",
    "PreconditionFailed",
    "RemoveActiveBranch",
    "RepositoryExists",
    "SelfMerge",
    "UncommittedChanges",
    "UntrackedObstruction",
]


class GitletError(Exception):
    """Base class for errors reported to the user."""

    def __init__(self, msg: str) -> None:
        """Initialize GitletError with message."""
        super().__init__(msg)

    @property
    def message(self) -> str:
        """Return the human-readable message."""
        return self.args[0]


class NotFound(GitletError):
    """A referenced blob, commit, branch or working-tree path does not exist."""


class InvalidOperand(GitletError):
    """Semantically invalid command arguments."""


class ObjectMissing(NotFound, KeyError):
    """Indicates that a requested object is missing from the object store."""

    def __init__(self, sha: bytes) -> None:
        """Initialize an ObjectMissing exception.

        Args:
            sha: The hex SHA of the missing object.
        """
        self.sha = sha
        GitletError.__init__(self, f"{sha.decode('ascii')} is not in the object store")

    def __str__(self) -> str:
        return self.args[0]


class CommitNotFound(NotFound, InvalidOperand):
    """No commit matches the given id.

    An id that matches nothing is also an invalid operand, so callers may
    catch either base.
    """

    def __init__(self, sha: bytes | None = None) -> None:
        self.sha = sha
        super().__init__("No commit with that id exists.")


class BranchNotFound(NotFound):
    """The named branch does not exist."""

    def __init__(self, name: bytes, msg: str = "No such branch exists.") -> None:
        self.name = name
        super().__init__(msg)


class PathNotInCommit(NotFound):
    """The requested path is not tracked by the commit."""

    def __init__(self, path: bytes) -> None:
        self.path = path
        super().__init__("File does not exist in that commit.")


class FileNotInWorkingTree(NotFound):
    """The requested file does not exist in the working tree."""

    def __init__(self, path: bytes) -> None:
        self.path = path
        super().__init__("File does not exist.")


class MessageNotFound(NotFound):
    """No commit carries the requested message."""

    def __init__(self, message: bytes) -> None:
        self.commit_message = message
        super().__init__("Found no commit with that message.")


class AmbiguousCommitId(InvalidOperand):
    """An abbreviated commit id matches more than one commit."""

    def __init__(self, prefix: bytes, matches: list[bytes]) -> None:
        self.prefix = prefix
        self.matches = matches
        super().__init__(
            f"Commit id {prefix.decode('ascii')} is ambiguous "
            f"({len(matches)} matches)."
        )


class InvalidBranchName(InvalidOperand):
    """A branch name is not acceptable as a reference name."""

    def __init__(self, name: bytes) -> None:
        self.name = name
        super().__init__(f"Invalid branch name: {name.decode('utf-8', 'replace')}")


class PreconditionFailed(GitletError):
    """An operation-specific guard failed before anything was changed."""


class UncommittedChanges(PreconditionFailed):
    """The staging index is not clean."""

    def __init__(self) -> None:
        super().__init__("You have uncommitted changes.")


class SelfMerge(PreconditionFailed):
    """Attempt to merge a branch with itself."""

    def __init__(self) -> None:
        super().__init__("Cannot merge a branch with itself.")


class AlreadyAncestor(PreconditionFailed):
    """The given branch is already merged into the current one."""

    def __init__(self) -> None:
        super().__init__("Given branch is an ancestor of the current branch.")


class UntrackedObstruction(PreconditionFailed):
    """An untracked working-tree file would be overwritten."""

    def __init__(self, paths: list[bytes]) -> None:
        self.paths = paths
        super().__init__(
            "There is an untracked file in the way; "
            "delete it, or add and commit it first."
        )


class NoOpCheckout(PreconditionFailed):
    """Checking out the branch that is already active."""

    def __init__(self) -> None:
        super().__init__("No need to checkout the current branch.")


class NothingToCommit(PreconditionFailed):
    """The staging index is clean."""

    def __init__(self) -> None:
        super().__init__("No changes added to the commit.")


class NothingToRemove(PreconditionFailed):
    """The path is neither staged nor tracked."""

    def __init__(self, path: bytes) -> None:
        self.path = path
        super().__init__("No reason to remove the file.")


class RemoveActiveBranch(PreconditionFailed):
    """Attempt to delete the active branch."""

    def __init__(self, name: bytes) -> None:
        self.name = name
        super().__init__("Cannot remove the current branch.")


class BranchExists(PreconditionFailed):
    """A branch with the given name already exists."""

    def __init__(self, name: bytes) -> None:
        self.name = name
        super().__init__("A branch with that name already exists.")


class RepositoryExists(PreconditionFailed):
    """A repository already exists at the given location."""

    def __init__(self) -> None:
        super().__init__(
            "A Gitlet version-control system already exists "
            "in the current directory."
        )


class NotGitletRepository(GitletError):
    """Indicates that no gitlet repository was found."""

    def __init__(self, path: str | None = None) -> None:
        self.path = path
        super().__init__("Not in an initialized Gitlet directory.")


class CorruptRepository(GitletError):
    """Persisted state is inconsistent, e.g. a reference to a missing commit."""


class ObjectFormatException(CorruptRepository):
    """Indicates an error parsing an object."""
