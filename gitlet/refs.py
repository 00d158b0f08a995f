# refs.py -- For dealing with branch references
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


"""Ref handling.

Branch heads live under ``refs/heads/``. ``HEAD`` is always a symbolic
reference naming the active branch.
"""

__all__ = [
    "HEADREF",
    "LOCAL_BRANCH_PREFIX",
    "SYMREF",
    "DictRefsContainer",
    "DiskRefsContainer",
    "RefsContainer",
    "SymrefLoop",
    "check_ref_format",
    "extract_branch_name",
    "local_branch_name",
    "parse_symref_value",
]

import logging
import os
import posixpath
from collections.abc import Mapping

from .errors import InvalidBranchName
from .file import GitFile, ensure_dir_exists
from .objects import ZERO_SHA, ObjectID, valid_hexsha

logger = logging.getLogger(__name__)

Ref = bytes

HEADREF = b"HEAD"
SYMREF = b"ref: "
LOCAL_BRANCH_PREFIX = b"refs/heads/"
BAD_REF_CHARS = set(b"\177 ~^:?*[")
BAD_REF_SEQUENCES = (b"..", b"//", b"/.", b"@{", b"\\")
MAX_SYMREF_DEPTH = 5


class SymrefLoop(Exception):
    """There is a loop between one or more symrefs."""

    def __init__(self, ref: bytes, depth: int) -> None:
        self.ref = ref
        self.depth = depth
        super().__init__(ref, depth)


def parse_symref_value(contents: bytes) -> bytes:
    """Return the target of a ``ref: <target>`` value.

    Raises:
      ValueError: if contents is not a symbolic ref
    """
    if not contents.startswith(SYMREF):
        raise ValueError(contents)
    return contents[len(SYMREF) :].rstrip(b"\r\n")


def check_ref_format(refname: Ref) -> bool:
    """Check whether refname is a well-formed ref name.

    These are the git-check-ref-format rules that matter for branches: at
    least two components, no component starting with a dot, no control
    characters, none of ``~^:?*[`` or space, and no ``.lock`` suffix.
    """
    if b"/" not in refname or refname.startswith(b"."):
        return False
    if any(seq in refname for seq in BAD_REF_SEQUENCES):
        return False
    if refname.endswith((b"/", b".", b".lock")):
        return False
    return not any(c < 0o40 or c in BAD_REF_CHARS for c in refname)


def local_branch_name(name: bytes) -> Ref:
    """Build the full ref name of a branch.

    Args:
      name: Short branch name, e.g. b"master"
    Raises:
      InvalidBranchName: if the result is not a well-formed ref name
    """
    name = name.removeprefix(LOCAL_BRANCH_PREFIX)
    if not name or name.startswith(b"-") or name == HEADREF:
        raise InvalidBranchName(name)
    ref = LOCAL_BRANCH_PREFIX + name
    if not check_ref_format(ref):
        raise InvalidBranchName(name)
    return ref


def extract_branch_name(ref: Ref) -> bytes:
    """Extract branch name from a full branch ref.

    Raises:
      ValueError: if ref is not a local branch ref
    """
    if not ref.startswith(LOCAL_BRANCH_PREFIX):
        raise ValueError(f"Not a local branch ref: {ref!r}")
    return ref[len(LOCAL_BRANCH_PREFIX) :]


class RefsContainer:
    """A container for refs."""

    def set_symbolic_ref(self, name: Ref, other: Ref) -> None:
        """Make a ref point at another ref."""
        raise NotImplementedError(self.set_symbolic_ref)

    def subkeys(self, base: bytes) -> set[bytes]:
        """Return the names of the refs under base, with base stripped."""
        raise NotImplementedError(self.subkeys)

    def read_loose_ref(self, name: Ref) -> bytes | None:
        """Return the raw value of a ref, or None if it does not exist.

        Symbolic refs are returned as ``ref: <target>``.
        """
        raise NotImplementedError(self.read_loose_ref)

    def _check_refname(self, name: Ref) -> None:
        """Ensure name is HEAD or a well-formed ref under refs/.

        Raises:
          KeyError: if it is not
        """
        if name == HEADREF:
            return
        if not name.startswith(b"refs/") or not check_ref_format(name[5:]):
            raise KeyError(name)

    def _check_sha(self, sha: bytes) -> None:
        if not valid_hexsha(sha) or sha == ZERO_SHA:
            raise ValueError(f"invalid commit id {sha!r}")

    def follow(self, name: Ref) -> tuple[list[Ref], ObjectID | None]:
        """Follow a chain of symbolic refs.

        Returns: a tuple of (refnames, sha), where refnames lists every ref
          visited, name first; sha is None if the last one does not exist
        Raises:
          SymrefLoop: if the chain is longer than MAX_SYMREF_DEPTH
        """
        refnames = [name]
        contents = self.read_loose_ref(name)
        while contents is not None and contents.startswith(SYMREF):
            if len(refnames) > MAX_SYMREF_DEPTH:
                raise SymrefLoop(name, len(refnames))
            target = parse_symref_value(contents)
            refnames.append(target)
            contents = self.read_loose_ref(target)
        return refnames, contents

    def __contains__(self, refname: object) -> bool:
        if not isinstance(refname, bytes):
            return False
        return self.read_loose_ref(refname) is not None

    def __getitem__(self, name: Ref) -> ObjectID:
        """Return the commit id a ref resolves to, following symbolic refs."""
        _, sha = self.follow(name)
        if sha is None:
            raise KeyError(name)
        return sha

    def set_if_equals(self, name: Ref, old_ref: bytes | None, new_ref: bytes) -> bool:
        """Compare-and-swap the ref that name resolves to.

        Args:
          name: The refname to set; symbolic refs are followed
          old_ref: The id the ref must currently hold, or None to set
            unconditionally; a missing ref counts as ZERO_SHA
          new_ref: The new commit id
        Returns: True if the ref was set
        """
        raise NotImplementedError(self.set_if_equals)

    def add_if_new(self, name: Ref, ref: ObjectID) -> bool:
        """Create a ref, unless it already exists.

        Returns: True if the ref was created
        """
        raise NotImplementedError(self.add_if_new)

    def __setitem__(self, name: Ref, ref: ObjectID) -> None:
        self.set_if_equals(name, None, ref)

    def remove_if_equals(self, name: Ref, old_ref: bytes | None) -> bool:
        """Delete a ref if it holds old_ref (or unconditionally for None).

        Symbolic refs are not followed.

        Returns: True if the ref was deleted
        """
        raise NotImplementedError(self.remove_if_equals)

    def __delitem__(self, name: Ref) -> None:
        self.remove_if_equals(name, None)

    # Branch-level helpers used by the repository.

    def branch_names(self) -> list[bytes]:
        """Return the short names of all branches, sorted."""
        return sorted(self.subkeys(LOCAL_BRANCH_PREFIX))

    def get_branch(self, name: bytes) -> ObjectID:
        """Return the head commit id of a branch.

        Raises:
          KeyError: if the branch does not exist
        """
        try:
            return self[local_branch_name(name)]
        except InvalidBranchName:
            raise KeyError(name) from None

    def has_branch(self, name: bytes) -> bool:
        try:
            return local_branch_name(name) in self
        except InvalidBranchName:
            return False

    def active_branch(self) -> bytes:
        """Return the short name of the active branch.

        Raises:
          KeyError: if HEAD is missing or does not name a branch
        """
        contents = self.read_loose_ref(HEADREF)
        if contents is None:
            raise KeyError(HEADREF)
        try:
            return extract_branch_name(parse_symref_value(contents))
        except ValueError:
            raise KeyError(HEADREF) from None

    def set_active_branch(self, name: bytes) -> None:
        """Point HEAD at the given branch."""
        self.set_symbolic_ref(HEADREF, local_branch_name(name))
        logger.debug("active branch is now %r", name)


class DictRefsContainer(RefsContainer):
    """RefsContainer backed by a dict, for in-memory repositories."""

    def __init__(self, refs: Mapping[Ref, bytes] | None = None) -> None:
        self._refs: dict[Ref, bytes] = dict(refs or {})

    def subkeys(self, base: bytes) -> set[bytes]:
        base = base.rstrip(b"/") + b"/"
        return {name[len(base) :] for name in self._refs if name.startswith(base)}

    def read_loose_ref(self, name: Ref) -> bytes | None:
        return self._refs.get(name)

    def set_symbolic_ref(self, name: Ref, other: Ref) -> None:
        self._check_refname(name)
        self._check_refname(other)
        self._refs[name] = SYMREF + other

    def set_if_equals(self, name: Ref, old_ref: bytes | None, new_ref: bytes) -> bool:
        self._check_sha(new_ref)
        realnames, current = self.follow(name)
        if old_ref is not None and (current or ZERO_SHA) != old_ref:
            return False
        self._check_refname(realnames[-1])
        self._refs[realnames[-1]] = new_ref
        logger.debug("set %r to %r", realnames[-1], new_ref)
        return True

    def add_if_new(self, name: Ref, ref: ObjectID) -> bool:
        self._check_sha(ref)
        self._check_refname(name)
        if name in self._refs:
            return False
        self._refs[name] = ref
        return True

    def remove_if_equals(self, name: Ref, old_ref: bytes | None) -> bool:
        current = self._refs.get(name)
        if current is None or (old_ref is not None and current != old_ref):
            return False
        del self._refs[name]
        return True


class DiskRefsContainer(RefsContainer):
    """Refs stored as one file per ref under a control directory.

    Every write goes through the lock-file protocol, so a concurrent writer
    fails with FileLocked instead of clobbering the ref.
    """

    def __init__(self, path: str | bytes | os.PathLike[str]) -> None:
        self.path = os.fsencode(os.fspath(path))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r})"

    def refpath(self, name: bytes) -> bytes:
        """Return the disk path of a ref."""
        return os.path.join(self.path, *name.split(b"/"))

    def subkeys(self, base: bytes) -> set[bytes]:
        base = base.rstrip(b"/")
        top = self.refpath(base)
        ret = set()
        for root, _dirs, files in os.walk(top):
            reldir = os.path.relpath(root, top)
            if reldir == os.fsencode(os.curdir):
                prefix = b""
            else:
                prefix = reldir.replace(os.fsencode(os.path.sep), b"/") + b"/"
            for filename in files:
                if check_ref_format(base + b"/" + prefix + filename):
                    ret.add(prefix + filename)
        return ret

    def read_loose_ref(self, name: bytes) -> bytes | None:
        """Read the first line of a ref file.

        Returns: ``ref: <target>`` for a symbolic ref, the commit id
          otherwise, or None if the file is missing or empty
        """
        try:
            with GitFile(self.refpath(name), "rb") as f:
                contents = f.readline().rstrip(b"\r\n")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return None
        if contents.startswith(SYMREF):
            return contents
        return contents[:40] or None

    def set_symbolic_ref(self, name: bytes, other: bytes) -> None:
        self._check_refname(name)
        self._check_refname(other)
        with GitFile(self.refpath(name), "wb") as f:
            f.write(SYMREF + other + b"\n")

    def set_if_equals(self, name: bytes, old_ref: bytes | None, new_ref: bytes) -> bool:
        self._check_refname(name)
        self._check_sha(new_ref)
        try:
            realname = self.follow(name)[0][-1]
        except SymrefLoop:
            realname = name
        filename = self.refpath(realname)
        ensure_dir_exists(os.path.dirname(filename))
        with GitFile(filename, "wb") as f:
            # Compare again now that the lock is held.
            current = self.read_loose_ref(realname) or ZERO_SHA
            if old_ref is not None and current != old_ref:
                f.abort()
                return False
            f.write(new_ref + b"\n")
        logger.debug("set %r to %r", realname, new_ref)
        return True

    def add_if_new(self, name: bytes, ref: bytes) -> bool:
        self._check_refname(name)
        self._check_sha(ref)
        filename = self.refpath(name)
        ensure_dir_exists(os.path.dirname(filename))
        with GitFile(filename, "wb") as f:
            if os.path.exists(filename):
                f.abort()
                return False
            f.write(ref + b"\n")
        logger.debug("created %r at %r", name, ref)
        return True

    def remove_if_equals(self, name: bytes, old_ref: bytes | None) -> bool:
        self._check_refname(name)
        if self.read_loose_ref(name) is None:
            return False
        filename = self.refpath(name)
        lock = GitFile(filename, "wb")
        try:
            current = self.read_loose_ref(name)
            if current is None or (old_ref is not None and current != old_ref):
                return False
            os.remove(filename)
        finally:
            # Only the lock was wanted; the ref itself is never rewritten.
            lock.abort()
        self._prune_empty_dirs(posixpath.dirname(name))
        logger.debug("removed %r", name)
        return True

    def _prune_empty_dirs(self, dirname: bytes) -> None:
        # refs/heads itself always stays.
        while dirname.count(b"/") > 1:
            try:
                os.rmdir(self.refpath(dirname))
            except OSError:
                return
            dirname = posixpath.dirname(dirname)
