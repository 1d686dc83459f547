"""Filesystem collaborators consumed by the glob walker.

The walker never touches the disk itself; it asks a :class:`FileSystem`
three questions (list a directory, does a path exist, is it a directory),
each parameterized by an opaque *path_type* tag that selects a namespace
and a *root* the relative path is resolved against.

Two implementations ship with the package:

* :class:`DiskFileSystem` maps *path_type* to a base directory on disk.
* :class:`GitTreeFileSystem` maps *path_type* to a revision of a git
  repository and reads trees through dulwich.

Both treat every lookup failure as a soft negative: ``None`` from
:meth:`~FileSystem.list`, ``False`` from the predicates.
"""

from __future__ import annotations

import logging
import os
import re
import stat
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from dulwich.objects import Commit, Tag, Tree
from dulwich.repo import Repo

from ._compile import join_path

logger = logging.getLogger(__name__)

_HEX_SHA_RE = re.compile(r"[0-9a-fA-F]{40}")


class FileSystem(Protocol):
    """The three operations the glob walker needs from a filesystem."""

    def list(
        self, root: str, relative_dir: str, path_type: str
    ) -> tuple[list[str], list[str]] | None:
        """Return ``(file_names, dir_names)`` of a directory, or ``None``."""
        ...

    def exists(self, root: str, relative_path: str, path_type: str) -> bool:
        ...

    def is_directory(self, root: str, relative_path: str, path_type: str) -> bool:
        ...


class DiskFileSystem:
    """A :class:`FileSystem` over the local disk.

    Args:
        base: Directory every namespace resolves to when *namespaces* is
            not given (default: the current directory).
        namespaces: Optional mapping of *path_type* tag to base directory.
            When given, an unknown tag behaves like an empty namespace.
    """

    def __init__(
        self,
        base: str | os.PathLike[str] = ".",
        namespaces: Mapping[str, str | os.PathLike[str]] | None = None,
    ):
        self._base = Path(base)
        self._namespaces = (
            None if namespaces is None
            else {tag: Path(p) for tag, p in namespaces.items()}
        )

    def __repr__(self) -> str:
        if self._namespaces is None:
            return f"DiskFileSystem({str(self._base)!r})"
        return f"DiskFileSystem(namespaces={sorted(self._namespaces)!r})"

    def _resolve(self, root: str, relative_path: str, path_type: str) -> Path | None:
        if self._namespaces is None:
            base = self._base
        else:
            base = self._namespaces.get(path_type)
            if base is None:
                logger.debug("unknown namespace %r", path_type)
                return None
        rel = join_path(root, relative_path)
        return base / rel if rel else base

    def list(self, root, relative_dir, path_type):
        path = self._resolve(root, relative_dir, path_type)
        if path is None:
            return None
        files: list[str] = []
        dirs: list[str] = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        is_dir = entry.is_dir()
                    except OSError:
                        is_dir = False
                    (dirs if is_dir else files).append(entry.name)
        except (FileNotFoundError, NotADirectoryError, PermissionError):
            return None
        except OSError as exc:
            logger.debug("cannot list %s: %s", path, exc)
            return None
        files.sort()
        dirs.sort()
        return files, dirs

    def exists(self, root, relative_path, path_type):
        path = self._resolve(root, relative_path, path_type)
        return path is not None and path.exists()

    def is_directory(self, root, relative_path, path_type):
        path = self._resolve(root, relative_path, path_type)
        return path is not None and path.is_dir()


class GitTreeFileSystem:
    """A read-only :class:`FileSystem` over the trees of a git repository.

    *path_type* names the revision to read: ``HEAD``, a branch or tag
    name, a full ref name (``refs/...``), or a 40-character commit/tree
    id.  Annotated tags are peeled.  Submodule entries count as files.

    Args:
        repo: Path to a (bare or non-bare) repository, or an open
            :class:`dulwich.repo.Repo`.
    """

    def __init__(self, repo: str | os.PathLike[str] | Repo):
        if isinstance(repo, Repo):
            self._repo = repo
        else:
            self._repo = Repo(os.fspath(repo))

    def __repr__(self) -> str:
        return f"GitTreeFileSystem({self._repo.path!r})"

    def close(self) -> None:
        """Release the underlying repository handles."""
        self._repo.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _revision_sha(self, revision: str) -> bytes | None:
        refs = self._repo.refs
        if revision == "HEAD" or revision.startswith("refs/"):
            candidates = [revision]
        else:
            candidates = [f"refs/heads/{revision}", f"refs/tags/{revision}"]
        for name in candidates:
            try:
                return refs[name.encode()]
            except KeyError:
                continue
        if _HEX_SHA_RE.fullmatch(revision):
            return revision.lower().encode()
        return None

    def _root_tree(self, revision: str) -> Tree | None:
        sha = self._revision_sha(revision or "HEAD")
        if sha is None:
            logger.debug("unresolvable revision %r", revision)
            return None
        try:
            obj = self._repo[sha]
            while isinstance(obj, Tag):
                _type, sha = obj.object
                obj = self._repo[sha]
            if isinstance(obj, Commit):
                obj = self._repo[obj.tree]
        except (KeyError, ValueError):
            logger.debug("revision %r points at a missing object", revision)
            return None
        return obj if isinstance(obj, Tree) else None

    def _entry(self, root: str, relative_path: str, path_type: str) -> tuple[int, bytes] | None:
        """Return ``(mode, sha)`` at the joined path; the root tree has tree mode."""
        tree = self._root_tree(path_type)
        if tree is None:
            return None
        path = join_path(root, relative_path)
        if not path:
            return (stat.S_IFDIR, tree.id)
        segments = path.split("/")
        for i, seg in enumerate(segments):
            try:
                mode, sha = tree[seg.encode(errors="surrogateescape")]
            except KeyError:
                return None
            if i == len(segments) - 1:
                return (mode, sha)
            if not stat.S_ISDIR(mode):
                return None
            tree = self._repo[sha]
        return None

    def list(self, root, relative_dir, path_type):
        entry = self._entry(root, relative_dir, path_type)
        if entry is None or not stat.S_ISDIR(entry[0]):
            return None
        files: list[str] = []
        dirs: list[str] = []
        for item in self._repo[entry[1]].iteritems():
            name = item.path.decode(errors="surrogateescape")
            (dirs if stat.S_ISDIR(item.mode) else files).append(name)
        return files, dirs

    def exists(self, root, relative_path, path_type):
        return self._entry(root, relative_path, path_type) is not None

    def is_directory(self, root, relative_path, path_type):
        entry = self._entry(root, relative_path, path_type)
        return entry is not None and stat.S_ISDIR(entry[0])
