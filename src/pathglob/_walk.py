"""Walk a filesystem collaborator against a compiled :class:`SegmentChain`."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from ._compile import LITERAL, SegmentChain, compile, has_magic, join_path
from .exceptions import InvalidInputError
from .fs import DiskFileSystem, FileSystem

logger = logging.getLogger(__name__)


class EntryKind(str, Enum):
    """Kind of a matched entry: ``FILE`` or ``DIR``."""
    FILE = "file"
    DIR = "dir"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class _WalkContext:
    """Per-call state threaded unchanged through the recursion."""
    fs: FileSystem
    path_type: str
    root_path: str
    chain: SegmentChain


def _classify(fs: FileSystem, root: str, path: str, path_type: str) -> EntryKind:
    return EntryKind.DIR if fs.is_directory(root, path, path_type) else EntryKind.FILE


def _scan_dir(
    fs: FileSystem,
    path_type: str,
    root_path: str,
    relative_path: str,
    recursive: bool,
    results: dict[str, EntryKind],
) -> None:
    listing = fs.list(root_path, relative_path, path_type)
    # An invalid directory lists as nothing
    if listing is None:
        return
    file_names, dir_names = listing

    for name in file_names:
        results[join_path(relative_path, name)] = EntryKind.FILE

    for name in dir_names:
        sub_path = join_path(relative_path, name)
        results[sub_path] = EntryKind.DIR
        if recursive:
            _scan_dir(fs, path_type, root_path, sub_path, True, results)


def scan_dir(
    fs: FileSystem, path_type: str, root_path: str, recursive: bool = False
) -> dict[str, EntryKind]:
    """List the entries under *root_path* as ``{relative_path: kind}``.

    With *recursive*, every subdirectory is descended without a depth
    limit and the mapping holds descendants at every level.
    """
    results: dict[str, EntryKind] = {}
    _scan_dir(fs, path_type, root_path, "", recursive, results)
    return results


def _glob(
    ctx: _WalkContext, relative_path: str, index: int, results: dict[str, EntryKind]
) -> None:
    """Resolve chain segment *index* below *relative_path* into *results*."""
    fs, path_type, root_path = ctx.fs, ctx.path_type, ctx.root_path
    part = ctx.chain[index]

    if part.kind == LITERAL:
        candidate = join_path(relative_path, part.value)
        if not fs.exists(root_path, candidate, path_type):
            logger.debug("pruned %r: does not exist", candidate)
            return
        if part.next is not None:
            _glob(ctx, candidate, part.next, results)
            return
        results[candidate] = _classify(fs, root_path, candidate, path_type)
        return

    scan_root = join_path(root_path, relative_path)

    if part.is_globstar:
        # Match every descendant against the rest of the chain in one go
        entries = scan_dir(fs, path_type, scan_root, recursive=True)
        pattern = re.compile(ctx.chain.tail_regex(index))
        for name, kind in entries.items():
            if pattern.fullmatch(name):
                results[join_path(relative_path, name)] = kind
        return

    entries = scan_dir(fs, path_type, scan_root)
    pattern = re.compile(part.value)

    if part.next is not None:
        for name, kind in entries.items():
            # Only directories can continue a multi-segment path
            if kind is not EntryKind.DIR:
                continue
            if pattern.fullmatch(name):
                _glob(ctx, join_path(relative_path, name), part.next, results)
        return

    for name, kind in entries.items():
        if pattern.fullmatch(name):
            results[join_path(relative_path, name)] = kind


def glob(
    path_type: str,
    pattern: str,
    root_path: str | None = "",
    *,
    fs: FileSystem | None = None,
) -> dict[str, EntryKind]:
    """Expand a glob *pattern* beneath *root_path*.

    Supports ``*``, ``?``, ``[...]`` (``!``/``^`` negation) and a
    standalone ``**`` portion matching zero or more directories.

    Args:
        path_type: Opaque namespace tag handed to *fs* on every call.
        pattern: The glob pattern, ``/``-separated.
        root_path: Directory the pattern is resolved against (default:
            the namespace root).
        fs: Filesystem collaborator (default: :class:`DiskFileSystem`
            over the current directory).

    Returns:
        Unordered mapping of matched path (relative to *root_path*) to
        :class:`EntryKind`.  Unreadable or missing directories simply
        contribute nothing.

    Raises:
        InvalidInputError: If *pattern* is empty.
        PatternCompileError: If *pattern* is malformed.
    """
    if not pattern:
        raise InvalidInputError("Pattern must not be empty")
    if root_path is None:
        root_path = ""
    if fs is None:
        fs = DiskFileSystem()

    results: dict[str, EntryKind] = {}

    if not has_magic(pattern):
        # Nothing to expand: a single existence check
        path = join_path(*pattern.split("/"))
        if path and fs.exists(root_path, path, path_type):
            results[path] = _classify(fs, root_path, path, path_type)
        return results

    chain = compile(pattern)
    ctx = _WalkContext(fs, path_type, root_path, chain)
    _glob(ctx, "", 0, results)
    return results
