from ._compile import Segment, SegmentChain, compile, has_magic, join_path, translate_portion
from ._walk import EntryKind, glob, scan_dir
from .exceptions import InvalidInputError, PatternCompileError
from .fs import DiskFileSystem, FileSystem, GitTreeFileSystem

__version__ = "1.0.0"

join = join_path

__all__ = [
    "compile", "glob", "join_path", "join", "scan_dir", "has_magic", "translate_portion",
    "Segment", "SegmentChain", "EntryKind",
    "FileSystem", "DiskFileSystem", "GitTreeFileSystem",
    "PatternCompileError", "InvalidInputError",
]
