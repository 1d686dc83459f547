"""Shared fixtures for pathglob tests."""

import pytest
from click.testing import CliRunner
from dulwich.index import commit_tree
from dulwich.objects import Blob, Commit, Tag
from dulwich.repo import Repo

from pathglob import DiskFileSystem

IDENTITY = b"pathglob <pathglob@localhost>"


def _write_files(root, files):
    for rel, data in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(data)


class RecordingFS:
    """Wrap a FileSystem and record every call made to it."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def list(self, root, relative_dir, path_type):
        self.calls.append(("list", root, relative_dir, path_type))
        return self.inner.list(root, relative_dir, path_type)

    def exists(self, root, relative_path, path_type):
        self.calls.append(("exists", root, relative_path, path_type))
        return self.inner.exists(root, relative_path, path_type)

    def is_directory(self, root, relative_path, path_type):
        self.calls.append(("is_directory", root, relative_path, path_type))
        return self.inner.is_directory(root, relative_path, path_type)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def addon_tree(tmp_path):
    """A directory tree on disk for glob testing.

    Tree (under tmp_path):
        my-addon/config/module1/{something.lua, else.lua}
        my-addon/config/module2/{something.lua, else.lua}
        my-addon/init.lua, my-addon/readme.txt
        a/b, a/x/y/b, a/xb, a/x/notes.txt
        data              (a file)
        classes/{a, b, c, d, ], x.y}
    """
    _write_files(tmp_path, {
        "my-addon/config/module1/something.lua": "-- 1",
        "my-addon/config/module1/else.lua": "-- 1",
        "my-addon/config/module2/something.lua": "-- 2",
        "my-addon/config/module2/else.lua": "-- 2",
        "my-addon/init.lua": "-- init",
        "my-addon/readme.txt": "readme",
        "a/b": "b",
        "a/x/y/b": "deep b",
        "a/xb": "xb",
        "a/x/notes.txt": "notes",
        "data": "data",
        "classes/a": "",
        "classes/b": "",
        "classes/c": "",
        "classes/d": "",
        "classes/]": "",
        "classes/x.y": "",
    })
    return tmp_path


@pytest.fixture
def disk_fs(addon_tree):
    return DiskFileSystem(addon_tree)


@pytest.fixture
def recording_fs(disk_fs):
    return RecordingFS(disk_fs)


def _commit(repo, files, message):
    blobs = []
    for name, data in files.items():
        blob = Blob.from_string(data)
        repo.object_store.add_object(blob)
        path = name if isinstance(name, bytes) else name.encode()
        blobs.append((path, blob.id, 0o100644))
    tree_id = commit_tree(repo.object_store, blobs)
    c = Commit()
    c.tree = tree_id
    c.author = c.committer = IDENTITY
    c.author_time = c.commit_time = 0
    c.author_timezone = c.commit_timezone = 0
    c.message = message.encode() + b"\n"
    repo.object_store.add_object(c)
    return c


@pytest.fixture
def git_repo(tmp_path):
    """A bare git repository with two branches and an annotated tag.

    ``main`` (also HEAD and tag ``v1``):
        readme.txt, src/main.py, src/util.py, src/sub/deep.txt, docs/guide.md
    ``old``:
        readme.txt, legacy/main.py
    """
    path = tmp_path / "test.git"
    repo = Repo.init_bare(str(path), mkdir=True)

    main = _commit(repo, {
        "readme.txt": b"readme",
        "src/main.py": b"main",
        "src/util.py": b"util",
        "src/sub/deep.txt": b"deep",
        "docs/guide.md": b"guide",
    }, "main")
    repo.refs[b"refs/heads/main"] = main.id
    repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")

    old = _commit(repo, {
        "readme.txt": b"old readme",
        "legacy/main.py": b"legacy",
    }, "old")
    repo.refs[b"refs/heads/old"] = old.id

    tag = Tag()
    tag.name = b"v1"
    tag.object = (Commit, main.id)
    tag.tagger = IDENTITY
    tag.tag_time = 0
    tag.tag_timezone = 0
    tag.message = b"v1\n"
    repo.object_store.add_object(tag)
    repo.refs[b"refs/tags/v1"] = tag.id

    repo.close()
    return path


@pytest.fixture
def latin1_repo(tmp_path):
    """A bare git repository whose HEAD tree holds a non-UTF-8 file name.

    Tree: ``caf\\xe9.txt`` (Latin-1 bytes), ok.txt, d\\xe9p/inner.txt
    """
    path = tmp_path / "latin1.git"
    repo = Repo.init_bare(str(path), mkdir=True)
    c = _commit(repo, {
        b"caf\xe9.txt": b"cafe",
        b"ok.txt": b"ok",
        b"d\xe9p/inner.txt": b"inner",
    }, "latin-1 names")
    repo.refs[b"refs/heads/main"] = c.id
    repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")
    repo.close()
    return path
