"""pathglob CLI: expand glob patterns against a directory or a git revision."""

from __future__ import annotations

import json
import logging

import click
from dulwich.errors import NotGitRepository

from ._compile import compile as compile_pattern
from ._walk import EntryKind, glob as glob_pattern
from .exceptions import InvalidInputError, PatternCompileError
from .fs import DiskFileSystem, FileSystem, GitTreeFileSystem

_log_handler: logging.Handler | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _configure_logging(verbose: bool) -> None:
    """Route pathglob's debug logging to stderr when verbose."""
    global _log_handler
    logger = logging.getLogger("pathglob")
    if _log_handler is not None:
        logger.removeHandler(_log_handler)
        _log_handler = None
    if not verbose:
        return
    _log_handler = logging.StreamHandler(click.get_text_stream("stderr"))
    _log_handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(_log_handler)
    logger.setLevel(logging.DEBUG)


def _store_repo(ctx, param, value):
    """Click callback: store --repo value in the context."""
    ctx.ensure_object(dict)
    if value is not None:
        ctx.obj["repo_path"] = value
    return value


def _parse_namespaces(ctx, param, value) -> dict[str, str]:
    """Click callback: turn repeated NAME=DIR values into a dict."""
    namespaces: dict[str, str] = {}
    for item in value:
        name, sep, directory = item.partition("=")
        if not sep or not directory:
            raise click.BadParameter(f"expected NAME=DIR, got {item!r}")
        namespaces[name] = directory
    return namespaces


def _format_option(f):
    """Shared --format option for commands with machine-readable output."""
    return click.option(
        "--format", "fmt", type=click.Choice(["text", "json"]), default="text",
        show_default=True, help="Output format.",
    )(f)


def _open_fs(ctx) -> FileSystem:
    """Build the filesystem collaborator selected by the group options."""
    repo_path = ctx.obj.get("repo_path")
    if repo_path:
        try:
            fs = GitTreeFileSystem(repo_path)
        except NotGitRepository:
            raise click.ClickException(f"Not a git repository: {repo_path}")
        ctx.call_on_close(fs.close)
        _status(ctx, f"Reading git repository {repo_path}")
        return fs
    namespaces = ctx.obj.get("namespaces")
    if namespaces:
        _status(ctx, f"Namespaces: {', '.join(sorted(namespaces))}")
        return DiskFileSystem(namespaces=namespaces)
    return DiskFileSystem(ctx.obj.get("base", "."))


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--repo", "-r", type=click.Path(), envvar="PATHGLOB_REPO",
              help="Glob inside a git repository (or set PATHGLOB_REPO).",
              expose_value=False, callback=_store_repo, is_eager=True)
@click.option("--base", type=click.Path(file_okay=False), envvar="PATHGLOB_BASE",
              default=".", show_default=True,
              help="Base directory on disk (or set PATHGLOB_BASE).")
@click.option("--namespace", "-n", "namespaces", multiple=True, metavar="NAME=DIR",
              callback=_parse_namespaces,
              help="Map a path type to a directory. Repeatable; overrides --base.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, base, namespaces, verbose):
    """pathglob: shell-style glob matching with globstar.

    Expands '*', '?', '[...]' and a standalone '**' against a directory
    tree on disk, or against a revision of a git repository.

    \b
    Examples:
      pathglob glob '**/*.lua' --root my-addon/config
      pathglob -r data.git glob 'docs/*.md' --type v1.0
      pathglob -n lua=addons/lua glob '*/init.lua' --type lua
      pathglob compile 'a/**/[!._]*.txt'
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["base"] = base
    ctx.obj["namespaces"] = namespaces
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@main.command("glob")
@click.argument("pattern")
@click.option("--root", "root_path", default="",
              help="Directory the pattern is resolved against.")
@click.option("--type", "-t", "path_type", envvar="PATHGLOB_TYPE", default=None,
              help="Path type: a namespace name, or a git revision with --repo "
                   "(default: HEAD).")
@click.option("--files-only", "kind", flag_value=EntryKind.FILE.value,
              help="Only print files.")
@click.option("--dirs-only", "kind", flag_value=EntryKind.DIR.value,
              help="Only print directories.")
@_format_option
@click.pass_context
def glob_cmd(ctx, pattern, root_path, path_type, kind, fmt):
    """Print the entries matching PATTERN.

    Quote the pattern to prevent shell expansion.  Text output is one
    '<kind><TAB><path>' line per match, sorted by path.
    """
    fs = _open_fs(ctx)
    if path_type is None:
        path_type = "HEAD" if ctx.obj.get("repo_path") else ""
    try:
        results = glob_pattern(path_type, pattern, root_path, fs=fs)
    except (PatternCompileError, InvalidInputError) as exc:
        raise click.ClickException(str(exc))

    matches = sorted(
        (path, entry_kind) for path, entry_kind in results.items()
        if kind is None or entry_kind.value == kind
    )
    _status(ctx, f"{len(matches)} match(es) for {pattern!r}")

    if fmt == "json":
        click.echo(json.dumps({path: str(k) for path, k in matches}, indent=2))
        return
    for path, entry_kind in matches:
        click.echo(f"{entry_kind}\t{path}")


@main.command("compile")
@click.argument("pattern")
@_format_option
def compile_cmd(pattern, fmt):
    """Show the segment chain PATTERN compiles to."""
    try:
        chain = compile_pattern(pattern)
    except PatternCompileError as exc:
        raise click.ClickException(str(exc))

    if fmt == "json":
        click.echo(json.dumps([seg._asdict() for seg in chain], indent=2))
        return
    for i, seg in enumerate(chain):
        kind = "globstar" if seg.is_globstar else seg.kind
        click.echo(f"{i}\t{kind}\t{seg.value}")
