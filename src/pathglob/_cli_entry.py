"""Console-script entry point for ``pathglob``.

Runs the click command group from :mod:`pathglob.cli` (``pathglob glob``,
``pathglob compile``).  click ships in the ``cli`` extra, so a bare
library install exits with an install hint instead of a traceback.
"""

import sys


def main():
    try:
        from .cli import main as cli_main
    except ImportError:
        print(
            "Error: the pathglob command requires the 'cli' extra.\n"
            "Install it with:  pip install 'pathglob[cli]'",
            file=sys.stderr,
        )
        raise SystemExit(1)
    cli_main()
