"""chat-ingest debugging CLI (package entrypoint).

Wires argument parsing to the action handler; contains no streaming logic.
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_actions import handle_run
from .cli_parser import build_parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code.
    """
    args = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    return handle_run(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
