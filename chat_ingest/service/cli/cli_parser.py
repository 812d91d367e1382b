"""CLI parser construction for chat-ingest.

Wires argument shapes only; execution lives in ``cli_actions``.
"""

from __future__ import annotations

import argparse

from ...config.defaults import CLI_DEFAULT_PROVIDER


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser for a single streamed prompt. Unset options fall back to the
        layered provider configuration (defaults, config file, environment).
    """
    p = argparse.ArgumentParser(
        prog="chat-ingest",
        description="Stream one chat completion and persist the reply",
    )
    p.add_argument("prompt", nargs="*", help="Prompt text; read from stdin when omitted")
    p.add_argument("--provider", default=CLI_DEFAULT_PROVIDER)
    p.add_argument("--model", default=None)
    p.add_argument("--base-url", dest="base_url", default=None)
    p.add_argument("--system", dest="system_message", default=None)
    p.add_argument("--thinking", action="store_true", help="Request reasoning output")
    p.add_argument("--show-thinking", action="store_true", help="Echo reasoning to stderr")
    p.add_argument("--web-search", dest="web_search", action="store_true")
    p.add_argument("--db", default=None, help="SQLite file; in-memory storage when omitted")
    p.add_argument("--conversation", default="cli", help="Conversation id (history is loaded from --db)")
    p.add_argument("--json", action="store_true", help="Print the final result as JSON")
    p.add_argument("--log-level", dest="log_level", default=None)
    return p


__all__ = ["build_parser"]
