"""CLI action handlers.

``handle_run`` builds the configuration and repository from parsed
arguments, streams one reply to stdout and returns the process exit code.
Ctrl-C cancels the session; the partial reply is still persisted.
"""

from __future__ import annotations

import json
import sys
import uuid
from typing import Any, Dict, Optional, TextIO

from pydantic import ValidationError

from ...base.dto.chat import ChatMessageDTO
from ...base.dto.provider_config import ProviderConfig
from ...base.logging import configure_logger
from ...base.streaming.session import StreamStatus, StreamUpdate
from ...base.streaming.stream_controller import StreamSessionController
from ...base.streaming.streaming_finalize import FinalizeResult, render_references
from ...persistence.in_memory import InMemoryMessageRepository
from ...persistence.interfaces.repos import IMessageRepository, StoredMessage
from ...persistence.sqlite.engine import create_connection, init_schema
from ...persistence.sqlite.message_repo import MessageRepoSqlite
from ..chat_request_build import ChatRequestBuilder, to_messages

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


class TerminalPrinter:
    """Listener echoing newly arrived text (and optionally reasoning)."""

    def __init__(self, out: TextIO, err: TextIO, show_thinking: bool = False) -> None:
        self._out = out
        self._err = err
        self._show_thinking = show_thinking
        self._text_len = 0
        self._thinking_len = 0

    def __call__(self, update: StreamUpdate) -> None:
        snap = update.snapshot
        if self._show_thinking and len(snap.thinking) > self._thinking_len:
            self._err.write(snap.thinking[self._thinking_len:])
            self._err.flush()
            self._thinking_len = len(snap.thinking)
        if len(snap.text) > self._text_len:
            self._out.write(snap.text[self._text_len:])
            self._out.flush()
            self._text_len = len(snap.text)


def _config_from_args(args: Any) -> ProviderConfig:
    overrides: Dict[str, Any] = {
        "model": args.model,
        "base_url": args.base_url,
        "system_message": args.system_message,
    }
    if args.thinking:
        overrides["thinking_enabled"] = True
    if args.web_search:
        overrides["web_search"] = True
    return ProviderConfig.from_settings(args.provider, **overrides)


def _open_repository(db: Optional[str]) -> IMessageRepository:
    if not db:
        return InMemoryMessageRepository()
    conn = create_connection(db)
    init_schema(conn)
    return MessageRepoSqlite(conn)


def _read_prompt(args: Any, stdin: TextIO) -> str:
    if args.prompt:
        return " ".join(args.prompt)
    return stdin.read().strip()


def _result_payload(result: FinalizeResult) -> Dict[str, Any]:
    return {
        "message_id": result.message_id,
        "status": result.status.value,
        "content": result.content,
        "thinking": result.thinking,
        "references": [{"index": r.index, "title": r.title, "url": r.url} for r in result.references],
        "error": result.error,
        "error_code": result.error_code,
        "persisted": result.persisted,
        "metrics": result.metrics.to_dict(),
    }


def handle_run(
    args: Any,
    *,
    controller_factory=StreamSessionController,
    repository: Optional[IMessageRepository] = None,
    stdin: TextIO = sys.stdin,
    stdout: TextIO = sys.stdout,
    stderr: TextIO = sys.stderr,
) -> int:
    """Execute one streamed prompt.

    Parameters
    ----------
    args:
        Namespace from ``build_parser``.
    controller_factory:
        Callable building the controller; tests inject one bound to a mock
        transport.
    repository:
        Overrides the repository chosen from ``--db``.

    Returns
    -------
    int
        0 on completion, 1 on a stream error, 2 on bad input, 130 when cancelled.
    """
    if args.log_level:
        configure_logger(level=args.log_level)
    prompt = _read_prompt(args, stdin)
    try:
        config = _config_from_args(args)
        user_turn = ChatMessageDTO(role="user", content=prompt)
    except ValidationError as exc:
        stderr.write(f"invalid input: {exc.errors()[0].get('msg', exc)}\n")
        return EXIT_USAGE

    repo = repository if repository is not None else _open_repository(args.db)
    history = to_messages(repo.list_conversation(args.conversation))
    repo.insert(
        StoredMessage(
            id=uuid.uuid4().hex,
            conversation_id=args.conversation,
            role="user",
            content=prompt,
            sequence=repo.next_sequence(args.conversation),
        )
    )
    repo.save()

    printer = TerminalPrinter(stdout, stderr, show_thinking=args.show_thinking)
    controller = controller_factory(ChatRequestBuilder(), repo, listener=None if args.json else printer)
    session = controller.start(config, [*history, user_turn], conversation_id=args.conversation)
    try:
        while not controller.wait(session, 0.1):
            pass
    except KeyboardInterrupt:
        controller.cancel(args.conversation, reason="keyboard_interrupt")
    result = controller.result(session)
    if result is None:
        stderr.write("session did not finish\n")
        return EXIT_ERROR

    if args.json:
        stdout.write(json.dumps(_result_payload(result), ensure_ascii=False) + "\n")
    else:
        stdout.write(render_references(result.references) + "\n")
        if result.error:
            stderr.write(f"error: {result.error}\n")
    if result.status is StreamStatus.ERROR:
        return EXIT_ERROR
    return EXIT_CANCELLED if result.status is StreamStatus.CANCELLED else EXIT_OK


__all__ = ["handle_run", "TerminalPrinter", "EXIT_OK", "EXIT_ERROR", "EXIT_USAGE", "EXIT_CANCELLED"]
