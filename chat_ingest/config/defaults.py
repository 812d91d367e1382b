"""chat_ingest.config.defaults
===========================

Central place for small, stable default values used across the chat_ingest
package and its debugging CLI. These defaults can be overridden via
environment variables or an external configuration file, but provide sensible
fallbacks for local development and tests.

This module intentionally avoids importing from other chat_ingest packages to
prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Streaming engine ----

# Reasoning text is flushed to observers at most once per interval.
THINKING_FLUSH_INTERVAL_MS = 500
# Upper bound for waiting on a cancelled session to finish finalizing.
CANCEL_JOIN_TIMEOUT_SECONDS = 10.0
# Number of prior conversation turns sent with each request.
HISTORY_LIMIT = 10
# Frame marker used by every supported server-sent-events dialect.
SSE_DATA_PREFIX = "data:"
SSE_DONE_SENTINEL = "[DONE]"

# ---- Finalization ----

REFERENCES_SEPARATOR = "\n\n---\n\n"
REFERENCES_HEADING = "\n\n**References:**\n"

# ---- Request building ----

ANTHROPIC_API_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 20000
DEFAULT_THINKING_BUDGET_TOKENS = 16000
DEFAULT_SYSTEM_MESSAGE = "You are a helpful assistant."

# ---- HTTP transport (seconds) ----

HTTP_CONNECT_TIMEOUT_SECONDS = 10.0
HTTP_READ_TIMEOUT_SECONDS = 60.0
HTTP_WRITE_TIMEOUT_SECONDS = 30.0
HTTP_POOL_TIMEOUT_SECONDS = 10.0

# ---- CLI ----

CLI_DEFAULT_PROVIDER = "openai"

# ---- Provider endpoints and models ----

ANTHROPIC_DEFAULT_MODEL = "claude-3-7-sonnet-20250219"
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com/v1/messages"

OPENAI_DEFAULT_MODEL = "gpt-4o-mini"
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1/chat/completions"

DEEPSEEK_DEFAULT_MODEL = "deepseek-chat"
DEEPSEEK_DEFAULT_BASE_URL = "https://api.deepseek.com/chat/completions"

QWEN_DEFAULT_MODEL = "qwen-plus"
QWEN_DEFAULT_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1/chat/completions"

HUNYUAN_DEFAULT_MODEL = "hunyuan-turbos-latest"
HUNYUAN_DEFAULT_BASE_URL = "https://api.hunyuan.cloud.tencent.com/v1/chat/completions"

MOONSHOT_DEFAULT_MODEL = "moonshot-v1-8k"
MOONSHOT_DEFAULT_BASE_URL = "https://api.moonshot.cn/v1/chat/completions"

ZHIPU_DEFAULT_MODEL = "glm-4-plus"
ZHIPU_DEFAULT_BASE_URL = "https://open.bigmodel.cn/api/paas/v4/chat/completions"

GOOGLE_DEFAULT_MODEL = "gemini-2.0-flash"
GOOGLE_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions"

OPENROUTER_DEFAULT_MODEL = "openrouter/auto"
OPENROUTER_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1/chat/completions"

# ---- SQLite persistence ----

# Busy timeout in milliseconds to mitigate "database is locked" errors.
SQLITE_BUSY_TIMEOUT_MS = 5000
# Journal mode to enable better concurrency for readers/writers.
SQLITE_JOURNAL_MODE = "WAL"
# Synchronous level (NORMAL balances durability and performance for WAL).
SQLITE_SYNCHRONOUS = "NORMAL"
