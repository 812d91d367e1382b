"""One-protocol-per-file interface definitions; see ``chat_ingest.base.interfaces``."""
