"""Dialect routing: ``selector`` (provider id -> dialect) and ``hosts`` (URL -> provider id)."""
