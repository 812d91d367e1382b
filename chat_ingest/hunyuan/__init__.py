"""Search-augmented (Hunyuan) streaming dialect."""

from .stream_helpers import SearchAugmentedDialect

__all__ = ["SearchAugmentedDialect"]
