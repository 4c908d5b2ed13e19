"""Source parsers producing the fact model."""

from .go import GoFactExtractor

__all__ = ["GoFactExtractor"]
