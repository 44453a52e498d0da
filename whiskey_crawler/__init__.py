"""Whiskey product-page crawler."""

__version__ = "1.0.0"

from whiskey_crawler.layers.extraction import extract
from whiskey_crawler.models.record import DebugInfo, NormalizedRecord, RawPage

__all__ = ["extract", "DebugInfo", "NormalizedRecord", "RawPage", "__version__"]
