"""Layers package initialization."""
from whiskey_crawler.layers.assembler import RecordAssembler
from whiskey_crawler.layers.extraction import ExtractionLayer, extract

__all__ = [
    "RecordAssembler",
    "ExtractionLayer",
    "extract",
]
