"""Adapters package initialization."""
from whiskey_crawler.adapters.fetcher import PageFetcher, is_supported_url
from whiskey_crawler.adapters.html_extractor import HTMLExtraction, HTMLStructuralExtractor
from whiskey_crawler.adapters.structured_data import (
    LocatedBlob,
    ResolvedProduct,
    ShapeResolver,
    StructuredDataExtraction,
    StructuredDataLocator,
    partial_from_product,
)

__all__ = [
    "PageFetcher",
    "is_supported_url",
    "HTMLExtraction",
    "HTMLStructuralExtractor",
    "LocatedBlob",
    "ResolvedProduct",
    "ShapeResolver",
    "StructuredDataExtraction",
    "StructuredDataLocator",
    "partial_from_product",
]
