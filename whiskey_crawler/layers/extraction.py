"""
Extraction Layer - the single entry point from page text to record.

Runs the structured-data path and the HTML path over one parsed document,
then hands both drafts to the assembler. Never raises: any unexpected
failure is logged and reported as no result.
"""
from typing import Optional

from bs4 import BeautifulSoup

from whiskey_crawler.adapters.html_extractor import HTMLStructuralExtractor
from whiskey_crawler.adapters.structured_data import ShapeResolver, StructuredDataLocator, partial_from_product
from whiskey_crawler.layers.assembler import RecordAssembler
from whiskey_crawler.models.record import NormalizedRecord, RawPage
from whiskey_crawler.utils.logger import LayerLogger


class ExtractionLayer:
    """
    Orchestrates one extraction run.

    Stateless between calls; a single instance may serve concurrent callers.
    """

    def __init__(self):
        self.locator = StructuredDataLocator()
        self.resolver = ShapeResolver()
        self.html_extractor = HTMLStructuralExtractor()
        self.assembler = RecordAssembler()
        self.logger = LayerLogger("extraction")

    def extract(self, raw_html: str, source_url: str, debug: bool = False) -> Optional[NormalizedRecord]:
        """
        Extract a product record from a page.

        Args:
            raw_html: Full document text
            source_url: Page URL, attached verbatim as refUrl
            debug: Attach the diagnostic payload to the record

        Returns:
            NormalizedRecord, or None when nothing could be resolved
        """
        self.logger.log_action("extract", "started", url=source_url, debug=debug)

        try:
            page = RawPage(html=raw_html or "", url=source_url or "")
            return self._run(page, debug)
        except Exception as e:
            self.logger.log_error(
                f"Extraction failed: {str(e)}",
                error_type="extraction_error",
                url=source_url,
                exc_info=True,
            )
            return None

    def _run(self, page: RawPage, debug: bool) -> Optional[NormalizedRecord]:
        soup = BeautifulSoup(page.html, "lxml")

        # Structured-data path
        blob = self.locator.locate(soup)
        resolved = self.resolver.resolve(blob)
        structured = partial_from_product(resolved)
        self.logger.log_extraction(
            source="structured_data",
            fields_present=structured.record.present_fields(),
            fields_missing=structured.record.missing_fields(),
        )

        # HTML path always runs, to backfill gaps
        html = self.html_extractor.extract(soup, base_url=page.url or None)

        return self.assembler.assemble(
            structured,
            html,
            page,
            blob=blob,
            resolved=resolved,
            debug=debug,
        )


_default_layer = ExtractionLayer()


def extract(raw_html: str, source_url: str, *, debug: bool = False) -> Optional[NormalizedRecord]:
    """Extract a product record with the module-level extraction layer."""
    return _default_layer.extract(raw_html, source_url, debug=debug)
