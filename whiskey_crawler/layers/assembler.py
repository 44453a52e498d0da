"""
Record Assembler - merges the two single-source drafts and normalizes them.

Merge rule: per field, the structured-data value wins when present and
non-blank, else the HTML value, else the field is absent. A numeric value
that does not parse counts as absent. Derived fields
(brand, age, canonical type/region/country) are computed only after the
merge, from the merged raw values.
"""
from typing import Any, Callable, Dict, Optional, Tuple

from whiskey_crawler.adapters.html_extractor import HTMLExtraction
from whiskey_crawler.adapters.structured_data import LocatedBlob, ResolvedProduct, StructuredDataExtraction
from whiskey_crawler.models.record import (
    RECORD_FIELDS,
    DebugInfo,
    FieldSource,
    NormalizedRecord,
    PartialRecord,
    RawPage,
    is_present,
)
from whiskey_crawler.utils.categories import infer_country, translate_country, translate_region, translate_type
from whiskey_crawler.utils.labels import LabelValueIndex
from whiskey_crawler.utils.logger import LayerLogger
from whiskey_crawler.utils.numeric import derive_brand, parse_age, parse_float, parse_int, parse_rating
from whiskey_crawler.utils.rich_text import clean_rich_text

MAX_ABV = 100.0


def _text(value: Any) -> Optional[str]:
    if not is_present(value):
        return None
    return str(value).strip()


def _parse_abv(value: Any) -> Optional[float]:
    abv = parse_float(value)
    if abv is None or abv > MAX_ABV:
        return None
    return abv


# Numeric fields only count as present when their value parses
NUMERIC_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "price": parse_int,
    "volume": parse_int,
    "abv": _parse_abv,
    "review_rate": parse_rating,
    "review_count": parse_int,
}


def _usable(name: str, value: Any) -> bool:
    if not is_present(value):
        return False
    parser = NUMERIC_PARSERS.get(name)
    return parser is None or parser(value) is not None


class RecordAssembler:
    """
    Combines structured-data and HTML drafts into the public record.

    Returns None (no result) when no field resolves from either source.
    """

    def __init__(self):
        self.logger = LayerLogger("assembler")

    def merge(
        self,
        structured: PartialRecord,
        html: PartialRecord,
    ) -> Tuple[PartialRecord, Dict[str, FieldSource]]:
        """
        Merge two drafts field by field.

        Args:
            structured: Draft from embedded structured data
            html: Draft from DOM heuristics

        Returns:
            Tuple of (merged draft, field name -> source that supplied it)
        """
        values: Dict[str, Any] = {}
        sources: Dict[str, FieldSource] = {}

        for name in RECORD_FIELDS:
            structured_value = getattr(structured, name)
            html_value = getattr(html, name)

            if _usable(name, structured_value):
                values[name] = structured_value
                sources[name] = FieldSource.STRUCTURED_DATA
            elif _usable(name, html_value):
                values[name] = html_value
                sources[name] = FieldSource.HTML

        html_fields = [name for name, source in sources.items() if source == FieldSource.HTML]
        if html_fields and any(s == FieldSource.STRUCTURED_DATA for s in sources.values()):
            self.logger.log_fallback(
                from_source="structured_data",
                to_source="html",
                reason="fields missing from structured data",
                fields=html_fields,
            )

        return PartialRecord(**values), sources

    def normalize(self, merged: PartialRecord) -> Dict[str, Any]:
        """Resolve raw merged values into typed record fields."""
        english_name = _text(merged.english_name)
        region = translate_region(_text(merged.region))
        country = translate_country(_text(merged.country)) or infer_country(region)

        return {
            "english_name": english_name,
            "korean_name": _text(merged.korean_name),
            "brand": derive_brand(english_name),
            "type": translate_type(_text(merged.type)),
            "age": parse_age(english_name),
            "volume": NUMERIC_PARSERS["volume"](merged.volume),
            "abv": NUMERIC_PARSERS["abv"](merged.abv),
            "country": country,
            "region": region,
            "cask": _text(merged.cask),
            "price": NUMERIC_PARSERS["price"](merged.price),
            "aroma": _text(merged.aroma),
            "taste": _text(merged.taste),
            "finish": _text(merged.finish),
            "description": clean_rich_text(merged.description),
            "image_url": _text(merged.image_url),
            "review_rate": NUMERIC_PARSERS["review_rate"](merged.review_rate),
            "review_count": NUMERIC_PARSERS["review_count"](merged.review_count),
        }

    def assemble(
        self,
        structured: StructuredDataExtraction,
        html: HTMLExtraction,
        page: RawPage,
        blob: Optional[LocatedBlob] = None,
        resolved: Optional[ResolvedProduct] = None,
        debug: bool = False,
    ) -> Optional[NormalizedRecord]:
        """
        Build the final record, or None when nothing resolved.

        Args:
            structured: Structured-data extraction result
            html: HTML extraction result
            page: The page both were extracted from
            blob: Located blob, kept for diagnostics
            resolved: Resolved product, kept for diagnostics
            debug: Attach the diagnostic payload
        """
        merged, sources = self.merge(structured.record, html.record)
        fields = self.normalize(merged)

        present = [name for name in RECORD_FIELDS if fields[name] is not None]
        if not present:
            self.logger.log_action("assemble_record", "no_data_found", url=page.url)
            return None

        debug_info = None
        if debug:
            debug_info = self._build_debug_info(structured, html, page, blob, resolved, sources)

        record = NormalizedRecord(ref_url=page.url, debug_info=debug_info, **fields)
        self.logger.log_action(
            "assemble_record",
            "completed",
            url=page.url,
            fields_present=present,
            fields_missing=record.get_missing_fields(),
        )
        return record

    def _build_debug_info(
        self,
        structured: StructuredDataExtraction,
        html: HTMLExtraction,
        page: RawPage,
        blob: Optional[LocatedBlob],
        resolved: Optional[ResolvedProduct],
        sources: Dict[str, FieldSource],
    ) -> DebugInfo:
        information = structured.information or html.information
        tasting_notes = structured.tasting_notes or html.tasting_notes

        return DebugInfo(
            raw_json_data=blob.data if blob else None,
            raw_information=LabelValueIndex(information).to_dicts(),
            raw_tasting_notes=LabelValueIndex(tasting_notes).to_dicts(),
            raw_html=page.html,
            blob_pattern=blob.pattern if blob else None,
            shape_probe=resolved.probe if resolved else None,
            field_sources=sources,
        )
