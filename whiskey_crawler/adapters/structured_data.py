"""
Structured-data adapter for product pages.

Locates the JSON blob a page embeds in its scripts, resolves the product
sub-object inside it (its nesting differs between page variants), and
turns that product into a structured-data PartialRecord.
"""
import json
import re
from typing import Any, Callable, Dict, Iterator, List, NamedTuple, Optional, Tuple

from bs4 import BeautifulSoup

from whiskey_crawler.models.record import LabelValuePair, PartialRecord, RawValue, is_present
from whiskey_crawler.utils.labels import INFORMATION_LABELS, TASTING_LABELS, LabelValueIndex, coerce_pairs
from whiskey_crawler.utils.logger import LayerLogger
from whiskey_crawler.utils.rich_text import build_description_from_remarks


class LocatedBlob(NamedTuple):
    """A parsed blob and the name of the pattern that framed it."""
    pattern: str
    data: Dict[str, Any]


class ResolvedProduct(NamedTuple):
    """The product sub-object and the name of the probe that found it."""
    probe: str
    product: Dict[str, Any]


class StructuredDataExtraction(NamedTuple):
    """Structured-data draft plus the raw attribute rows it was read from."""
    record: PartialRecord
    information: Tuple[LabelValuePair, ...] = ()
    tasting_notes: Tuple[LabelValuePair, ...] = ()


# =========================================================================
# BLOB LOCATION
# =========================================================================
#
# Each pattern turns one script block into zero or more candidate texts.
# Patterns are tried in table order against every script, scripts in
# document order; the first candidate that parses to an object wins.
# =========================================================================

Capture = Callable[[str, str], List[str]]


class LocatorPattern(NamedTuple):
    name: str
    capture: Capture


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the object opened at text[start], or None."""
    depth = 0
    in_string = False
    escaped = False
    quote = ""

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                in_string = False
            continue

        if char in ("\"", "'"):
            in_string = True
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _top_level_objects(text: str) -> Iterator[str]:
    """Yield every brace-balanced object not nested in another, in order."""
    position = 0
    while True:
        start = text.find("{", position)
        if start < 0:
            return
        end = _balanced_end(text, start)
        if end is None:
            position = start + 1
            continue
        yield text[start:end + 1]
        position = end + 1


def _typed_payload(script_type: str, text: str) -> List[str]:
    if script_type == "application/json":
        return [text.strip()]
    return []


def _assignment(expression: str) -> Capture:
    anchor = re.compile(expression)

    def capture(script_type: str, text: str) -> List[str]:
        candidates = []
        for match in anchor.finditer(text):
            start = text.find("{", match.end())
            if start < 0 or text[match.end():start].strip():
                continue
            end = _balanced_end(text, start)
            if end is not None:
                candidates.append(text[start:end + 1])
        return candidates

    return capture


def _marker(key: str) -> Capture:
    needle = f"\"{key}\""

    def capture(script_type: str, text: str) -> List[str]:
        if needle not in text:
            return []
        objects = [obj for obj in _top_level_objects(text) if needle in obj]
        return sorted(objects, key=len, reverse=True)

    return capture


LOCATOR_PATTERNS: Tuple[LocatorPattern, ...] = (
    LocatorPattern("typed_payload", _typed_payload),
    LocatorPattern("next_data_assignment", _assignment(r"__NEXT_DATA__\s*=\s*")),
    LocatorPattern("initial_state_assignment", _assignment(r"window\.__INITIAL_STATE__\s*=\s*")),
    LocatorPattern("dehydrated_state_marker", _marker("dehydratedState")),
    LocatorPattern("page_props_marker", _marker("pageProps")),
)


def _strip_trailing_commas(text: str) -> str:
    return re.sub(r",\s*([}\]])", r"\1", text)


def parse_object(candidate: str) -> Optional[Dict[str, Any]]:
    """Parse candidate text as a JSON object; None if it is not one."""
    for text in (candidate, _strip_trailing_commas(candidate)):
        try:
            data = json.loads(text)
        except (ValueError, RecursionError):
            continue
        return data if isinstance(data, dict) else None
    return None


class StructuredDataLocator:
    """
    Finds the embedded structured-data blob in a parsed page.

    Not finding one is a normal outcome, reported as None.
    """

    def __init__(self, patterns: Tuple[LocatorPattern, ...] = LOCATOR_PATTERNS):
        self.patterns = patterns
        self.logger = LayerLogger("structured_data_locator")

    def locate(self, soup: BeautifulSoup) -> Optional[LocatedBlob]:
        """Scan all script blocks and return the first well-formed blob."""
        scripts = soup.find_all("script")

        for script_index, script in enumerate(scripts):
            text = script.get_text()
            if not text or not text.strip():
                continue

            script_type = (script.get("type") or "").strip().lower()
            for pattern in self.patterns:
                for candidate in pattern.capture(script_type, text):
                    data = parse_object(candidate)
                    if data is None:
                        continue

                    self.logger.log_action(
                        "locate_blob",
                        "completed",
                        pattern=pattern.name,
                        script_index=script_index,
                        top_level_keys=sorted(data.keys())[:20],
                    )
                    return LocatedBlob(pattern.name, data)

        self.logger.log_action(
            "locate_blob",
            "no_data_found",
            scripts_scanned=len(scripts),
        )
        return None

    def locate_in_html(self, html: str) -> Optional[LocatedBlob]:
        """Convenience wrapper taking raw document text."""
        return self.locate(BeautifulSoup(html or "", "lxml"))


# =========================================================================
# SHAPE RESOLUTION
# =========================================================================
#
# Probes are total: each yields candidate sub-objects (possibly None) and
# never raises on missing keys or wrong types. The probe order below is
# the resolution order.
# =========================================================================

PRODUCT_KEYS = frozenset({"name", "en_name", "price", "information", "tasting_notes"})
WRAPPER_KEYS = ("item", "product", "data")


def dig(obj: Any, *path: Any) -> Any:
    """Follow a key/index path, returning None at the first miss."""
    current = obj
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def looks_like_product(candidate: Any) -> bool:
    """True for an object exposing at least one telltale product key."""
    return isinstance(candidate, dict) and not PRODUCT_KEYS.isdisjoint(candidate.keys())


def _with_wrappers(obj: Any) -> Iterator[Any]:
    yield obj
    for key in WRAPPER_KEYS:
        yield dig(obj, key)


def _query_payloads(queries: Any) -> Iterator[Any]:
    if not isinstance(queries, list):
        return
    for query in queries:
        yield from _with_wrappers(dig(query, "state", "data"))


def _probe_dehydrated_queries(blob: Any) -> Iterator[Any]:
    return _query_payloads(dig(blob, "dehydratedState", "queries"))


def _probe_page_props_dehydrated_queries(blob: Any) -> Iterator[Any]:
    return _query_payloads(dig(blob, "props", "pageProps", "dehydratedState", "queries"))


def _probe_page_props(blob: Any) -> Iterator[Any]:
    return _with_wrappers(dig(blob, "props", "pageProps"))


def _probe_bare_page_props(blob: Any) -> Iterator[Any]:
    return _with_wrappers(dig(blob, "pageProps"))


def _probe_props(blob: Any) -> Iterator[Any]:
    return _with_wrappers(dig(blob, "props"))


def _probe_direct_wrapper(blob: Any) -> Iterator[Any]:
    return (dig(blob, key) for key in WRAPPER_KEYS)


def _probe_self(blob: Any) -> Iterator[Any]:
    yield blob


class ShapeProbe(NamedTuple):
    name: str
    candidates: Callable[[Any], Iterator[Any]]


SHAPE_PROBES: Tuple[ShapeProbe, ...] = (
    ShapeProbe("dehydrated_queries", _probe_dehydrated_queries),
    ShapeProbe("page_props_dehydrated_queries", _probe_page_props_dehydrated_queries),
    ShapeProbe("page_props", _probe_page_props),
    ShapeProbe("bare_page_props", _probe_bare_page_props),
    ShapeProbe("props", _probe_props),
    ShapeProbe("direct_wrapper", _probe_direct_wrapper),
    ShapeProbe("self", _probe_self),
)


class ShapeResolver:
    """Finds the product sub-object inside a blob of unknown shape."""

    def __init__(self, probes: Tuple[ShapeProbe, ...] = SHAPE_PROBES):
        self.probes = probes
        self.logger = LayerLogger("shape_resolver")

    def resolve(self, blob: Optional[LocatedBlob]) -> Optional[ResolvedProduct]:
        """Return the first product-like candidate, trying probes in order."""
        if blob is None:
            return None

        for probe in self.probes:
            for candidate in probe.candidates(blob.data):
                if looks_like_product(candidate):
                    self.logger.log_decision(
                        decision="product_resolved",
                        reason=f"probe {probe.name} found telltale keys",
                        probe=probe.name,
                        keys=sorted(PRODUCT_KEYS.intersection(candidate.keys())),
                    )
                    return ResolvedProduct(probe.name, candidate)

        self.logger.log_action(
            "resolve_shape",
            "no_data_found",
            pattern=blob.pattern,
            probes_tried=[p.name for p in self.probes],
        )
        return None


# =========================================================================
# PRODUCT -> PARTIAL RECORD
# =========================================================================


def _scalar(product: Dict[str, Any], *keys: str) -> Optional[RawValue]:
    for key in keys:
        value = product.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float, str)) and is_present(value):
            return value.strip() if isinstance(value, str) else value
    return None


def _text(product: Dict[str, Any], *keys: str) -> Optional[str]:
    value = _scalar(product, *keys)
    return str(value) if value is not None else None


def _image(product: Dict[str, Any]) -> Optional[str]:
    for key in ("thumbnail_image", "image_url", "image", "images"):
        value = product.get(key)
        if isinstance(value, list):
            value = next((v for v in value if isinstance(v, str) and v.strip()), None)
        if isinstance(value, dict):
            value = value.get("url")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def partial_from_product(resolved: Optional[ResolvedProduct]) -> StructuredDataExtraction:
    """Map a resolved product object onto a structured-data PartialRecord."""
    if resolved is None:
        return StructuredDataExtraction(record=PartialRecord())

    product = resolved.product
    information = coerce_pairs(product.get("information"))
    tasting_notes = coerce_pairs(product.get("tasting_notes"))
    info_index = LabelValueIndex(information)
    tasting_index = LabelValueIndex(tasting_notes)

    description = build_description_from_remarks(product.get("comments"))
    if description is None:
        description = _text(product, "description")

    record = PartialRecord(
        english_name=_text(product, "en_name", "english_name", "name_en"),
        korean_name=_text(product, "name", "ko_name"),
        price=_scalar(product, "price", "sale_price"),
        review_rate=_scalar(product, "review_rate", "rating"),
        review_count=_scalar(product, "review_count"),
        image_url=_image(product),
        description=description,
        aroma=tasting_index.find(*TASTING_LABELS["aroma"]),
        taste=tasting_index.find(*TASTING_LABELS["taste"]),
        finish=tasting_index.find(*TASTING_LABELS["finish"]),
        **{field: info_index.find(*terms) for field, terms in INFORMATION_LABELS.items()},
    )
    return StructuredDataExtraction(record=record, information=information, tasting_notes=tasting_notes)
