"""
Label-value lookup over attribute rows, whatever their source.

Structured data ships rows such as {"label": "용량", "value": "700ml"} or
{"label": "Aroma", "label_ko": "향", "value": "..."}; the HTML extractor
produces the same LabelValuePair rows from markup.
"""
from types import MappingProxyType
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from whiskey_crawler.models.record import LabelValuePair

# Label spellings per record field: localized term first, canonical last
INFORMATION_LABELS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "type": ("종류", "타입", "Type"),
    "volume": ("용량", "Volume"),
    "abv": ("도수", "알코올 도수", "ABV"),
    "country": ("국가", "원산지", "Country"),
    "region": ("지역", "Region"),
    "cask": ("케이스", "캐스크", "Cask"),
})

TASTING_LABELS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "aroma": ("향", "Aroma", "Nose"),
    "taste": ("맛", "Taste", "Palate"),
    "finish": ("여운", "Finish"),
})

ALL_LABEL_TERMS = frozenset(
    term
    for table in (INFORMATION_LABELS, TASTING_LABELS)
    for terms in table.values()
    for term in terms
)


def is_label_term(text: str) -> bool:
    """True if the text is itself one of the known attribute labels."""
    folded = text.strip().lower()
    return any(folded == term.lower() for term in ALL_LABEL_TERMS)


_LABEL_KEYS = ("label", "name", "title", "key")
_LABEL_ALT_KEYS = ("label_ko", "label_en", "label_alt")
_VALUE_KEYS = ("value", "content", "text", "description")


def _first_text(entry: dict, keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = entry.get(key)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, (str, int, float)):
            text = str(value).strip()
            if text:
                return text
    return None


def coerce_pairs(raw: Any) -> Tuple[LabelValuePair, ...]:
    """
    Turn a raw structured-data array into LabelValuePairs.

    Entries that are not objects, or lack a label or value, are skipped.
    A value that is a list of strings is joined with ", ".
    """
    if not isinstance(raw, list):
        return ()

    pairs: List[LabelValuePair] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue

        label = _first_text(entry, _LABEL_KEYS)
        label_alt = _first_text(entry, _LABEL_ALT_KEYS)
        value = _first_text(entry, _VALUE_KEYS)

        if value is None:
            listed = next((entry[k] for k in _VALUE_KEYS if isinstance(entry.get(k), list)), None)
            if listed:
                joined = ", ".join(str(v).strip() for v in listed if isinstance(v, (str, int, float)) and str(v).strip())
                value = joined or None

        if not (label or label_alt) or value is None:
            continue
        pairs.append(LabelValuePair(label=label or label_alt, label_alt=label_alt, value=value))

    return tuple(pairs)


class LabelValueIndex:
    """
    Resolves values by one or more candidate label spellings.

    Candidates are tried in the order given; for each candidate the rows
    are scanned in source order and the first match wins. A row matches
    on its label, its alternate label, or a case-insensitive label.
    """

    def __init__(self, pairs: Iterable[LabelValuePair]):
        self.pairs: Tuple[LabelValuePair, ...] = tuple(pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def find(self, *labels: str) -> Optional[str]:
        """Return the value for the first candidate label that matches a row."""
        for candidate in labels:
            if not candidate:
                continue
            folded = candidate.strip().lower()
            for pair in self.pairs:
                if (
                    pair.label == candidate
                    or pair.label_alt == candidate
                    or pair.label.strip().lower() == folded
                    or (pair.label_alt and pair.label_alt.strip().lower() == folded)
                ):
                    value = pair.value.strip()
                    if value:
                        return value
        return None

    def to_dicts(self) -> List[dict]:
        """Plain dicts for diagnostics."""
        return [pair.model_dump(exclude_none=True) for pair in self.pairs]
