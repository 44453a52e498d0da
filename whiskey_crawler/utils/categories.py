"""
Categorical translation tables for whiskey attributes.

Maps the shop's Korean labels for whiskey type, region and country to
canonical English labels, and infers a country from a canonical region
when the page does not state one. Tables are read-only module constants.
"""
import re
from types import MappingProxyType
from typing import Mapping, Optional

TYPE_LABELS: Mapping[str, str] = MappingProxyType({
    "싱글몰트 위스키": "Single Malt",
    "싱글몰트": "Single Malt",
    "싱글 몰트": "Single Malt",
    "블렌디드 몰트": "Blended Malt",
    "블렌디드 몰트 위스키": "Blended Malt",
    "블렌디드 위스키": "Blended",
    "블렌디드": "Blended",
    "싱글 그레인": "Single Grain",
    "그레인 위스키": "Grain",
    "버번 위스키": "Bourbon",
    "버번": "Bourbon",
    "아메리칸 위스키": "American",
    "아메리칸": "American",
    "아이리시 위스키": "Irish",
    "아이리시": "Irish",
    "캐나디안 위스키": "Canadian",
    "캐나디안": "Canadian",
    "재패니즈 위스키": "Japanese",
    "재패니즈": "Japanese",
    "라이 위스키": "Rye",
    "라이": "Rye",
    "테네시 위스키": "Tennessee",
    "테네시": "Tennessee",
})

REGION_LABELS: Mapping[str, str] = MappingProxyType({
    "하이랜드": "Highland",
    "로우랜드": "Lowland",
    "스페이사이드": "Speyside",
    "아일라": "Islay",
    "캠벨타운": "Campbeltown",
    "아일랜즈": "Islands",
    "아일랜드": "Ireland",
    "켄터키": "Kentucky",
    "테네시": "Tennessee",
    "스코틀랜드": "Scotland",
    "일본": "Japan",
    "캐나다": "Canada",
})

COUNTRY_LABELS: Mapping[str, str] = MappingProxyType({
    "스코틀랜드": "Scotland",
    "아일랜드": "Ireland",
    "미국": "USA",
    "일본": "Japan",
    "캐나다": "Canada",
    "대만": "Taiwan",
    "인도": "India",
    "잉글랜드": "England",
    "영국": "United Kingdom",
    "웨일스": "Wales",
    "프랑스": "France",
    "호주": "Australia",
    "한국": "South Korea",
})

# Keyed by canonical region, so it applies to translated and English input alike
REGION_COUNTRY: Mapping[str, str] = MappingProxyType({
    "Highland": "Scotland",
    "Lowland": "Scotland",
    "Speyside": "Scotland",
    "Islay": "Scotland",
    "Campbeltown": "Scotland",
    "Islands": "Scotland",
    "Scotland": "Scotland",
    "Ireland": "Ireland",
    "Kentucky": "USA",
    "Tennessee": "USA",
    "Japan": "Japan",
    "Canada": "Canada",
})

_HANGUL_RE = re.compile(r"[가-힣]")
_COMPOUND_SEPARATORS = re.compile(r"\s*[:：|]\s*")


def _lookup_key(value: str) -> str:
    return re.sub(r"\s+", "", value).lower()


def _build_index(table: Mapping[str, str]) -> Mapping[str, str]:
    index = {}
    for source, canonical in table.items():
        index.setdefault(_lookup_key(source), canonical)
        index.setdefault(_lookup_key(canonical), canonical)
    return MappingProxyType(index)


_TYPE_INDEX = _build_index(TYPE_LABELS)
_REGION_INDEX = _build_index(REGION_LABELS)
_COUNTRY_INDEX = _build_index(COUNTRY_LABELS)
_REGION_COUNTRY_INDEX = MappingProxyType(
    {_lookup_key(region): country for region, country in REGION_COUNTRY.items()}
)


def has_hangul(value: str) -> bool:
    """True if the text contains Korean syllables."""
    return bool(_HANGUL_RE.search(value or ""))


def split_compound(value: Optional[str]) -> Optional[str]:
    """
    Resolve a "label:value" compound into its useful segment.

    Prefers the segment written in Korean script; otherwise the last
    segment (the value side) is kept.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None

    segments = [s for s in _COMPOUND_SEPARATORS.split(text) if s]
    if len(segments) < 2:
        return text

    hangul_segments = [s for s in segments if has_hangul(s)]
    if hangul_segments:
        return hangul_segments[-1]
    return segments[-1]


def _translate(value: Optional[str], index: Mapping[str, str]) -> Optional[str]:
    text = split_compound(value)
    if text is None:
        return None
    return index.get(_lookup_key(text), text)


def translate_type(value: Optional[str]) -> Optional[str]:
    """Map a localized whiskey category to its canonical English term."""
    return _translate(value, _TYPE_INDEX)


def translate_region(value: Optional[str]) -> Optional[str]:
    """Map a localized region to its canonical English term."""
    return _translate(value, _REGION_INDEX)


def translate_country(value: Optional[str]) -> Optional[str]:
    """Map a localized country to its canonical English term."""
    return _translate(value, _COUNTRY_INDEX)


def infer_country(region: Optional[str]) -> Optional[str]:
    """Infer the country from a canonical region, e.g. "Speyside" -> "Scotland"."""
    if not region:
        return None
    return _REGION_COUNTRY_INDEX.get(_lookup_key(region))
