"""
Record models for the whiskey product crawler.

A product page is read into two sparse PartialRecords (one from embedded
structured data, one from DOM heuristics). They are merged and normalized
into a NormalizedRecord, the single public representation of a product
regardless of which source supplied each field.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Raw scalar as found in a page, before numeric parsing
RawValue = Union[int, float, str]

RECORD_FIELDS = (
    "english_name",
    "korean_name",
    "brand",
    "type",
    "age",
    "volume",
    "abv",
    "country",
    "region",
    "cask",
    "price",
    "aroma",
    "taste",
    "finish",
    "description",
    "image_url",
    "review_rate",
    "review_count",
)


def is_present(value: Any) -> bool:
    """True for a usable raw value: not None and not blank text."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


class FieldSource(str, Enum):
    """Which extraction path supplied a field."""
    STRUCTURED_DATA = "structured_data"
    HTML = "html"


class RawPage(BaseModel):
    """Document text plus the URL it was retrieved from."""
    model_config = ConfigDict(frozen=True)

    html: str
    url: str


class LabelValuePair(BaseModel):
    """One attribute row, e.g. {"label": "용량", "value": "700ml"}."""
    model_config = ConfigDict(frozen=True)

    label: str
    label_alt: Optional[str] = None
    value: str


class PartialRecord(BaseModel):
    """
    Sparse, single-source draft of a product record.

    Values are kept raw (text or numbers exactly as found) so that the
    merge step can compare sources before any normalization happens.
    """
    model_config = ConfigDict(frozen=True)

    english_name: Optional[str] = None
    korean_name: Optional[str] = None
    brand: Optional[str] = None
    type: Optional[str] = None
    age: Optional[RawValue] = None
    volume: Optional[RawValue] = None
    abv: Optional[RawValue] = None
    country: Optional[str] = None
    region: Optional[str] = None
    cask: Optional[str] = None
    price: Optional[RawValue] = None
    aroma: Optional[str] = None
    taste: Optional[str] = None
    finish: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    review_rate: Optional[RawValue] = None
    review_count: Optional[RawValue] = None

    def present_fields(self) -> List[str]:
        """Return names of fields holding a usable value."""
        return [name for name in RECORD_FIELDS if is_present(getattr(self, name))]

    def missing_fields(self) -> List[str]:
        """Return names of fields with no usable value."""
        present = self.present_fields()
        return [name for name in RECORD_FIELDS if name not in present]


class DebugInfo(BaseModel):
    """Diagnostic payload attached on request; never needed for the primary fields."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    raw_json_data: Optional[Dict[str, Any]] = None
    raw_information: List[Dict[str, Any]] = Field(default_factory=list)
    raw_tasting_notes: List[Dict[str, Any]] = Field(default_factory=list)
    raw_html: Optional[str] = None
    blob_pattern: Optional[str] = None
    shape_probe: Optional[str] = None
    field_sources: Dict[str, FieldSource] = Field(default_factory=dict)


class NormalizedRecord(BaseModel):
    """
    Fully typed product record.

    Every field is always present; absence is None, never an empty
    string or a zero standing in for "unknown".
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    english_name: Optional[str] = None
    korean_name: Optional[str] = None
    brand: Optional[str] = None
    type: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    volume: Optional[int] = Field(default=None, ge=0)
    abv: Optional[float] = Field(default=None, ge=0.0)
    country: Optional[str] = None
    region: Optional[str] = None
    cask: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)
    aroma: Optional[str] = None
    taste: Optional[str] = None
    finish: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    review_rate: Optional[float] = Field(default=None, ge=0.0, le=10.0)
    review_count: Optional[int] = Field(default=None, ge=0)

    ref_url: str
    debug_info: Optional[DebugInfo] = None

    def get_missing_fields(self) -> List[str]:
        """Return list of product fields left absent."""
        return [name for name in RECORD_FIELDS if getattr(self, name) is None]

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a plain camelCase document for storage or display."""
        exclude = {"debug_info"} if self.debug_info is None else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
