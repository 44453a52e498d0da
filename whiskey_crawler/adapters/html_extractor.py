"""
HTML structural extractor for product pages.

Recovers product fields directly from markup, for pages whose embedded
data is missing or incomplete. Every field group is independent: a group
that finds no acceptable candidate returns nothing instead of guessing,
and a group that fails never blocks the others.
"""
import re
from typing import Callable, Iterator, List, NamedTuple, Optional, Tuple, TypeVar, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from whiskey_crawler.models.record import LabelValuePair, PartialRecord
from whiskey_crawler.utils.labels import INFORMATION_LABELS, TASTING_LABELS, LabelValueIndex, is_label_term
from whiskey_crawler.utils.logger import LayerLogger
from whiskey_crawler.utils.numeric import parse_int, parse_rating
from whiskey_crawler.utils.rich_text import clean_rich_text, format_section, plain_text

T = TypeVar("T")


class AttributeRule(NamedTuple):
    """Declarative lookup rule: which labels name a field and how long its value may be."""
    field: str
    labels: Tuple[str, ...]
    max_length: int = 60


class HTMLExtraction(NamedTuple):
    """HTML-derived draft plus the attribute rows recovered from markup."""
    record: PartialRecord
    information: Tuple[LabelValuePair, ...] = ()
    tasting_notes: Tuple[LabelValuePair, ...] = ()


ATTRIBUTE_RULES: Tuple[AttributeRule, ...] = tuple(
    AttributeRule(field, terms) for field, terms in INFORMATION_LABELS.items()
)

TASTING_RULES: Tuple[AttributeRule, ...] = tuple(
    AttributeRule(field, terms, max_length=300) for field, terms in TASTING_LABELS.items()
)

# Elements that can carry a label ("종류") or a value ("싱글몰트 위스키")
LABEL_TAGS = ["dt", "dd", "th", "td", "span", "div", "p", "strong", "b", "em", "label", "li", "h3", "h4", "h5", "h6"]

# Walking up past these would turn a local search into a page-wide one
_BOUNDARY_TAGS = {"body", "html", "[document]"}
_INVISIBLE_TAGS = {"script", "style", "noscript", "template"}
_STRUCK_TAGS = ["del", "s", "strike"]

MAX_NAME_LENGTH = 80
PRICE_MIN = 1000
RATING_MAX = 5.0
CONTEXT_MAX_LENGTH = 80
DESCRIPTION_MIN_LENGTH = 30

LATIN_NAME_RE = re.compile(r"^[A-Za-z0-9 .,'’&()/\-]+$")
PRICE_RE = re.compile(r"(?<![\d,])(\d{1,3}(?:,\d{3})+|\d{4,})\s*원")
RATING_TOKEN_RE = re.compile(r"^\d\.\d{1,2}$")
RATING_CONTEXT_RE = re.compile(r"/\s*\d|\(\s*\d[\d,]*\s*\)|리뷰|review", re.IGNORECASE)
COUNT_TOKEN_RE = re.compile(r"(?<![\d.])(\d[\d,]*)(?![\d.])")
REVIEW_COUNT_PATTERNS = (
    re.compile(r"리뷰\s*\(?\s*(\d[\d,]*)(?![\d.])"),
    re.compile(r"(?<![\d.])(\d[\d,]*)\s*개의?\s*리뷰"),
    re.compile(r"(?<![\d.])(\d[\d,]*)\s*reviews?", re.IGNORECASE),
    re.compile(r"reviews?\s*\(?\s*(\d[\d,]*)(?![\d.])", re.IGNORECASE),
)
DESCRIPTION_HINT_RE = re.compile(r"desc", re.IGNORECASE)
FORMATTING_TAGS = ["p", "br", "strong", "b", "em", "ul", "ol", "h3", "h4"]

TASTING_SECTION_TITLES = frozenset({"테이스팅노트", "tastingnotes", "tastingnote"})
STRUCTURAL_SECTION_TITLES = frozenset({
    "테이스팅노트", "tastingnotes", "tastingnote",
    "상품정보", "기본정보", "제품정보", "information", "productinformation",
    "리뷰", "상품리뷰", "reviews", "review",
})


# =========================================================================
# DOM HELPERS
# =========================================================================


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _is_visible(node: NavigableString) -> bool:
    if isinstance(node, Comment):
        return False
    parent = node.parent
    return parent is None or parent.name not in _INVISIBLE_TAGS


def _visible_strings(root: Tag) -> Iterator[NavigableString]:
    for node in root.find_all(string=True):
        if _is_visible(node) and node.strip():
            yield node


def _element_text(node: Union[Tag, NavigableString]) -> str:
    if isinstance(node, Tag):
        if node.name in _INVISIBLE_TAGS:
            return ""
        return _collapse(" ".join(s.strip() for s in _visible_strings(node)))
    if isinstance(node, NavigableString) and _is_visible(node):
        return _collapse(str(node))
    return ""


def _is_inside(node: Union[Tag, NavigableString], ancestor: Tag) -> bool:
    return any(parent is ancestor for parent in node.parents)


def _local_ancestors(element: Tag, levels: int) -> List[Tag]:
    ancestors = []
    current = element.parent
    while current is not None and current.name not in _BOUNDARY_TAGS and len(ancestors) < levels:
        ancestors.append(current)
        current = current.parent
    return ancestors


def _fold_title(title: str) -> str:
    return re.sub(r"[\s\d(),\[\]]+", "", title.lower())


class HTMLStructuralExtractor:
    """
    Extracts a PartialRecord from markup using structural heuristics.

    Field groups:
    - Names: primary heading plus a nearby Latin-only fragment
    - Price: currency-marked large integer
    - Rating / review count
    - Labeled attributes and tasting notes (rule tables)
    - Description sections
    - Image (og:image)
    """

    def __init__(
        self,
        attribute_rules: Tuple[AttributeRule, ...] = ATTRIBUTE_RULES,
        tasting_rules: Tuple[AttributeRule, ...] = TASTING_RULES,
    ):
        self.attribute_rules = attribute_rules
        self.tasting_rules = tasting_rules
        self.logger = LayerLogger("html_extractor")

    def extract(self, soup: BeautifulSoup, base_url: Optional[str] = None) -> HTMLExtraction:
        """
        Run every field group against the parsed page.

        Args:
            soup: Parsed page; it is only read, never modified
            base_url: Page URL, used to absolutize the image URL

        Returns:
            HTMLExtraction with a possibly empty PartialRecord
        """
        korean_name, english_name = self._run_group("names", lambda: self._extract_names(soup), (None, None))
        price = self._run_group("price", lambda: self._extract_price(soup), None)
        review_rate = self._run_group("rating", lambda: self._extract_rating(soup), None)
        review_count = self._run_group("review_count", lambda: self._extract_review_count(soup), None)
        information = self._run_group("attributes", lambda: self._extract_attributes(soup), ())
        tasting_notes = self._run_group("tasting_notes", lambda: self._extract_tasting_notes(soup), ())
        image_url = self._run_group("image", lambda: self._extract_og_image(soup, base_url), None)

        known_texts = [t for t in (korean_name, english_name) if t]
        for pair in information + tasting_notes:
            known_texts.extend([pair.label, pair.value])
        description = self._run_group(
            "description", lambda: self._extract_description(soup, known_texts), None
        )

        info_index = LabelValueIndex(information)
        tasting_index = LabelValueIndex(tasting_notes)
        record = PartialRecord(
            korean_name=korean_name,
            english_name=english_name,
            price=price,
            review_rate=review_rate,
            review_count=review_count,
            image_url=image_url,
            description=description,
            aroma=tasting_index.find(*TASTING_LABELS["aroma"]),
            taste=tasting_index.find(*TASTING_LABELS["taste"]),
            finish=tasting_index.find(*TASTING_LABELS["finish"]),
            **{field: info_index.find(*terms) for field, terms in INFORMATION_LABELS.items()},
        )

        self.logger.log_extraction(
            source="html",
            fields_present=record.present_fields(),
            fields_missing=record.missing_fields(),
        )
        return HTMLExtraction(record=record, information=information, tasting_notes=tasting_notes)

    def _run_group(self, group: str, extractor: Callable[[], T], default: T) -> T:
        """Run one field group in isolation so its failure cannot block the others."""
        try:
            return extractor()
        except Exception as e:
            self.logger.log_error(
                f"Field group failed: {str(e)}",
                error_type="field_group_error",
                group=group,
            )
            return default

    # =========================================================================
    # NAMES
    # =========================================================================

    def _extract_names(self, soup: BeautifulSoup) -> Tuple[Optional[str], Optional[str]]:
        """Primary heading text as the Korean name, nearby Latin text as the English name."""
        heading = next((h for h in soup.find_all("h1") if _element_text(h)), None)
        if heading is None:
            return None, None

        korean_name = _element_text(heading)
        for text in self._name_candidates(heading):
            if text != korean_name and self._is_latin_name(text):
                return korean_name, text
        return korean_name, None

    def _name_candidates(self, heading: Tag) -> Iterator[str]:
        """Texts near the heading, by decreasing locality."""
        siblings = list(heading.next_siblings) + list(heading.previous_siblings)
        for sibling in siblings:
            yield _element_text(sibling)
            if isinstance(sibling, Tag):
                for node in _visible_strings(sibling):
                    yield _collapse(str(node))

        for group in _local_ancestors(heading, levels=2):
            for node in _visible_strings(group):
                if not _is_inside(node, heading):
                    yield _collapse(str(node))

    def _is_latin_name(self, text: str) -> bool:
        if not text or len(text) > MAX_NAME_LENGTH:
            return False
        if not LATIN_NAME_RE.match(text):
            return False
        if len(re.findall(r"[A-Za-z]", text)) < 3:
            return False
        return not is_label_term(text)

    # =========================================================================
    # PRICE / RATING / REVIEWS
    # =========================================================================

    def _extract_price(self, soup: BeautifulSoup) -> Optional[str]:
        """First currency-marked large integer outside struck-through prices."""
        for node in soup.find_all(string=re.compile("원")):
            if not _is_visible(node) or node.find_parent(_STRUCK_TAGS):
                continue

            container = node.parent
            for _ in range(2):
                if container is None or container.name in _BOUNDARY_TAGS:
                    break
                text = _element_text(container)
                if len(text) > CONTEXT_MAX_LENGTH:
                    break
                match = PRICE_RE.search(text)
                if match:
                    value = parse_int(match.group(1))
                    if value is not None and value >= PRICE_MIN:
                        return match.group(1)
                container = container.parent
        return None

    def _extract_rating(self, soup: BeautifulSoup) -> Optional[str]:
        """A bare small decimal collocated with a count or the review word."""
        for node in _visible_strings(soup):
            token = node.strip()
            if not RATING_TOKEN_RE.match(token):
                continue
            if parse_rating(token, max_rating=RATING_MAX) is None:
                continue

            for container in _local_ancestors(node, levels=2):
                text = _element_text(container)
                if len(text) > CONTEXT_MAX_LENGTH:
                    break
                context = text.replace(token, " ", 1)
                if RATING_CONTEXT_RE.search(context):
                    return token
        return None

    def _extract_review_count(self, soup: BeautifulSoup) -> Optional[str]:
        """Review count from a review-listing link, else from a review phrase."""
        for link in soup.find_all("a", href=re.compile("review", re.IGNORECASE)):
            match = COUNT_TOKEN_RE.search(_element_text(link))
            if match:
                return match.group(1)

        text = _element_text(soup.body or soup)
        for pattern in REVIEW_COUNT_PATTERNS:
            match = pattern.search(text)
            if match:
                return match.group(1)
        return None

    # =========================================================================
    # LABELED ATTRIBUTES
    # =========================================================================

    def _extract_attributes(self, soup: BeautifulSoup) -> Tuple[LabelValuePair, ...]:
        return self._resolve_rules(soup, self.attribute_rules)

    def _extract_tasting_notes(self, soup: BeautifulSoup) -> Tuple[LabelValuePair, ...]:
        section = self._find_tasting_section(soup)
        if section is not None:
            self.logger.log_decision(
                decision="scoped_tasting_search",
                reason="tasting section heading found",
            )
        return self._resolve_rules(section if section is not None else soup, self.tasting_rules)

    def _find_tasting_section(self, soup: BeautifulSoup) -> Optional[Tag]:
        for element in soup.find_all(["h2", "h3", "h4", "strong", "div", "p", "span"]):
            if _fold_title(_element_text(element)) in TASTING_SECTION_TITLES:
                parent = element.parent
                if parent is not None and parent.name not in _BOUNDARY_TAGS:
                    return parent
        return None

    def _resolve_rules(self, root: Tag, rules: Tuple[AttributeRule, ...]) -> Tuple[LabelValuePair, ...]:
        pairs = []
        for rule in rules:
            value = self._resolve_label(root, rule)
            if value:
                pairs.append(LabelValuePair(label=rule.labels[0], label_alt=rule.labels[-1], value=value))
        return tuple(pairs)

    def _resolve_label(self, root: Tag, rule: AttributeRule) -> Optional[str]:
        """
        Resolve one rule to a value.

        For each element whose text equals one of the rule's labels, search
        by decreasing locality: its layout siblings, the rest of its
        enclosing group, then the siblings of the group's ancestors. An
        inline "label: value" element is accepted as a last resort.
        """
        wanted = {label.lower() for label in rule.labels}
        label_elements = [el for el in root.find_all(LABEL_TAGS) if _element_text(el).lower() in wanted]

        for label_element in label_elements:
            for search in (self._search_siblings, self._search_group, self._search_ancestor_siblings):
                value = search(label_element, rule)
                if value:
                    return value

        inline = re.compile(
            r"^(?:%s)\s*[:：]\s*(.+)$" % "|".join(re.escape(label) for label in rule.labels),
            re.IGNORECASE,
        )
        for element in root.find_all(LABEL_TAGS):
            match = inline.match(_element_text(element))
            if match and self._accept_value(match.group(1), rule):
                return match.group(1).strip()
        return None

    def _accept_value(self, text: str, rule: AttributeRule) -> bool:
        if not text or len(text) > rule.max_length:
            return False
        if not re.search(r"\w", text):
            return False
        return not is_label_term(text)

    def _search_siblings(self, label_element: Tag, rule: AttributeRule) -> Optional[str]:
        for sibling in label_element.next_siblings:
            text = _element_text(sibling)
            if not text:
                continue
            if is_label_term(text):
                break
            if self._accept_value(text, rule):
                return text
        return None

    def _search_group(self, label_element: Tag, rule: AttributeRule) -> Optional[str]:
        group = label_element.parent
        if group is None or group.name in _BOUNDARY_TAGS:
            return None

        for node in label_element.find_all_next(string=True):
            if not _is_inside(node, group):
                break
            if _is_inside(node, label_element) or not _is_visible(node):
                continue
            text = _collapse(str(node))
            if not text:
                continue
            if is_label_term(text):
                break
            if self._accept_value(text, rule):
                return text
        return None

    def _search_ancestor_siblings(self, label_element: Tag, rule: AttributeRule) -> Optional[str]:
        for ancestor in _local_ancestors(label_element, levels=2):
            for sibling in ancestor.find_next_siblings():
                text = _element_text(sibling)
                if not text:
                    continue
                if is_label_term(text) or _fold_title(text) in STRUCTURAL_SECTION_TITLES:
                    break
                if self._accept_value(text, rule):
                    return text
                first = next((_collapse(str(s)) for s in _visible_strings(sibling)), "")
                if first and not is_label_term(first) and self._accept_value(first, rule):
                    return first
                break
        return None

    # =========================================================================
    # DESCRIPTION / IMAGE
    # =========================================================================

    def _extract_description(self, soup: BeautifulSoup, known_texts: List[str]) -> Optional[str]:
        """Titled sections and description-marked elements with enough new text."""
        accepted_texts: List[str] = []
        sections: List[str] = []

        def accept(fragment: str, title: Optional[str] = None) -> None:
            cleaned = clean_rich_text(fragment)
            if not cleaned:
                return
            text = plain_text(cleaned)
            if len(text) < DESCRIPTION_MIN_LENGTH:
                return
            if self._residual_length(text, known_texts) < DESCRIPTION_MIN_LENGTH:
                return
            if any(text in seen or seen in text for seen in accepted_texts):
                return
            accepted_texts.append(text)
            sections.append(format_section(title, cleaned) if title else cleaned)

        for heading in soup.find_all(["h2", "h3"]):
            title = _element_text(heading)
            if not title or self._is_structural_title(title):
                continue
            accept(self._section_html(heading), title)

        formatted = soup.find_all(attrs={"class": DESCRIPTION_HINT_RE}) + soup.find_all(id=DESCRIPTION_HINT_RE)
        for element in formatted:
            if element.name in ("meta", "script", "style") or not element.find(FORMATTING_TAGS):
                continue
            accept(element.decode_contents())

        return "\n\n".join(sections) if sections else None

    def _is_structural_title(self, title: str) -> bool:
        folded = _fold_title(title)
        return folded in STRUCTURAL_SECTION_TITLES or folded.startswith(("리뷰", "review"))

    def _section_html(self, heading: Tag) -> str:
        """Markup between a heading and the next h1-h3."""
        anchor = heading
        parts = self._collect_until_heading(anchor)
        if not parts and heading.parent is not None and heading.parent.name not in _BOUNDARY_TAGS:
            parts = self._collect_until_heading(heading.parent)
        return "".join(parts)

    def _collect_until_heading(self, anchor: Tag) -> List[str]:
        parts = []
        for sibling in anchor.next_siblings:
            if isinstance(sibling, Tag):
                if sibling.name in ("h1", "h2", "h3") or sibling.find(["h1", "h2", "h3"]):
                    break
                parts.append(str(sibling))
            elif isinstance(sibling, NavigableString) and not isinstance(sibling, Comment):
                parts.append(str(sibling))
        return parts

    def _residual_length(self, text: str, known_texts: List[str]) -> int:
        residual = text
        for known in sorted(known_texts, key=len, reverse=True):
            if known:
                residual = residual.replace(known, " ")
        return len(re.sub(r"[\W_]+", "", residual))

    def _extract_og_image(self, soup: BeautifulSoup, base_url: Optional[str]) -> Optional[str]:
        """Extract og:image meta content."""
        og_image = soup.find("meta", property="og:image")
        if og_image and og_image.get("content"):
            src = og_image["content"].strip()
            if src:
                return urljoin(base_url, src) if base_url else src
        return None
