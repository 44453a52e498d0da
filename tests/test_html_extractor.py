"""Tests for the HTML structural extractor."""
import pytest

from whiskey_crawler.adapters.html_extractor import ATTRIBUTE_RULES, TASTING_RULES, HTMLStructuralExtractor


@pytest.fixture
def extractor():
    return HTMLStructuralExtractor()


def _extract(extractor, make_soup, html, base_url=None):
    return extractor.extract(make_soup(html), base_url=base_url).record


def test_heading_and_sibling_latin_name(extractor, make_soup, heading_only_page):
    record = _extract(extractor, make_soup, heading_only_page)

    assert record.korean_name == "맥캘란 18년"
    assert record.english_name == "Macallan 18yo"


def test_latin_name_found_in_ancestor_group(extractor, make_soup, html_only_page):
    record = _extract(extractor, make_soup, html_only_page)

    assert record.korean_name == "발베니 14년 캐리비안 캐스크"
    assert record.english_name == "The Balvenie 14 Years Old"


def test_latin_name_rejects_long_or_mixed_text(extractor, make_soup):
    html = (
        "<div><h1>글렌드로낙 15년</h1>"
        "<p>Glendronach 15 리바이벌</p>"
        "<p>" + "A very long marketing sentence " * 4 + "</p></div>"
    )

    record = _extract(extractor, make_soup, html)

    assert record.korean_name == "글렌드로낙 15년"
    assert record.english_name is None


def test_price_skips_struck_through_price(extractor, make_soup, html_only_page):
    assert _extract(extractor, make_soup, html_only_page).price == "162,000"


def test_price_split_across_elements(extractor, make_soup):
    html = '<div class="price"><span>150,000</span><span>원</span></div>'
    assert _extract(extractor, make_soup, html).price == "150,000"


@pytest.mark.parametrize(
    "html",
    [
        "<p>3개 구매시 500원 할인</p>",
        "<p>가격 150000</p>",
        "<p>원산지 스코틀랜드</p>",
    ],
)
def test_price_needs_currency_and_large_number(extractor, make_soup, html):
    assert _extract(extractor, make_soup, html).price is None


def test_rating_and_review_link(extractor, make_soup, html_only_page):
    record = _extract(extractor, make_soup, html_only_page)

    assert record.review_rate == "4.6"
    assert record.review_count == "1,024"


def test_rating_needs_context(extractor, make_soup):
    html = "<div><span>도수</span><span>4.5</span></div>"
    assert _extract(extractor, make_soup, html).review_rate is None


def test_review_count_from_phrase(extractor, make_soup):
    html = "<div><span>4.8</span> <span>(231)</span></div><p>총 231개의 리뷰</p>"

    record = _extract(extractor, make_soup, html)

    assert record.review_rate == "4.8"
    assert record.review_count == "231"


def test_labeled_attributes(extractor, make_soup, html_only_page):
    record = _extract(extractor, make_soup, html_only_page)

    assert record.type == "싱글몰트 위스키"
    assert record.volume == "700ml"
    assert record.abv == "43%"
    assert record.region == "스페이사이드"
    assert record.cask == "럼 캐스크 피니시"
    assert record.country is None


def test_attribute_label_wrapped_in_container(extractor, make_soup):
    html = (
        '<ul class="product-attrs">'
        "<li><div><span>용량</span></div><div><em>500ml</em></div></li>"
        "<li><div><span>국가</span></div><div><em>일본</em></div></li>"
        "</ul>"
    )

    record = _extract(extractor, make_soup, html)

    assert record.volume == "500ml"
    assert record.country == "일본"


def test_attribute_value_nested_in_same_group(extractor, make_soup):
    html = (
        "<div class=\"row\"><span>용량</span>"
        "<div><em>700ml</em><p>" + "병 디자인과 패키지는 입고 시기에 따라 다를 수 있습니다. " * 2 + "</p></div>"
        "</div>"
    )
    assert _extract(extractor, make_soup, html).volume == "700ml"


def test_attribute_value_in_ancestor_sibling(extractor, make_soup):
    html = (
        "<div class=\"table\">"
        "<div class=\"cell\"><div class=\"head\"><span>도수</span><i>*</i></div></div>"
        "<div class=\"cell\">45%</div>"
        "</div>"
    )
    assert _extract(extractor, make_soup, html).abv == "45%"


def test_attribute_does_not_borrow_next_row(extractor, make_soup):
    html = "<dl><dt>종류</dt><dd></dd><dt>용량</dt><dd>700ml</dd></dl>"

    record = _extract(extractor, make_soup, html)

    assert record.type is None
    assert record.volume == "700ml"


def test_inline_label_value(extractor, make_soup):
    html = "<ul><li>도수: 46%</li></ul>"
    assert _extract(extractor, make_soup, html).abv == "46%"


def test_tasting_notes_scoped_to_section(extractor, make_soup, html_only_page):
    extraction = extractor.extract(make_soup(html_only_page))
    record = extraction.record

    assert record.aroma == "토피, 바닐라, 열대과일"
    assert record.taste == "달콤한 꿀과 오크"
    assert record.finish == "길고 부드러운 여운"
    assert [p.label for p in extraction.tasting_notes] == ["향", "맛", "여운"]


def test_tasting_notes_global_without_section(extractor, make_soup):
    html = "<div><div><b>향</b><span>피트 스모크</span></div><div><b>맛</b><span>요오드, 바다소금</span></div></div>"

    record = _extract(extractor, make_soup, html)

    assert record.aroma == "피트 스모크"
    assert record.taste == "요오드, 바다소금"
    assert record.finish is None


def test_description_sections(extractor, make_soup, html_only_page):
    description = _extract(extractor, make_soup, html_only_page).description

    assert description.startswith("<h3><strong>상품 설명</strong></h3>\n\n<p>카리브해산 럼을")
    assert "맛있어요" not in description
    assert "테이스팅" not in description


def test_description_rejects_repeated_attributes(extractor, make_soup):
    html = (
        "<h2>상세 정보</h2>"
        '<div class="info"><dl>'
        "<dt>종류</dt><dd>블렌디드 몰트 위스키</dd>"
        "<dt>국가</dt><dd>스코틀랜드</dd>"
        "<dt>지역</dt><dd>스페이사이드</dd>"
        "<dt>용량</dt><dd>700ml</dd>"
        "</dl></div>"
    )

    record = _extract(extractor, make_soup, html)

    assert record.type == "블렌디드 몰트 위스키"
    assert record.description is None


def test_description_from_formatted_element(extractor, make_soup):
    html = (
        '<div class="product-desc"><p>셰리 오크 캐스크에서 숙성해 건포도와 다크 초콜릿 풍미가 풍부하며, '
        "<strong>긴 여운</strong>이 인상적인 위스키입니다.</p></div>"
    )

    description = _extract(extractor, make_soup, html).description

    assert description.startswith("<p>셰리 오크 캐스크에서")
    assert "<strong>긴 여운</strong>" in description


def test_short_description_is_rejected(extractor, make_soup):
    html = "<h2>한줄평</h2><p>좋아요</p>"
    assert _extract(extractor, make_soup, html).description is None


def test_og_image_resolved_against_page_url(extractor, make_soup, html_only_page, product_url):
    record = _extract(extractor, make_soup, html_only_page, base_url=product_url)
    assert record.image_url == "https://dailyshot.co/images/bottle.jpg"


def test_nothing_found_on_unrelated_page(extractor, make_soup, empty_page):
    assert _extract(extractor, make_soup, empty_page).present_fields() == []


def test_field_group_failure_is_isolated(extractor, make_soup, html_only_page, mocker):
    mocker.patch.object(extractor, "_extract_price", side_effect=RuntimeError("boom"))

    record = _extract(extractor, make_soup, html_only_page)

    assert record.price is None
    assert record.korean_name == "발베니 14년 캐리비안 캐스크"
    assert record.volume == "700ml"


def test_extraction_does_not_modify_document(extractor, make_soup, html_only_page):
    soup = make_soup(html_only_page)
    before = str(soup)

    extractor.extract(soup)

    assert str(soup) == before


def test_rule_tables():
    assert [rule.field for rule in ATTRIBUTE_RULES] == ["type", "volume", "abv", "country", "region", "cask"]
    assert [rule.field for rule in TASTING_RULES] == ["aroma", "taste", "finish"]
