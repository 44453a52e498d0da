"""Tests for rich-text cleanup."""
from whiskey_crawler.utils.rich_text import (
    build_description_from_remarks,
    clean_rich_text,
    decode_escapes,
    format_section,
    plain_text,
)


def test_strips_images_and_empty_containers():
    cleaned = clean_rich_text('<p>부드러운 풍미<img src="a.jpg"></p><p><img src="b.jpg"></p><div> </div>')
    assert cleaned == "<p>부드러운 풍미</p>"


def test_strips_style_and_script_blocks():
    cleaned = clean_rich_text("<style>p { color: red }</style><p>본문</p><script>track()</script>")
    assert cleaned == "<p>본문</p>"


def test_decodes_literal_escapes():
    assert decode_escapes("\\u003cp\\u003e하이볼\\u003c/p\\u003e") == "<p>하이볼</p>"
    assert clean_rich_text("\\u003cp\\u003e하이볼\\u003c/p\\u003e") == "<p>하이볼</p>"


def test_decodes_entities():
    assert decode_escapes("&lt;b&gt;진한&lt;/b&gt;&nbsp;맛") == "<b>진한</b> 맛"


def test_collapses_whitespace():
    cleaned = clean_rich_text("<p>첫 문장    둘째\n\n\n\n셋째</p>")
    assert cleaned == "<p>첫 문장 둘째\n\n셋째</p>"


def test_idempotent():
    raw = '<div><p>숙성 <strong>12년</strong></p>\n\n<p><img src="x"></p><br/>여운</div>'
    once = clean_rich_text(raw)
    assert clean_rich_text(once) == once


def test_idempotent_with_entity_encoded_tags():
    raw = "<p>태그 예시 &amp;lt;b&amp;gt;굵게&amp;lt;/b&amp;gt; 입니다</p>"

    once = clean_rich_text(raw)

    assert "&lt;b&gt;" not in once
    assert "<b>" not in once
    assert clean_rich_text(once) == once


def test_markup_keeps_entities_for_the_parser():
    assert clean_rich_text("<p>진저&nbsp;에일 &amp; 하이볼</p>") == "<p>진저 에일 &amp; 하이볼</p>"


def test_nothing_readable_is_absent():
    assert clean_rich_text(None) is None
    assert clean_rich_text("   ") is None
    assert clean_rich_text('<p><img src="a.jpg"></p>') is None


def test_format_section():
    assert format_section("소개", "<p>본문</p>") == "<h3><strong>소개</strong></h3>\n\n<p>본문</p>"


def test_build_description_from_remarks_keeps_order():
    remarks = [
        {"title": "브랜드 스토리", "description": "<p>1887년 설립</p>"},
        {"title": "", "description": "<p>제목 없음</p>"},
        {"title": "빈 본문", "description": '<img src="a.jpg">'},
        "junk",
        {"title": "테이스팅", "content": "<p>과일향</p>"},
    ]

    description = build_description_from_remarks(remarks)

    assert description == (
        "<h3><strong>브랜드 스토리</strong></h3>\n\n<p>1887년 설립</p>"
        "\n\n"
        "<h3><strong>테이스팅</strong></h3>\n\n<p>과일향</p>"
    )


def test_build_description_without_remarks():
    assert build_description_from_remarks(None) is None
    assert build_description_from_remarks([]) is None


def test_plain_text():
    assert plain_text("<p>가나다</p><p>라마</p>") == "가나다 라마"
    assert plain_text(None) == ""
