"""Shared sample pages for the extraction tests."""
import pytest
from bs4 import BeautifulSoup

PRODUCT_URL = "https://dailyshot.co/m/item/1234"

FULL_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta property="og:image" content="https://img.dailyshot.co/glenfiddich.jpg">
<script id="__NEXT_DATA__" type="application/json">
{"props": {"pageProps": {"dehydratedState": {"queries": [
  {"state": {"data": {"user": null}}},
  {"state": {"data": {"item": {
    "name": "글렌피딕 12년",
    "en_name": "Glenfiddich 12yo",
    "price": "89,000",
    "review_rate": 4.3,
    "information": [
      {"label": "종류", "value": "싱글몰트 위스키"},
      {"label": "용량", "value": "700ml"},
      {"label": "도수", "value": "40%"},
      {"label": "지역", "value": "스페이사이드"}
    ],
    "tasting_notes": [
      {"label": "Aroma", "label_ko": "향", "value": "서양배, 사과"}
    ],
    "comments": [
      {"title": "브랜드 스토리", "description": "\\u003cp\\u003e1887년 설립된 증류소\\u003c/p\\u003e"}
    ]
  }}}}
]}}}}
</script>
</head>
<body>
<h1>글렌피딕 12년</h1>
<a href="/m/item/1234/reviews">리뷰 57</a>
</body>
</html>
"""

INITIAL_STATE_PAGE = """<html><head>
<script>window.__INITIAL_STATE__ = {"item": {"name": "글렌피딕 12년", "price": "150,000", "information": [{"label": "용량", "value": "700ml"}]}};</script>
</head><body></body></html>
"""

HEADING_ONLY_PAGE = """<html><body>
<div class="product-title">
  <h1>맥캘란 18년</h1>
  <p>Macallan 18yo</p>
</div>
</body></html>
"""

HTML_ONLY_PAGE = """<html>
<head><meta property="og:image" content="/images/bottle.jpg"></head>
<body>
<div class="title-group">
  <div><h1>발베니 14년 캐리비안 캐스크</h1></div>
  <span>The Balvenie 14 Years Old</span>
</div>
<div class="price-box">
  <span class="discount">10%</span>
  <del>180,000원</del>
  <strong>162,000원</strong>
</div>
<div class="rating"><span>4.6</span><span>/ 5</span></div>
<a href="/m/item/1234/reviews">리뷰 (1,024)</a>
<div class="info">
  <dl>
    <dt>종류</dt><dd>싱글몰트 위스키</dd>
    <dt>용량</dt><dd>700ml</dd>
    <dt>도수</dt><dd>43%</dd>
    <dt>지역</dt><dd>스페이사이드</dd>
    <dt>캐스크</dt><dd>럼 캐스크 피니시</dd>
  </dl>
</div>
<section>
  <h3>테이스팅 노트</h3>
  <div><strong>Aroma</strong><p>토피, 바닐라, 열대과일</p></div>
  <div><strong>Taste</strong><p>달콤한 꿀과 오크</p></div>
  <div><strong>Finish</strong><p>길고 부드러운 여운</p></div>
</section>
<h2>상품 설명</h2>
<p>카리브해산 럼을 담았던 캐스크에서 마무리 숙성하여 부드럽고 달콤한 풍미가 돋보이는 싱글몰트 위스키입니다.</p>
<h2>리뷰 (1,024)</h2>
<p>맛있어요</p>
</body>
</html>
"""

EMPTY_PAGE = "<html><body><p>페이지를 찾을 수 없습니다</p></body></html>"


@pytest.fixture
def product_url():
    return PRODUCT_URL


@pytest.fixture
def full_page():
    return FULL_PAGE


@pytest.fixture
def initial_state_page():
    return INITIAL_STATE_PAGE


@pytest.fixture
def heading_only_page():
    return HEADING_ONLY_PAGE


@pytest.fixture
def html_only_page():
    return HTML_ONLY_PAGE


@pytest.fixture
def empty_page():
    return EMPTY_PAGE


@pytest.fixture
def make_soup():
    def _make(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")
    return _make
