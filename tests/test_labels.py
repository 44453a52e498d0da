"""Tests for label-value rows and lookup."""
from whiskey_crawler.models.record import LabelValuePair
from whiskey_crawler.utils.labels import LabelValueIndex, coerce_pairs, is_label_term


def test_coerce_pairs_skips_malformed_entries():
    raw = [
        {"label": "용량", "value": "700ml"},
        "not an object",
        {"label": "도수"},
        {"value": "orphan value"},
        {"label": "Aroma", "label_ko": "향", "value": "바닐라"},
    ]

    pairs = coerce_pairs(raw)

    assert [p.label for p in pairs] == ["용량", "Aroma"]
    assert pairs[1].label_alt == "향"


def test_coerce_pairs_joins_list_values():
    pairs = coerce_pairs([{"label": "향", "value": ["바닐라", "꿀", ""]}])
    assert pairs[0].value == "바닐라, 꿀"


def test_coerce_pairs_non_list_input():
    assert coerce_pairs(None) == ()
    assert coerce_pairs({"label": "용량"}) == ()


def test_index_matches_label_alt_and_case():
    index = LabelValueIndex([
        LabelValuePair(label="Aroma", label_alt="향", value="바닐라"),
        LabelValuePair(label="PALATE", value="꿀"),
    ])

    assert index.find("향") == "바닐라"
    assert index.find("aroma") == "바닐라"
    assert index.find("맛", "Taste", "Palate") == "꿀"
    assert index.find("여운", "Finish") is None


def test_index_first_match_wins():
    index = LabelValueIndex([
        LabelValuePair(label="용량", value="700ml"),
        LabelValuePair(label="용량", value="1000ml"),
    ])
    assert index.find("용량") == "700ml"


def test_index_candidate_order():
    index = LabelValueIndex([
        LabelValuePair(label="Type", value="Single Malt"),
        LabelValuePair(label="종류", value="싱글몰트"),
    ])
    assert index.find("종류", "Type") == "싱글몰트"


def test_is_label_term():
    assert is_label_term("용량")
    assert is_label_term(" finish ")
    assert not is_label_term("700ml")
