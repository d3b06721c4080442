import pytest

from normalize import comparison_key, normalize_identifier, normalize_title


@pytest.mark.parametrize("raw, expected", [
    ("Machine Learning in Healthcare", "machine learning in healthcare"),
    ("  Machine   learning in\thealthcare. ", "machine learning in healthcare"),
    ("Deep-Learning: a (Gentle) Review!", "deeplearning a gentle review"),
    ("β-Catenin signalling", "betacatenin signalling"),
    ("Über Straße", "uber strasse"),
    ("Łódź revisited", "lodz revisited"),
])
def test_normalize_title_canonical_forms(raw: str, expected: str) -> None:
    assert normalize_title(raw) == expected


def test_normalize_title_roman_numerals_become_tokens() -> None:
    assert normalize_title("World War II") == "world war roman2"
    assert normalize_title("Part IV of the series") == "part roman4 of the series"


def test_normalize_title_keeps_non_latin_letters() -> None:
    assert normalize_title("Машинное обучение") == "машинное обучение"


@pytest.mark.parametrize("raw", [None, "", "   ", 42])
def test_normalize_title_missing_input_is_empty(raw: object) -> None:
    assert normalize_title(raw) == ""


def test_normalize_title_case_variants_compare_equal() -> None:
    assert normalize_title("Machine Learning in Healthcare") == normalize_title(
        "machine learning in healthcare"
    )


@pytest.mark.parametrize("raw, expected", [
    ("10.1000/XYZ", "10.1000/xyz"),
    (" https://doi.org/10.1000/xyz ", "10.1000/xyz"),
    ("http://dx.doi.org/10.1000/xyz", "10.1000/xyz"),
    ("doi:10.1000/xyz", "10.1000/xyz"),
])
def test_normalize_identifier_strips_resolver_prefixes(raw: str, expected: str) -> None:
    assert normalize_identifier(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "https://doi.org/"])
def test_normalize_identifier_missing_is_none(raw: str | None) -> None:
    assert normalize_identifier(raw) is None


def test_comparison_key_joins_columns_and_skips_empty() -> None:
    row = {"title": "Deep Learning", "journal": None, "year": 2020}
    assert comparison_key(row, ["title", "journal", "year"]) == "deep learning 2020"


def test_comparison_key_all_empty_is_empty() -> None:
    assert comparison_key({"title": "", "journal": None}, ["title", "journal"]) == ""
