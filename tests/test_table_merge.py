import pytest

from table_merge import merge_tables


def test_primary_table_wins_on_key_collision() -> None:
    tables = {
        "scopus": [{"Title": "Graph Networks", "Year": "2020", "from": "scopus"}],
        "wos": [{"name": " graph networks ", "yr": "2020", "from": "wos"}],
    }
    keys = {"scopus": ["Title", "Year"], "wos": ["name", "yr"]}

    rows = merge_tables(tables, keys, primary="wos")

    assert [r["from"] for r in rows] == ["wos"]


def test_non_primary_tables_rank_by_input_order() -> None:
    tables = {
        "primary": [{"t": "Other"}],
        "second": [{"t": "Shared", "from": "second"}],
        "third": [{"t": "shared", "from": "third"}],
    }
    keys = {"primary": ["t"], "second": ["t"], "third": ["t"]}

    rows = merge_tables(tables, keys, primary="primary")

    assert [r.get("from") for r in rows] == [None, "second"]


def test_rows_with_empty_keys_are_dropped() -> None:
    tables = {"a": [{"t": ""}, {"t": None}, {"t": "Kept"}]}

    rows = merge_tables(tables, {"a": ["t"]}, primary="a")

    assert rows == [{"t": "Kept"}]


def test_unconfigured_tables_are_ignored() -> None:
    tables = {"a": [{"t": "One"}], "b": [{"t": "Two"}]}

    rows = merge_tables(tables, {"a": ["t"]}, primary="a")

    assert rows == [{"t": "One"}]


@pytest.mark.parametrize("keys, primary", [
    ({}, "a"),
    ({"a": ["t"]}, "b"),
    ({"a": []}, "a"),
    ({"a": ["t"], "b": ["t", "u"]}, "a"),
])
def test_invalid_key_configuration_raises(keys: dict, primary: str) -> None:
    tables = {"a": [{"t": "x", "u": "y"}], "b": [{"t": "x", "u": "y"}]}

    with pytest.raises(ValueError):
        merge_tables(tables, keys, primary=primary)
