import itertools

import pytest

from similarity import jaro_winkler, similarity

_SAMPLES = [
    "",
    "a",
    "ab",
    "ba",
    "martha",
    "marhta",
    "dixon",
    "dicksonx",
    "deep learning for nlp",
    "deep learning for nlp tasks",
    "nlp for deep learning",
    "machine learning in healthcare",
    "healthcare machine learning",
    "abc",
    "cab",
    "xyz",
]


@pytest.mark.parametrize("first, second", list(itertools.combinations(_SAMPLES, 2)))
def test_similarity_is_symmetric_and_bounded(first: str, second: str) -> None:
    forward = similarity(first, second)
    backward = similarity(second, first)
    assert forward == pytest.approx(backward)
    assert 0.0 <= forward <= 1.0


@pytest.mark.parametrize("text", [s for s in _SAMPLES if s])
def test_similarity_is_reflexive(text: str) -> None:
    assert similarity(text, text) == pytest.approx(1.0)


@pytest.mark.parametrize("first, second", [("", ""), ("", "abc"), ("abc", "")])
def test_similarity_empty_is_zero(first: str, second: str) -> None:
    assert similarity(first, second) == 0.0


def test_jaro_winkler_reference_values() -> None:
    assert jaro_winkler("martha", "marhta") == pytest.approx(0.9611, abs=1e-4)
    assert jaro_winkler("dixon", "dicksonx") == pytest.approx(0.8133, abs=1e-4)


def test_jaro_winkler_no_common_characters() -> None:
    assert jaro_winkler("abc", "xyz") == 0.0


def test_prefix_bonus_rewards_shared_start() -> None:
    # Same characters, but only the second pair shares a prefix.
    assert jaro_winkler("xabcd", "yabcd") < jaro_winkler("abcdx", "abcdy")


def test_title_extension_scores_between_review_and_match() -> None:
    score = similarity("deep learning for nlp", "deep learning for nlp tasks")
    assert 0.90 < score <= 0.97


def test_zero_prefix_scale_gives_plain_jaro() -> None:
    assert jaro_winkler("martha", "marhta", prefix_scale=0.0) == pytest.approx(0.9444, abs=1e-4)
