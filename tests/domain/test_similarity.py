from __future__ import annotations

import pytest

from reftidy.domain.similarity import similarity


def test_identical_strings_score_one() -> None:
    assert similarity("Deep Learning", "Deep Learning") == 1.0


def test_similarity_ignores_case() -> None:
    assert similarity("Deep Learning", "deep learning") == 1.0


def test_similarity_is_symmetric() -> None:
    assert similarity("night", "nacht") == similarity("nacht", "night")


def test_known_dice_coefficient() -> None:
    # {ni, ig, gh, ht} vs {na, ac, ch, ht}: one shared bigram of eight
    assert similarity("night", "nacht") == pytest.approx(0.25)


@pytest.mark.parametrize(("left", "right"), [("a", "ab"), ("", "abc"), ("x", "y")])
def test_short_strings_without_bigrams_score_zero(left: str, right: str) -> None:
    assert similarity(left, right) == 0.0


def test_equal_single_characters_still_match() -> None:
    assert similarity("a", "A") == 1.0


def test_distinct_strings_never_score_one() -> None:
    # "aba" and "bab" share the bigram multiset {ab, ba}
    assert similarity("aba", "bab") < 1.0
    assert similarity("abab", "abab ") < 1.0


def test_similarity_stays_in_unit_interval() -> None:
    pairs = [("graph theory", "graph theroy"), ("abc", "xyz"), ("aaaa", "aa")]
    for left, right in pairs:
        assert 0.0 <= similarity(left, right) <= 1.0
