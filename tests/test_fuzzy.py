import pytest

from thirdrail.fuzzy import find

STATIONS = ["Midtown", "Arts Center", "Five Points", "West End", "West Lake", "Northwest Lake"]


def test_empty_pattern_matches_nothing():
    assert find("", STATIONS) == []


def test_no_subsequence_means_no_match():
    assert find("xyz", STATIONS) == []


def test_match_reports_candidate_and_index():
    results = find("mid", STATIONS)
    assert [m.string for m in results] == ["Midtown"]
    assert results[0].index == STATIONS.index("Midtown")


@pytest.mark.parametrize("pattern", ["mid", "WL", "pts", "west", "e"])
def test_matched_indexes_form_the_pattern(pattern):
    results = find(pattern, STATIONS)
    assert results
    for match in results:
        assert len(match.matched_indexes) == len(pattern)
        assert match.matched_indexes == sorted(set(match.matched_indexes))
        for char, position in zip(pattern, match.matched_indexes):
            assert match.string[position].lower() == char.lower()
        assert STATIONS[match.index] == match.string


@pytest.mark.parametrize("pattern", ["e", "st", "w"])
def test_results_are_ordered_by_score(pattern):
    scores = [m.score for m in find(pattern, STATIONS)]
    assert scores == sorted(scores, reverse=True)


def test_exact_word_beats_buried_word():
    results = find("west", ["Northwest Lake", "West"])
    assert results[0].string == "West"
    assert results[0].score > results[1].score


def test_matching_is_case_insensitive():
    assert [m.string for m in find("FIVE", STATIONS)] == ["Five Points"]


def test_empty_candidate_never_matches():
    assert find("a", ["", "a"])[0].index == 1
    assert len(find("a", ["", "a"])) == 1