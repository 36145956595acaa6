"""Tests for the decision step."""

from markpick.decide import decide
from markpick.types import PerImageResult, Rule, RuleKind


def _results(metrics, totals=None):
    totals = totals or [4] * len(metrics)
    return [PerImageResult(i, t, m) for i, (m, t) in enumerate(zip(metrics, totals))]


MAX_RULE = Rule(RuleKind.MAXIMUM)


def test_maximum_picks_largest_metric():
    d = decide(MAX_RULE, _results([0, 3, 1, 2]))
    assert d.selected_index == 1
    assert d.approximate is False


def test_maximum_tie_prefers_fewer_shapes():
    d = decide(MAX_RULE, _results([2, 3, 3], totals=[4, 6, 4]))
    assert d.selected_index == 2


def test_maximum_full_tie_prefers_lowest_index():
    d = decide(MAX_RULE, _results([3, 3, 1]))
    assert d.selected_index == 0


def test_maximum_all_zero_is_no_decision():
    d = decide(MAX_RULE, _results([0, 0, 0]))
    assert d.selected_index is None
    assert not d.decided


def test_maximum_empty_results():
    assert decide(MAX_RULE, []).selected_index is None


def test_exact_match():
    d = decide(Rule(RuleKind.EXACT_COUNT, target=2), _results([0, 3, 1, 2]))
    assert d.selected_index == 3
    assert d.approximate is False


def test_exact_first_match_wins():
    d = decide(Rule(RuleKind.EXACT_COUNT, target=1), _results([1, 1]))
    assert d.selected_index == 0


def test_exact_fallback_nearest_is_approximate():
    d = decide(Rule(RuleKind.EXACT_COUNT, target=5), _results([0, 3, 1, 2]))
    assert d.selected_index == 1
    assert d.approximate is True


def test_exact_fallback_tie_takes_lowest_index():
    d = decide(Rule(RuleKind.EXACT_COUNT, target=2), _results([0, 3, 1, 4]))
    assert d.selected_index == 1
    assert d.approximate is True


def test_exact_zero_target_matches_zero():
    d = decide(Rule(RuleKind.EXACT_COUNT, target=0), _results([2, 0, 1]))
    assert d.selected_index == 1
    assert d.approximate is False


def test_exact_missing_target_counts_toward_zero():
    d = decide(Rule(RuleKind.EXACT_COUNT, target=None), _results([2, 1, 3]))
    assert d.selected_index == 1
    assert d.approximate is True


def test_exact_without_results():
    assert decide(Rule(RuleKind.EXACT_COUNT, target=2), []).selected_index is None


def test_outlier_and_unknown_are_no_decision():
    for kind in (RuleKind.OUTLIER, RuleKind.UNKNOWN):
        d = decide(Rule(kind), _results([0, 3, 1]))
        assert d.selected_index is None
        assert d.approximate is False
