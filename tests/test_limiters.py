"""Tests for match ceilings and result caps."""

from core.limiters import MatchLimiter, ResultCapLimiter


def test_estimate_options():
    opts = MatchLimiter(num_results=50, max_wall_time=3).estimate_options()
    assert opts.estimate_doc_count
    assert opts.max_wall_time == 3


def test_large_corpus_caps_shard_matches():
    opts = MatchLimiter(num_results=50).options_for(10001)
    assert opts.shard_max_match_count == 250 + 250 // 10
    assert opts.shard_max_important_match == 2 + 50 // 20
    assert opts.total_max_match_count == 0
    assert opts.max_doc_display_count == 50


def test_small_corpus_is_virtually_unbounded():
    opts = MatchLimiter(num_results=50).options_for(1000, whole=True)
    n = 1000 + 5000
    assert opts.whole
    assert (
        opts.shard_max_match_count,
        opts.total_max_match_count,
        opts.shard_max_important_match,
        opts.total_max_important_match,
    ) == (n, n, n, n)


def test_options_json_leaves_out_unset_caps():
    data = MatchLimiter(num_results=10, max_wall_time=10).options_for(20000).to_json()
    assert data["MaxWallTime"] == 10_000_000_000
    assert data["MaxDocDisplayCount"] == 10
    assert "TotalMaxMatchCount" not in data


def test_result_cap():
    cap = ResultCapLimiter(2)
    assert cap.apply([1, 2, 3]) == [1, 2]
    assert cap.apply([1]) == [1]
