import pytest

from coinsdash.analytics.snapshot import compute_snapshot
from coinsdash.data.schemas import ActionFilter, empty_frame, records_from_frame


def test_snapshot_without_bonus(sample_records):
    snap = compute_snapshot(sample_records, ActionFilter(include_bonus=False))

    assert snap.unique_users == 2
    assert snap.total_coins == 110.0
    assert snap.avg_coins_per_user == 55.0
    assert snap.transaction_count == 2
    assert [a["action"] for a in snap.per_action_stats] == ["buy_gift"]
    assert [p["action"] for p in snap.pie_distribution] == ["buy_gift"]
    assert snap.quantile["total_coins"] == 110.0


def test_snapshot_views_agree_on_total(sample_records):
    snap = compute_snapshot(sample_records)

    assert snap.total_coins == 115.0
    assert sum(a["total_coins"] for a in snap.per_action_stats) == snap.total_coins
    assert sum(p["total_coins"] for p in snap.pie_distribution) == snap.total_coins
    assert sum(b["coin_sum"] for b in snap.quantile["buckets"]) == snap.total_coins
    assert sum(t["coins"] for t in snap.timeline) == snap.total_coins


def test_snapshot_does_not_touch_input(sample_records):
    before = sample_records.copy()

    compute_snapshot(sample_records, ActionFilter(include_bonus=False), by_action=True)

    assert sample_records.equals(before)


@pytest.mark.parametrize("flt", [None, ActionFilter(include_bonus=False)])
def test_snapshot_is_repeatable(sample_records, flt):
    first = compute_snapshot(sample_records, flt, by_action=True).as_dict()
    second = compute_snapshot(sample_records, flt, by_action=True).as_dict()

    assert first == second
    assert first["timeline"]


def test_snapshot_excluded_actions(sample_records):
    snap = compute_snapshot(sample_records, ActionFilter(excluded_actions=frozenset({"buy_gift"})))

    assert snap.unique_users == 1
    assert snap.total_coins == 5.0


def test_empty_snapshot_as_dict():
    d = compute_snapshot(empty_frame()).as_dict()

    assert d["unique_users"] == 0
    assert d["per_action_stats"] == []
    assert d["timeline"] == []
    assert len(d["quantile"]["buckets"]) == 5


def test_records_from_frame_round_trip(sample_records):
    records = records_from_frame(sample_records)

    assert records[1].action == "redeem_bonus"
    assert records[1].timestamp == 1_700_000_030.0
