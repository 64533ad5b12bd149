import numpy as np
import pandas as pd
import pytest

from movr.core.sessions import (
    Session,
    compress_movement,
    compress_sessions,
    sessions_to_frame,
)
from movr.core.spec_errors import InvalidThreshold, MissingColumns, ShapeMismatch


def test_basic_scenario():
    sessions = compress_sessions([1, 1, 2, 2], [0, 5, 100, 105], 10)
    assert sessions == [Session(1, 0.0, 5.0), Session(2, 100.0, 105.0)]


def test_empty_input_returns_empty_list():
    assert compress_sessions([], [], 10) == []


def test_single_observation():
    assert compress_sessions(["a"], [42.0], 0) == [Session("a", 42.0, 42.0)]


def test_gap_exceeded_splits_same_location():
    sessions = compress_sessions(["a", "a", "a"], [0, 5, 20], 10)
    assert sessions == [Session("a", 0.0, 5.0), Session("a", 20.0, 20.0)]


def test_gap_is_inclusive():
    sessions = compress_sessions(["a", "a"], [0, 10], 10)
    assert sessions == [Session("a", 0.0, 10.0)]


def test_zero_gap_merges_only_simultaneous_pings():
    sessions = compress_sessions(["a", "a", "a"], [0, 0, 1], 0)
    assert sessions == [Session("a", 0.0, 0.0), Session("a", 1.0, 1.0)]


def test_compounding_gap_extends_session_beyond_threshold():
    # 各刻みは gap 以内なので、全体長 40 秒が gap=10 を超えても1セッションになる
    times = [0, 10, 20, 30, 40]
    sessions = compress_sessions(["x"] * 5, times, 10)
    assert sessions == [Session("x", 0.0, 40.0)]
    assert sessions[0].duration == 40.0


def test_location_change_always_opens_new_session():
    sessions = compress_sessions(["a", "b", "a"], [0, 1, 2], 100)
    assert [s.location for s in sessions] == ["a", "b", "a"]


def test_unsorted_input_is_ordered_by_time():
    sessions = compress_sessions([2, 1, 2, 1], [105, 5, 100, 0], 10)
    assert sessions == [Session(1, 0.0, 5.0), Session(2, 100.0, 105.0)]


def test_shuffle_invariance(make_trace, shuffled):
    df = make_trace()
    expected = compress_sessions(df["location"].tolist(), df["timestamp"].tolist(), 120)
    for seed in (0, 1, 7):
        other = shuffled(df, seed)
        got = compress_sessions(other["location"].tolist(), other["timestamp"].tolist(), 120)
        assert got == expected


def test_shuffle_invariance_with_series_columns(make_trace):
    """インデックスを振り直さないシャッフル済み列をそのまま渡しても結果は変わらない。"""
    df = make_trace()
    expected = compress_sessions(df["location"], df["timestamp"], 120)
    for seed in (0, 1, 7):
        other = df.iloc[np.random.default_rng(seed).permutation(len(df))]
        assert compress_sessions(other["location"], other["timestamp"], 120) == expected


def test_series_sorted_descending_keeps_pairs():
    df = pd.DataFrame({"location": ["a", "b", "c"], "timestamp": [0.0, 100.0, 200.0]})
    desc = df.sort_values("timestamp", ascending=False)
    sessions = compress_sessions(desc["location"], desc["timestamp"], 10)
    assert sessions == [Session("a", 0.0, 0.0), Session("b", 100.0, 100.0), Session("c", 200.0, 200.0)]


def test_filtered_series_index_not_starting_at_zero():
    df = pd.DataFrame({"location": ["a", "b", "b"], "timestamp": [0.0, 100.0, 105.0]})
    kept = df[df["timestamp"] > 50]
    assert list(kept.index) == [1, 2]
    assert compress_sessions(kept["location"], kept["timestamp"], 10) == [Session("b", 100.0, 105.0)]


def test_invariants_hold(make_trace):
    df = make_trace(route=("a", "b", "c", "b", "a"), pings=5)
    sessions = compress_sessions(df["location"].tolist(), df["timestamp"].tolist(), 60)
    assert len(sessions) == 5
    for prev, cur in zip(sessions, sessions[1:]):
        assert prev.location != cur.location
        assert prev.end_time <= cur.start_time
    assert all(s.start_time <= s.end_time for s in sessions)


def test_numpy_locations_are_returned_as_python_values():
    sessions = compress_sessions(np.array([3, 3]), np.array([0.0, 1.0]), 5)
    assert type(sessions[0].location) is int


def test_shape_mismatch():
    with pytest.raises(ShapeMismatch) as ei:
        compress_sessions([1, 2], [0.0], 10)
    assert ei.value.code == -2101


@pytest.mark.parametrize("gap", [-1, float("nan"), "soon"])
def test_invalid_gap(gap):
    with pytest.raises(InvalidThreshold):
        compress_sessions([1], [0.0], gap)


def test_sessions_to_frame_columns():
    df = sessions_to_frame([Session("a", 0.0, 5.0), Session("b", 10.0, 10.0)])
    assert list(df.columns) == ["location", "start_time", "end_time", "duration"]
    assert df["duration"].tolist() == [5.0, 0.0]


def test_sessions_to_frame_empty():
    df = sessions_to_frame([])
    assert df.empty
    assert list(df.columns) == ["location", "start_time", "end_time", "duration"]


def test_compress_movement_with_datetimes():
    base = pd.Timestamp("2025-01-01 09:00:00", tz="UTC")
    df = pd.DataFrame({
        "place": ["cafe", "cafe", "office"],
        "seen_at": [base, base + pd.Timedelta(seconds=30), base + pd.Timedelta(minutes=10)],
    })
    out = compress_movement(df, 60, loc_col="place", time_col="seen_at")
    assert out["location"].tolist() == ["cafe", "office"]
    assert out["duration"].tolist() == [30.0, 0.0]
    assert out["start_time"].iloc[0] == pytest.approx(base.timestamp())


def test_compress_movement_drops_unparsable_times():
    df = pd.DataFrame({
        "location": ["a", "a", "b"],
        "timestamp": ["2025-01-01T00:00:00Z", "not a time", "2025-01-01T00:05:00Z"],
    })
    out = compress_movement(df, 60)
    assert out["location"].tolist() == ["a", "b"]


def test_compress_movement_missing_columns():
    with pytest.raises(MissingColumns):
        compress_movement(pd.DataFrame({"location": [1]}), 10)
