"""Tests for the round schedule and round-kind sequence."""
from __future__ import annotations

import pytest

from poseidon2bls.schedule import DEFAULT_SCHEDULE, RoundKind, RoundSchedule, UnsupportedSchedule


def test_default_schedule_parameters() -> None:
    assert DEFAULT_SCHEDULE == RoundSchedule(width=2, full_rounds=8, partial_rounds=56, sbox_degree=5)
    assert DEFAULT_SCHEDULE.total_rounds == 64
    assert DEFAULT_SCHEDULE.half_full_rounds == 4


def test_domain_string_is_exact() -> None:
    assert DEFAULT_SCHEDULE.domain_string() == "Poseidon2-BLS12_381[t=2,rF=8,rP=56,d=5]"
    assert DEFAULT_SCHEDULE.domain_string("X") == "X[t=2,rF=8,rP=56,d=5]"


def test_round_kinds_sequence() -> None:
    kinds = list(DEFAULT_SCHEDULE.round_kinds())
    assert kinds == [RoundKind.FULL] * 4 + [RoundKind.PARTIAL] * 56 + [RoundKind.FULL] * 4
    assert DEFAULT_SCHEDULE.row_width(3) == 2
    assert DEFAULT_SCHEDULE.row_width(4) == 1
    assert DEFAULT_SCHEDULE.row_width(59) == 1
    assert DEFAULT_SCHEDULE.row_width(60) == 2


@pytest.mark.parametrize("index", [-1, 64])
def test_round_kind_out_of_range(index: int) -> None:
    with pytest.raises(IndexError):
        DEFAULT_SCHEDULE.round_kind(index)


@pytest.mark.parametrize(
    "schedule",
    [
        RoundSchedule(width=3),
        RoundSchedule(sbox_degree=7),
        RoundSchedule(full_rounds=7),
        RoundSchedule(full_rounds=0),
        RoundSchedule(partial_rounds=-1),
    ],
)
def test_unsupported_schedules_fail_fast(schedule: RoundSchedule) -> None:
    with pytest.raises(UnsupportedSchedule):
        schedule.validate()


def test_schedule_is_immutable() -> None:
    with pytest.raises(AttributeError):
        DEFAULT_SCHEDULE.width = 3  # type: ignore[misc]
