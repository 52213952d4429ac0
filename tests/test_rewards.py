import pytest

from draw_auction.ledger import Attempt
from draw_auction.rewards import (
    DEFAULT_CURVE,
    UNIT,
    RewardAnchors,
    ratio,
    reconcile,
    trigger_fractions,
)

from conftest import ALICE, BOB, CAROL, HOUR

DURATION = 6 * HOUR
TARGET = ratio(HOUR, DURATION)


def test_fraction_saturates_at_end_of_window():
    for last in (0, 10**17, UNIT // 2, UNIT):
        assert DEFAULT_CURVE.fraction(DURATION, DURATION, TARGET, last) == UNIT
        assert DEFAULT_CURVE.fraction(DURATION * 3, DURATION, TARGET, last) == UNIT


def test_fraction_at_target_time_equals_last_fraction():
    assert DEFAULT_CURVE.fraction(HOUR, DURATION, TARGET, 2 * 10**17) == 2 * 10**17


def test_fraction_at_window_open_is_dust():
    # fixed-point rounding leaves 28 wei of the 0.1 anchor
    assert DEFAULT_CURVE.fraction(0, DURATION, TARGET, 10**17) == 28
    assert DEFAULT_CURVE.fraction(0, DURATION, TARGET, 0) == 0


def test_fraction_is_monotonic_and_bounded():
    previous = 0
    for elapsed in range(0, DURATION + 1, 300):
        fraction = DEFAULT_CURVE.fraction(elapsed, DURATION, TARGET, 10**17)
        assert 0 <= fraction <= UNIT
        assert fraction >= previous
        previous = fraction


def test_fraction_with_target_at_end_of_window():
    target = ratio(DURATION, DURATION)
    assert target == UNIT
    assert DEFAULT_CURVE.fraction(DURATION - 1, DURATION, target, UNIT // 2) <= UNIT // 2


def test_amount_floors():
    assert DEFAULT_CURVE.amount(UNIT // 3, 10) == 3
    assert DEFAULT_CURVE.amount(UNIT, 10) == 10
    assert DEFAULT_CURVE.amount(0, 10) == 0


def test_amount_rejects_fraction_above_one():
    with pytest.raises(ValueError):
        DEFAULT_CURVE.amount(UNIT + 1, 100)


def test_amounts_deplete_sequentially():
    values, total = DEFAULT_CURVE.amounts([UNIT // 2, UNIT // 2], 100)
    assert values == [50, 25]
    assert total == 75


def test_full_fraction_takes_only_what_remains():
    values, total = DEFAULT_CURVE.amounts([UNIT // 2, UNIT, UNIT // 2], 100)
    assert values == [50, 50, 0]
    assert total == 100


def test_trigger_fractions_anchor_on_previous_attempt():
    fractions = trigger_fractions(
        [1000 + HOUR, 1000 + HOUR + DURATION], 1000, DURATION, TARGET, 10**17,
    )
    assert fractions == [10**17, UNIT]


def _attempt(recipient, closed_at, request_id=1):
    return Attempt(recipient=recipient, closed_at=closed_at, draw_id=7, request_id=request_id)


def test_reconcile_single_attempt_fixture():
    anchors = RewardAnchors(10**17, 2 * 10**17)
    result = reconcile(
        [_attempt(ALICE, 0)], 0, HOUR, BOB, 10**18, DURATION, TARGET, anchors,
    )
    assert result.draw_id == 7
    assert result.recipients == [ALICE, BOB]
    assert result.amounts == [28, 199999999999999994]
    assert result.leftover == 10**18 - 28 - 199999999999999994
    assert result.trigger_fraction == 28
    assert result.completion_fraction == 2 * 10**17


def test_reconcile_pays_attempts_in_order_then_completion():
    anchors = RewardAnchors(10**17, 2 * 10**17)
    attempts = [_attempt(ALICE, 600, 1), _attempt(CAROL, 600 + HOUR, 2)]
    result = reconcile(attempts, 0, 600 + 2 * HOUR, BOB, 10**18, DURATION, TARGET, anchors)

    assert result.recipients == [ALICE, CAROL, BOB]
    first, retry, completion = result.payouts
    assert retry.fraction == 10**17
    assert retry.amount == (10**18 - first.amount) * 10**17 // UNIT
    assert completion.amount == (10**18 - first.amount - retry.amount) * completion.fraction // UNIT


def test_reconcile_never_exceeds_pool():
    anchors = RewardAnchors(UNIT // 2, UNIT // 2)
    for gap in (0, 60, HOUR, 3 * HOUR, DURATION, 2 * DURATION):
        attempts = [_attempt(ALICE, gap, 1), _attempt(CAROL, 2 * gap, 2), _attempt(BOB, 3 * gap, 3)]
        result = reconcile(attempts, 0, 4 * gap, BOB, 12345, DURATION, TARGET, anchors)
        assert result.total <= 12345
        assert result.leftover == 12345 - result.total
        assert result.leftover >= 0


def test_reconcile_with_empty_pool_pays_nothing():
    anchors = RewardAnchors(10**17, 2 * 10**17)
    result = reconcile([_attempt(ALICE, 0)], 0, HOUR, BOB, 0, DURATION, TARGET, anchors)
    assert result.amounts == [0, 0]
    assert result.leftover == 0


def test_reconcile_requires_attempts():
    with pytest.raises(ValueError):
        reconcile([], 0, HOUR, BOB, 100, DURATION, TARGET, RewardAnchors(0, 0))
