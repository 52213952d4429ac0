"""Reward curve and reward reconciliation.

Fractions are 18-decimal fixed-point integers: UNIT (10**18) is 1.0. All
arithmetic is integer and floors at every step, so amounts match what the
prize pool contracts compute to the wei.
"""

from dataclasses import dataclass

from .timing import elapsed as elapsed_between

UNIT = 10**18


def _mul(a: int, b: int) -> int:
    return a * b // UNIT


def _div(a: int, b: int) -> int:
    return a * UNIT // b


def ratio(numerator: int, denominator: int) -> int:
    """numerator / denominator as a fixed-point fraction."""
    return numerator * UNIT // denominator


class RewardCurve:
    """Parabolic reward curve anchored on the last observed fraction.

    The fraction grows from 0 at the start of the window, passes through the
    last observed fraction at the target time and reaches 1.0 at the end of
    the window. Any object exposing `fraction`, `amount` and `amounts` with the
    same signatures can stand in for it.
    """

    def fraction(self, elapsed: int, duration: int, target_fraction: int,
                 last_fraction: int) -> int:
        if elapsed >= duration:
            return UNIT
        x = ratio(elapsed, duration)
        t = target_fraction
        r = last_fraction
        if x > t:
            delta = x - t
            rest = UNIT - t
            f = r + _div(_div(_mul(_mul(UNIT - r, delta), delta), rest), rest)
        else:
            delta = t - x
            f = r - _div(_div(_mul(_mul(r, delta), delta), t), t)
        return min(max(f, 0), UNIT)

    def amount(self, fraction: int, pool: int) -> int:
        if fraction > UNIT:
            raise ValueError(f"Reward fraction {fraction} exceeds 1.0")
        return fraction * pool // UNIT

    def amounts(self, fractions: list[int], pool: int) -> tuple[list[int], int]:
        """Deplete the pool in order. Each fraction applies to what is left."""
        remaining = pool
        values = []
        for fraction in fractions:
            value = self.amount(fraction, remaining)
            remaining -= value
            values.append(value)
        return values, pool - remaining


DEFAULT_CURVE = RewardCurve()


class RewardAnchors:
    """Last paid trigger and completion fractions, the targets for the next draw."""

    def __init__(self, trigger_fraction: int, completion_fraction: int):
        self.trigger_fraction = trigger_fraction
        self.completion_fraction = completion_fraction

    def __repr__(self):
        return (f"RewardAnchors(trigger_fraction={self.trigger_fraction}, "
                f"completion_fraction={self.completion_fraction})")


@dataclass(frozen=True)
class Payout:
    recipient: str
    fraction: int
    amount: int


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of splitting the pool across every trigger attempt and the completion.

    `payouts` holds one entry per ledger attempt, in attempt order, followed by
    the completion payout.
    """

    draw_id: int
    payouts: tuple
    pool: int
    leftover: int

    @property
    def total(self) -> int:
        return sum(p.amount for p in self.payouts)

    @property
    def trigger_fraction(self) -> int:
        return self.payouts[-2].fraction

    @property
    def completion_fraction(self) -> int:
        return self.payouts[-1].fraction

    @property
    def recipients(self) -> list[str]:
        return [p.recipient for p in self.payouts]

    @property
    def amounts(self) -> list[int]:
        return [p.amount for p in self.payouts]


def trigger_fractions(closed_ats: list[int], draw_closed_at: int, duration: int,
                      target_fraction: int, last_fraction: int,
                      curve=DEFAULT_CURVE) -> list[int]:
    """Fraction for each trigger attempt; each window opens where the previous closed."""
    fractions = []
    anchor = draw_closed_at
    for closed_at in closed_ats:
        fractions.append(curve.fraction(
            elapsed_between(anchor, closed_at), duration, target_fraction, last_fraction,
        ))
        anchor = closed_at
    return fractions


def reconcile(attempts, draw_closed_at: int, now: int, completion_recipient: str,
              pool: int, duration: int, target_fraction: int,
              anchors: RewardAnchors, curve=DEFAULT_CURVE) -> Reconciliation:
    """Split `pool` across the attempts (in order) and the completion at `now`."""
    if not attempts:
        raise ValueError("Cannot reconcile a draw without trigger attempts")
    closed_ats = [a.closed_at for a in attempts]
    fractions = trigger_fractions(
        closed_ats, draw_closed_at, duration, target_fraction,
        anchors.trigger_fraction, curve,
    )
    fractions.append(curve.fraction(
        elapsed_between(closed_ats[-1], now), duration, target_fraction,
        anchors.completion_fraction,
    ))
    values, total = curve.amounts(fractions, pool)
    recipients = [a.recipient for a in attempts] + [completion_recipient]
    payouts = tuple(
        Payout(recipient, fraction, value)
        for recipient, fraction, value in zip(recipients, fractions, values)
    )
    return Reconciliation(
        draw_id=attempts[-1].draw_id,
        payouts=payouts,
        pool=pool,
        leftover=pool - total,
    )
