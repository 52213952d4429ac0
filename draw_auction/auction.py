"""Draw auction state machine: trigger attempts, completion and reward settlement."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum

from . import errors
from .events import DrawCompleted, TriggerCompleted
from .ledger import Attempt, AttemptLedger
from .rewards import (
    DEFAULT_CURVE,
    UNIT,
    RewardAnchors,
    ratio,
    reconcile,
    trigger_fractions,
)
from .timing import elapsed

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def parse_amount(value, scale: int = 1, integral: bool = False) -> int:
    """Parse YAML numbers such as 1e18, "0.1" or 100 without float rounding.

    Raises decimal.InvalidOperation for non-numbers and ValueError for
    non-finite values, or fractional ones when `integral` is set.
    """
    amount = Decimal(str(value)) * scale
    if not amount.is_finite():
        raise ValueError(f"{value!r} is not a finite number")
    if integral and amount != amount.to_integral_value():
        raise ValueError(f"{value!r} is not a whole number")
    return int(amount)


@dataclass(frozen=True)
class AuctionConfig:
    duration: int
    target_time: int
    max_rewards: int
    max_retries: int
    remainder_recipient: str | None = None
    first_trigger_fraction: int = 0
    first_completion_fraction: int = 0
    target_fraction: int = field(init=False)

    def __post_init__(self):
        if self.duration <= 0:
            raise errors.ConfigurationError("Auction duration must be positive")
        if self.target_time <= 0:
            raise errors.ConfigurationError("Auction target time must be positive")
        if self.target_time > self.duration:
            raise errors.ConfigurationError(
                f"Target time {self.target_time}s exceeds auction duration {self.duration}s"
            )
        if self.max_retries < 0:
            raise errors.ConfigurationError("max_retries cannot be negative")
        if self.max_rewards < 0:
            raise errors.ConfigurationError("max_rewards cannot be negative")
        for name in ("first_trigger_fraction", "first_completion_fraction"):
            value = getattr(self, name)
            if value < 0 or value > UNIT:
                raise errors.ConfigurationError(f"{name} must be within [0, 1e18], got {value}")
        target_fraction = ratio(self.target_time, self.duration)
        if target_fraction == 0:
            raise errors.ConfigurationError("Target time fraction rounds to zero")
        object.__setattr__(self, "target_fraction", target_fraction)

    @classmethod
    def from_dict(cls, data: dict) -> "AuctionConfig":
        """Build from a config mapping. Fractions are given as decimals (0.1 = 10%).

        Seconds, counts and amounts must be whole numbers.
        """
        def setting(name, default=None, scale=1, integral=True):
            if default is None and name not in data:
                raise errors.ConfigurationError(f"Missing auction setting: {name}")
            value = data.get(name, default)
            try:
                return parse_amount(value, scale, integral=integral)
            except (InvalidOperation, TypeError, ValueError) as e:
                raise errors.ConfigurationError(
                    f"Invalid auction setting {name}: {value!r}"
                ) from e

        return cls(
            duration=setting("duration"),
            target_time=setting("target_time"),
            max_rewards=setting("max_rewards"),
            max_retries=setting("max_retries", 0),
            remainder_recipient=data.get("remainder_recipient") or None,
            first_trigger_fraction=setting("first_trigger_fraction", 0, UNIT, integral=False),
            first_completion_fraction=setting("first_completion_fraction", 0, UNIT, integral=False),
        )


class AuctionState(Enum):
    IDLE = "idle"
    TRIGGERED = "triggered"
    RETRY_ELIGIBLE = "retry_eligible"
    EXPIRED = "expired"
    COMPLETED = "completed"


class Settlement:
    """Payouts of a completed draw, executed in order and resumable after a failure."""

    def __init__(self, reconciliation, remainder_recipient: str | None):
        self.reconciliation = reconciliation
        self.remainder_recipient = remainder_recipient
        self.paid = 0
        self.remainder_routed = False

    @property
    def draw_id(self) -> int:
        return self.reconciliation.draw_id

    @property
    def done(self) -> bool:
        return (self.paid == len(self.reconciliation.payouts)
                and (self.remainder_routed or not self._routes_remainder()))

    def _routes_remainder(self) -> bool:
        return bool(self.remainder_recipient) and self.reconciliation.leftover > 0

    def execute(self, work_pool):
        payouts = self.reconciliation.payouts
        while self.paid < len(payouts):
            payout = payouts[self.paid]
            if payout.amount > 0:
                work_pool.allocate_from_reserve(payout.recipient, payout.amount)
                click_echo(f"  Paid {payout.amount} to {payout.recipient}")
            self.paid += 1
        if self._routes_remainder() and not self.remainder_routed:
            leftover = self.reconciliation.leftover
            work_pool.contribute_on_behalf(self.remainder_recipient, leftover)
            self.remainder_routed = True
            click_echo(f"  Routed leftover {leftover} to {self.remainder_recipient}")


class DrawAuction:
    """Incentivized trigger and completion of draws.

    Anyone may trigger the RNG request for a closed draw and, once the random
    number is ready, complete the draw. Both are paid from the work pool's
    reserve according to how quickly they acted. Rewards for every trigger
    attempt are settled at completion, when it is known which attempt was final.
    """

    def __init__(self, config: AuctionConfig, work_pool, rng, clock, curve=None):
        budget = work_pool.window_budget()
        if config.duration > budget:
            raise errors.ConfigurationError(
                f"Auction duration {config.duration}s exceeds the draw period {budget}s"
            )
        self.config = config
        self.work_pool = work_pool
        self.rng = rng
        self.clock = clock
        self.curve = curve or DEFAULT_CURVE
        self.ledger = AttemptLedger(max_length=config.max_retries + 1)
        self.anchors = RewardAnchors(
            config.first_trigger_fraction, config.first_completion_fraction,
        )
        self.settlement: Settlement | None = None
        self.last_completed_draw_id: int | None = None
        self._listeners = []

    def subscribe(self, listener):
        """Register a callable that receives every emitted event.

        Events are emitted once the call has taken full effect, so an exception
        raised by a listener propagates to the caller without undoing the
        recorded attempt or the completed settlement.
        """
        self._listeners.append(listener)

    def _emit(self, event):
        for listener in self._listeners:
            listener(event)

    def available_rewards(self) -> int:
        reserve = self.work_pool.reserve_balance() + self.work_pool.pending_reserve_inflow()
        return min(reserve, self.config.max_rewards)

    def _retries_remain(self) -> bool:
        return len(self.ledger) <= self.config.max_retries

    def _trigger_anchor(self, draw_id: int, closes_at: int) -> int | None:
        """Instant the next attempt's window opens, or None if no attempt is allowed."""
        last = self.ledger.last()
        if last is None or last.draw_id != draw_id:
            return closes_at
        if self.rng.is_failed(last.request_id) and self._retries_remain():
            return last.closed_at
        return None

    # --- Trigger ---

    def attempt_trigger(self, recipient: str, request_id: int,
                        sender: str | None = None) -> int:
        """Register an RNG request for the due draw. Returns the draw id."""
        if not recipient or recipient == ZERO_ADDRESS:
            raise errors.EmptyRecipient()
        now = self.clock.now()
        draw_id = self.work_pool.due_draw_id()
        closes_at = self.work_pool.draw_close_time(draw_id)
        if now < closes_at:
            raise errors.NotYetDue(draw_id, closes_at, now)

        tick = self.clock.tick()
        requested_at = self.rng.requested_at_tick(request_id)
        if requested_at != tick:
            raise errors.RequestNotFresh(request_id, requested_at, tick)

        last = self.ledger.last()
        new_cycle = last is None or last.draw_id != draw_id
        if new_cycle:
            anchor = closes_at
        else:
            if not self.rng.is_failed(last.request_id):
                raise errors.AlreadyTriggered(draw_id)
            if not self._retries_remain():
                raise errors.RetryLimitReached(draw_id, self.config.max_retries)
            if request_id <= last.request_id:
                raise errors.StaleRequest(request_id, last.request_id)
            anchor = last.closed_at

        spent = elapsed(anchor, now)
        if spent > self.config.duration:
            raise errors.WindowExpired(spent, self.config.duration)

        if new_cycle:
            self.ledger.clear()
        self.ledger.record(Attempt(
            recipient=recipient,
            closed_at=now,
            draw_id=draw_id,
            request_id=request_id,
            sender=sender or recipient,
        ))
        click_echo(
            f"Draw {draw_id} triggered by {recipient} | request={request_id} | "
            f"elapsed={spent}s | attempt {len(self.ledger)}/{self.config.max_retries + 1}"
        )
        self._emit(TriggerCompleted(sender or recipient, recipient, draw_id, request_id, spent))
        return draw_id

    def can_trigger(self) -> bool:
        draw_id = self.work_pool.due_draw_id()
        closes_at = self.work_pool.draw_close_time(draw_id)
        now = self.clock.now()
        if now < closes_at:
            return False
        anchor = self._trigger_anchor(draw_id, closes_at)
        if anchor is None:
            return False
        return elapsed(anchor, now) <= self.config.duration

    def trigger_reward(self) -> int:
        """Reward a trigger submitted now would earn if completed right after it."""
        if not self.can_trigger():
            return 0
        draw_id = self.work_pool.due_draw_id()
        closes_at = self.work_pool.draw_close_time(draw_id)
        closed_ats = [
            a.closed_at for a in self.ledger if a.draw_id == draw_id
        ]
        closed_ats.append(self.clock.now())
        fractions = trigger_fractions(
            closed_ats, closes_at, self.config.duration, self.config.target_fraction,
            self.anchors.trigger_fraction, self.curve,
        )
        amounts, _ = self.curve.amounts(fractions, self.available_rewards())
        return amounts[-1]

    # --- Completion ---

    def _check_completable(self) -> tuple[Attempt, int]:
        last = self.ledger.last()
        due = self.work_pool.due_draw_id()
        if last is None or last.draw_id != due:
            raise errors.DrawAlreadyFinalized(last.draw_id if last else None, due)
        if not self.rng.is_complete(last.request_id):
            raise errors.RandomnessNotReady(last.request_id)
        now = self.clock.now()
        spent = elapsed(last.closed_at, now)
        if spent > self.config.duration:
            raise errors.WindowExpired(spent, self.config.duration)
        return last, now

    def _reconcile(self, last: Attempt, now: int, recipient: str):
        return reconcile(
            self.ledger.attempts(),
            self.work_pool.draw_close_time(last.draw_id),
            now,
            recipient,
            self.available_rewards(),
            self.config.duration,
            self.config.target_fraction,
            self.anchors,
            self.curve,
        )

    def complete_draw(self, recipient: str, sender: str | None = None) -> int:
        """Finalize the due draw with the ready random number and pay every participant."""
        if not recipient or recipient == ZERO_ADDRESS:
            raise errors.EmptyRecipient()
        if self.settlement is not None:
            raise errors.SettlementPending(self.settlement.draw_id)
        last, now = self._check_completable()

        result = self._reconcile(last, now, recipient)
        random_value = self.rng.value(last.request_id)
        draw_id = self.work_pool.finalize_draw(random_value)

        self.anchors.trigger_fraction = result.trigger_fraction
        self.anchors.completion_fraction = result.completion_fraction
        self.last_completed_draw_id = draw_id
        self.settlement = Settlement(result, self.config.remainder_recipient)

        click_echo(
            f"Draw {draw_id} completed by {recipient} | pool={result.pool} | "
            f"paid={result.total} | leftover={result.leftover}"
        )
        self._settle()
        self._emit(DrawCompleted(
            sender or recipient, draw_id, result.recipients, result.amounts, result.leftover,
        ))
        return draw_id

    def _settle(self):
        self.settlement.execute(self.work_pool)
        self.settlement = None

    def retry_settlement(self) -> int | None:
        """Resume payouts interrupted by a failure. Returns the settled draw id."""
        if self.settlement is None:
            return None
        draw_id = self.settlement.draw_id
        click_echo(f"Resuming payouts for draw {draw_id} at payout {self.settlement.paid}")
        self._settle()
        return draw_id

    def can_complete(self) -> bool:
        if self.settlement is not None:
            return False
        try:
            self._check_completable()
        except (errors.FinalizationError, errors.TimingError):
            return False
        return True

    def completion_reward(self) -> int:
        """Reward `complete_draw` would pay right now."""
        last = self.ledger.last()
        if last is None or last.draw_id != self.work_pool.due_draw_id():
            return 0
        result = self._reconcile(last, self.clock.now(), ZERO_ADDRESS)
        return result.payouts[-1].amount

    # --- Inspection ---

    def attempt_count(self) -> int:
        return self.ledger.count()

    def attempt_at(self, index: int) -> Attempt:
        return self.ledger.at(index)

    def last_attempt(self) -> Attempt | None:
        return self.ledger.last()

    def state(self) -> AuctionState:
        draw_id = self.work_pool.due_draw_id()
        now = self.clock.now()
        last = self.ledger.last()
        if last is None or last.draw_id != draw_id:
            if (last is not None and last.draw_id == self.last_completed_draw_id
                    and now < self.work_pool.draw_close_time(draw_id)):
                return AuctionState.COMPLETED
            return AuctionState.IDLE
        window_open = elapsed(last.closed_at, now) <= self.config.duration
        if self.rng.is_failed(last.request_id):
            if self._retries_remain() and window_open:
                return AuctionState.RETRY_ELIGIBLE
            return AuctionState.EXPIRED
        if not window_open:
            return AuctionState.EXPIRED
        return AuctionState.TRIGGERED

    def status(self) -> dict:
        """Return status info."""
        draw_id = self.work_pool.due_draw_id()
        last = self.ledger.last()
        return {
            "due_draw_id": draw_id,
            "draw_closes_at": self.work_pool.draw_close_time(draw_id),
            "state": self.state().value,
            "attempts": self.ledger.count(),
            "last_request_id": last.request_id if last else None,
            "available_rewards": self.available_rewards(),
            "trigger_reward": self.trigger_reward(),
            "completion_reward": self.completion_reward(),
            "trigger_fraction": self.anchors.trigger_fraction,
            "completion_fraction": self.anchors.completion_fraction,
        }


def click_echo(msg: str):
    import click
    click.echo(msg)
