"""In-memory work pool and randomness service.

Deterministic stand-ins for the prize pool and RNG contracts, used by the
simulator and the tests. They follow the same method contract as the
web3-backed adapters in `chain.py`.
"""


class InMemoryWorkPool:
    """Draws of fixed length. Draw n closes at `first_opens_at + n * draw_period`."""

    def __init__(self, clock, draw_period: int, first_opens_at: int = 0,
                 reserve: int = 0, pending_inflow: int = 0):
        self.clock = clock
        self.draw_period = draw_period
        self.first_opens_at = first_opens_at
        self.reserve = reserve
        self.pending_inflow = pending_inflow
        self.last_awarded_draw_id = 0
        self.winning_randoms: dict[int, int] = {}
        self.rewards: dict[str, int] = {}
        self.contributions: dict[str, int] = {}

    def due_draw_id(self) -> int:
        return self.last_awarded_draw_id + 1

    def draw_close_time(self, draw_id: int) -> int:
        return self.first_opens_at + draw_id * self.draw_period

    def window_budget(self) -> int:
        return self.draw_period

    def reserve_balance(self) -> int:
        return self.reserve

    def pending_reserve_inflow(self) -> int:
        return self.pending_inflow

    def add_reserve_inflow(self, amount: int):
        self.pending_inflow += amount

    def finalize_draw(self, random_value: int) -> int:
        draw_id = self.due_draw_id()
        if self.clock.now() < self.draw_close_time(draw_id):
            raise RuntimeError(f"Draw {draw_id} has not closed")
        self.winning_randoms[draw_id] = random_value
        self.last_awarded_draw_id = draw_id
        self.reserve += self.pending_inflow
        self.pending_inflow = 0
        return draw_id

    def allocate_from_reserve(self, recipient: str, amount: int):
        if amount > self.reserve:
            raise RuntimeError(f"Insufficient reserve: {amount} > {self.reserve}")
        self.reserve -= amount
        self.rewards[recipient] = self.rewards.get(recipient, 0) + amount

    def contribute_on_behalf(self, beneficiary: str, amount: int):
        """Move reserve into the prize contributions credited to `beneficiary`."""
        if amount > self.reserve:
            raise RuntimeError(f"Insufficient reserve: {amount} > {self.reserve}")
        self.reserve -= amount
        self.contributions[beneficiary] = self.contributions.get(beneficiary, 0) + amount


class InMemoryRandomness:
    """RNG service whose requests are fulfilled or failed by hand."""

    def __init__(self, clock):
        self.clock = clock
        self._next_id = 1
        self._requested_at: dict[int, int] = {}
        self._values: dict[int, int] = {}
        self._failed: set[int] = set()

    def request(self) -> int:
        request_id = self._next_id
        self._next_id += 1
        self._requested_at[request_id] = self.clock.tick()
        return request_id

    def fulfill(self, request_id: int, value: int):
        self._check(request_id)
        self._values[request_id] = value

    def fail(self, request_id: int):
        self._check(request_id)
        self._failed.add(request_id)

    def requested_at_tick(self, request_id: int) -> int:
        self._check(request_id)
        return self._requested_at[request_id]

    def is_complete(self, request_id: int) -> bool:
        return request_id in self._values

    def is_failed(self, request_id: int) -> bool:
        return request_id in self._failed

    def value(self, request_id: int) -> int:
        if request_id not in self._values:
            raise RuntimeError(f"RNG request {request_id} has no value")
        return self._values[request_id]

    def _check(self, request_id: int):
        if request_id not in self._requested_at:
            raise KeyError(f"Unknown RNG request {request_id}")
