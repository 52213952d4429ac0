"""Error taxonomy for the draw auction.

Every rejected call raises one of these and leaves the auction state untouched.
"""


class AuctionError(RuntimeError):
    """Base class for all draw auction failures."""


class ConfigurationError(AuctionError):
    """Auction parameters are inconsistent. Raised at construction only."""


class PreconditionError(AuctionError):
    pass


class TimingError(AuctionError):
    pass


class FinalizationError(AuctionError):
    pass


class EmptyRecipient(PreconditionError):
    def __init__(self):
        super().__init__("Reward recipient is empty")


class NotYetDue(PreconditionError):
    def __init__(self, draw_id: int, closes_at: int, now: int):
        self.draw_id = draw_id
        self.closes_at = closes_at
        super().__init__(f"Draw {draw_id} closes at {closes_at}, now is {now}")


class RequestNotFresh(PreconditionError):
    def __init__(self, request_id: int, requested_at: int, tick: int):
        self.request_id = request_id
        super().__init__(
            f"RNG request {request_id} was made at tick {requested_at}, current tick is {tick}"
        )


class AlreadyTriggered(PreconditionError):
    def __init__(self, draw_id: int):
        self.draw_id = draw_id
        super().__init__(f"Draw {draw_id} already has a pending RNG request")


class RetryLimitReached(PreconditionError):
    def __init__(self, draw_id: int, max_retries: int):
        self.draw_id = draw_id
        super().__init__(f"Draw {draw_id} used all {max_retries} retries")


class StaleRequest(PreconditionError):
    def __init__(self, request_id: int, last_request_id: int):
        self.request_id = request_id
        super().__init__(
            f"RNG request {request_id} is not newer than the failed request {last_request_id}"
        )


class SettlementPending(PreconditionError):
    def __init__(self, draw_id: int):
        self.draw_id = draw_id
        super().__init__(f"Payouts for draw {draw_id} are still outstanding")


class WindowExpired(TimingError):
    def __init__(self, elapsed: int, duration: int):
        self.elapsed = elapsed
        super().__init__(f"Auction window expired: {elapsed}s elapsed of {duration}s")


class DrawAlreadyFinalized(FinalizationError):
    def __init__(self, draw_id: int | None, due_draw_id: int):
        self.draw_id = draw_id
        super().__init__(f"Draw {draw_id} is not the due draw ({due_draw_id})")


class RandomnessNotReady(FinalizationError):
    def __init__(self, request_id: int):
        self.request_id = request_id
        super().__init__(f"RNG request {request_id} is not complete")
