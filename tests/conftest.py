import pytest

from draw_auction.auction import AuctionConfig, DrawAuction
from draw_auction.pool import InMemoryRandomness, InMemoryWorkPool
from draw_auction.timing import ManualClock

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20
CAROL = "0x" + "c4" * 20
DAVE = "0x" + "d0" * 20
VAULT = "0x" + "fe" * 20

HOUR = 3600
DRAW_PERIOD = 86400
RESERVE = 10**18


def make_config(**overrides) -> AuctionConfig:
    params = {
        "duration": 6 * HOUR,
        "target_time": HOUR,
        "max_rewards": 10**18,
        "max_retries": 3,
        "first_trigger_fraction": 10**17,
        "first_completion_fraction": 2 * 10**17,
    }
    params.update(overrides)
    return AuctionConfig(**params)


@pytest.fixture
def clock():
    return ManualClock(start=0)


@pytest.fixture
def work_pool(clock):
    return InMemoryWorkPool(clock, DRAW_PERIOD, reserve=RESERVE)


@pytest.fixture
def rng(clock):
    return InMemoryRandomness(clock)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def auction(config, work_pool, rng, clock):
    return DrawAuction(config, work_pool, rng, clock)


@pytest.fixture
def at_close(clock, work_pool):
    """Move the clock to the close of the due draw."""
    def _move(offset: int = 0):
        clock.set(work_pool.draw_close_time(work_pool.due_draw_id()) + offset)
    return _move
