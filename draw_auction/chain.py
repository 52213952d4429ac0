"""Read-only views of the prize pool and RNG contracts, used by `status`."""

from web3 import Web3

from . import abi as contract_abi


class PrizePoolContract:
    """Work pool queries answered by a deployed prize pool contract."""

    def __init__(self, w3: Web3, address: str):
        self.w3 = w3
        self.prize_pool = w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=contract_abi.PRIZE_POOL_ABI,
        )

    def due_draw_id(self) -> int:
        return self.prize_pool.functions.getDrawIdToAward().call()

    def draw_close_time(self, draw_id: int) -> int:
        return self.prize_pool.functions.drawClosesAt(draw_id).call()

    def window_budget(self) -> int:
        return self.prize_pool.functions.drawPeriodSeconds().call()

    def reserve_balance(self) -> int:
        return self.prize_pool.functions.reserve().call()

    def pending_reserve_inflow(self) -> int:
        return self.prize_pool.functions.pendingReserveContributions().call()

    def status(self) -> dict:
        """Return status info."""
        draw_id = self.due_draw_id()
        return {
            "prize_pool": self.prize_pool.address,
            "due_draw_id": draw_id,
            "draw_closes_at": self.draw_close_time(draw_id),
            "draw_period": self.window_budget(),
            "reserve": self.reserve_balance(),
            "pending_reserve": self.pending_reserve_inflow(),
        }


class RngContract:
    """Request lifecycle of an RNG contract with numbered requests."""

    def __init__(self, w3: Web3, address: str):
        self.w3 = w3
        self.rng = w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=contract_abi.RNG_ABI,
        )

    def requested_at_tick(self, request_id: int) -> int:
        return self.rng.functions.requestedAtBlock(request_id).call()

    def is_complete(self, request_id: int) -> bool:
        return self.rng.functions.isRequestComplete(request_id).call()

    def is_failed(self, request_id: int) -> bool:
        return self.rng.functions.isRequestFailed(request_id).call()
