"""Read-only contract ABIs for the prize pool and RNG service."""

PRIZE_POOL_ABI = [
    {
        "constant": True,
        "inputs": [],
        "name": "getDrawIdToAward",
        "outputs": [{"name": "", "type": "uint24"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "drawId", "type": "uint24"}],
        "name": "drawClosesAt",
        "outputs": [{"name": "", "type": "uint48"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "drawPeriodSeconds",
        "outputs": [{"name": "", "type": "uint48"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "reserve",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "pendingReserveContributions",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
]

RNG_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "rngRequestId", "type": "uint32"}],
        "name": "requestedAtBlock",
        "outputs": [{"name": "", "type": "uint64"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "rngRequestId", "type": "uint32"}],
        "name": "isRequestComplete",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "rngRequestId", "type": "uint32"}],
        "name": "isRequestFailed",
        "outputs": [{"name": "", "type": "bool"}],
        "type": "function",
    },
]
