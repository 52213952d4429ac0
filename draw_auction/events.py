"""Events emitted by the draw auction, encodable as EVM log data."""

from eth_abi import encode
from web3 import Web3


def _addr(value: str) -> str:
    return Web3.to_checksum_address(value)


class TriggerCompleted:
    name = "TriggerCompleted"
    signature = "TriggerCompleted(address,address,uint24,uint32,uint48)"
    topic = Web3.keccak(text=signature)

    def __init__(self, sender: str, recipient: str, draw_id: int,
                 request_id: int, elapsed: int):
        self.sender = sender
        self.recipient = recipient
        self.draw_id = draw_id
        self.request_id = request_id
        self.elapsed = elapsed

    def topics(self) -> list[bytes]:
        """Topic 0 plus the indexed sender and recipient."""
        return [
            self.topic,
            encode(["address"], [_addr(self.sender)]),
            encode(["address"], [_addr(self.recipient)]),
        ]

    def encode(self) -> bytes:
        return encode(
            ["uint24", "uint32", "uint48"],
            [self.draw_id, self.request_id, self.elapsed],
        )

    def __repr__(self):
        return (f"{self.name}(recipient={self.recipient}, draw_id={self.draw_id}, "
                f"request_id={self.request_id}, elapsed={self.elapsed})")


class DrawCompleted:
    name = "DrawCompleted"
    signature = "DrawCompleted(address,uint24,address[],uint256[],uint256)"
    topic = Web3.keccak(text=signature)

    def __init__(self, sender: str, draw_id: int, recipients: list[str],
                 amounts: list[int], leftover: int):
        self.sender = sender
        self.draw_id = draw_id
        self.recipients = list(recipients)
        self.amounts = list(amounts)
        self.leftover = leftover

    def topics(self) -> list[bytes]:
        return [
            self.topic,
            encode(["address"], [_addr(self.sender)]),
            encode(["uint24"], [self.draw_id]),
        ]

    def encode(self) -> bytes:
        return encode(
            ["address[]", "uint256[]", "uint256"],
            [[_addr(r) for r in self.recipients], self.amounts, self.leftover],
        )

    def __repr__(self):
        return (f"{self.name}(draw_id={self.draw_id}, amounts={self.amounts}, "
                f"leftover={self.leftover})")
