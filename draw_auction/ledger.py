"""Trigger attempts recorded for the draw currently being processed."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Attempt:
    recipient: str
    closed_at: int
    draw_id: int
    request_id: int
    sender: str | None = None


class AttemptLedger:
    """Ordered attempts for one draw. Append-only until cleared for the next draw."""

    def __init__(self, max_length: int | None = None):
        self.max_length = max_length
        self._attempts: list[Attempt] = []

    @property
    def draw_id(self) -> int | None:
        if not self._attempts:
            return None
        return self._attempts[-1].draw_id

    def record(self, attempt: Attempt):
        if self._attempts and attempt.draw_id != self.draw_id:
            raise ValueError(
                f"Attempt for draw {attempt.draw_id} cannot join ledger of draw {self.draw_id}"
            )
        if self.max_length is not None and len(self._attempts) >= self.max_length:
            raise ValueError(f"Ledger already holds {self.max_length} attempts")
        self._attempts.append(attempt)

    def clear(self):
        self._attempts = []

    def count(self) -> int:
        return len(self._attempts)

    def at(self, index: int) -> Attempt:
        if index < 0 or index >= len(self._attempts):
            raise IndexError(f"No attempt at index {index}")
        return self._attempts[index]

    def last(self) -> Attempt | None:
        return self._attempts[-1] if self._attempts else None

    def attempts(self) -> tuple:
        return tuple(self._attempts)

    def __len__(self):
        return len(self._attempts)

    def __iter__(self):
        return iter(tuple(self._attempts))
