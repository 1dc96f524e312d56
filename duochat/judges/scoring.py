"""Running score and momentum for a debate session."""

from dataclasses import dataclass, field
from typing import Any

MOMENTUM_LIMIT = 100
MOMENTUM_PER_POINT = 3


@dataclass
class ScoreState:
    """Cumulative ratings per agent plus a tug-of-war momentum value.

    Negative momentum favours agent A, positive favours agent B.
    """

    totals: dict[str, int] = field(default_factory=dict)
    momentum: int = 0

    def reset(self, agent_names: list[str]) -> None:
        self.totals = {name: 0 for name in agent_names}
        self.momentum = 0

    def apply(self, speaker: str, rating: int, *, favours_a: bool) -> None:
        if rating < 0:
            raise ValueError("Rating must not be negative")
        self.totals[speaker] = self.totals.get(speaker, 0) + rating
        shift = rating * MOMENTUM_PER_POINT
        momentum = self.momentum - shift if favours_a else self.momentum + shift
        self.momentum = max(-MOMENTUM_LIMIT, min(MOMENTUM_LIMIT, momentum))

    def to_dict(self) -> dict[str, Any]:
        return {"totals": dict(self.totals), "momentum": self.momentum}
