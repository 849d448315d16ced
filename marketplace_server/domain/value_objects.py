"""Domain value objects for type safety and validation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PayoutSplit:
    """Share of the reward paid at a given rank, in basis points."""
    rank: int
    basis_points: int

    def __post_init__(self):
        if self.rank < 1:
            raise ValueError("Rank must be positive")
        if not 0 <= self.basis_points <= 10_000:
            raise ValueError("Basis points must be within 0..10000")

    @property
    def ratio(self) -> float:
        return self.basis_points / 10_000

    def amount_for(self, reward_tokens: int) -> int:
        """Floor-rounded token amount for this rank."""
        return reward_tokens * self.basis_points // 10_000


@dataclass(frozen=True)
class ScoreBreakdown:
    """Value object for a submission score."""
    quality: float
    speed: float
    score: float

    def __post_init__(self):
        for name in ("quality", "speed", "score"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")

    def to_dict(self) -> dict:
        return {"quality": self.quality, "speed": self.speed, "score": self.score}
