"""Ranking and payout planning for job settlement."""

from typing import Iterable, List, Sequence

from .entities import ScoredSubmission, PlannedPayout
from .value_objects import PayoutSplit

# 80 / 15 / 5 percent of the reward for ranks 1..3.
PAYOUT_SPLITS: Sequence[PayoutSplit] = (
    PayoutSplit(rank=1, basis_points=8_000),
    PayoutSplit(rank=2, basis_points=1_500),
    PayoutSplit(rank=3, basis_points=500),
)

MAX_PAID_RANKS = len(PAYOUT_SPLITS)


def rank_submissions(submissions: Iterable[ScoredSubmission]) -> List[ScoredSubmission]:
    """Highest score first, earliest submission wins ties. Top ranks only."""
    ordered = sorted(submissions, key=lambda s: (-s.final_score, s.created_seq))
    return ordered[:MAX_PAID_RANKS]


def plan_payouts(reward_tokens: int, ranked: Sequence[ScoredSubmission]) -> List[PlannedPayout]:
    """Split the reward over the ranked submissions.

    Amounts are floored. Missing ranks and the rounding remainder stay
    unallocated.
    """
    if reward_tokens <= 0:
        raise ValueError("Reward must be positive")

    return [
        PlannedPayout(
            rank=split.rank,
            submission_id=submission.id,
            user_id=submission.worker_id,
            amount_tokens=split.amount_for(reward_tokens),
        )
        for split, submission in zip(PAYOUT_SPLITS, ranked)
    ]
