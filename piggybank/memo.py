import math
from functools import lru_cache, reduce

from piggybank.domain import BudgetState, Goal, GoalProgress, Number, Totals


@lru_cache(maxsize=128)
def goal_totals(goals: tuple[Goal, ...]) -> tuple[Number, Number]:
    """Return (saved, target) summed over all goals."""
    return reduce(
        lambda acc, g: (acc[0] + g.saved, acc[1] + g.target), goals, (0, 0)
    )


def summarize(state: BudgetState) -> Totals:
    saved, target = goal_totals(state.goals)
    return Totals(
        saved=saved,
        target=target,
        left_to_save=max(target - saved, 0),
        net_available=state.available - state.credit_card_balance,
    )


def goal_progress(goal: Goal) -> GoalProgress:
    percent = 0
    if goal.target:
        ratio = goal.saved / goal.target
        # half-up rounding, so 12.5% shows as 13%; ratios of 1 or more, infinite included, are 100
        percent = math.floor(ratio * 100 + 0.5) if ratio < 1 else 100
    return GoalProgress(
        percent=percent,
        remaining=max(goal.target - goal.saved, 0),
        ahead=goal.saved > goal.target,
    )
