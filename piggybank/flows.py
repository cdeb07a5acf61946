"""Small state machines behind the goal cards and transient UI flags.

Each flow is an immutable value; transitions return a new flow (and, where
the ledger changes, the :class:`Either` produced by the matching transform).
"""

from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Tuple

from piggybank.config import CELEBRATE_SECONDS, NOTIFICATION_SECONDS
from piggybank.domain import BudgetState, Goal, GoalDraft
from piggybank.functional import Either, Left, find_goal
from piggybank.transforms import edit_goal, remove_goal

DRAFT_FIELDS = ("name", "target", "saved")


@dataclass(frozen=True)
class DeleteFlow:
    """Idle when ``candidate`` is None, PendingDelete(goal) otherwise."""

    candidate: Optional[Goal] = None

    @property
    def pending(self) -> bool:
        return self.candidate is not None

    def request(self, state: BudgetState, goal_id: str) -> 'DeleteFlow':
        goal = find_goal(state.goals, goal_id).get_or_else(None)
        return DeleteFlow(goal) if goal else self

    def cancel(self) -> 'DeleteFlow':
        return DeleteFlow()

    def confirm(self, state: BudgetState) -> Tuple['DeleteFlow', Either[dict, BudgetState]]:
        if self.candidate is None:
            return self, Left({"error": "nothing_pending", "message": "No goal is waiting for deletion"})
        return DeleteFlow(), remove_goal(state, self.candidate.id)


@dataclass(frozen=True)
class EditFlow:
    """Per-goal Viewing / Editing(draft) machine; a goal is editing while it has a draft."""

    drafts: Mapping[str, GoalDraft] = field(default_factory=dict)

    def is_editing(self, goal_id: str) -> bool:
        return goal_id in self.drafts

    def draft_for(self, goal_id: str) -> Optional[GoalDraft]:
        return self.drafts.get(goal_id)

    def start(self, goal: Goal) -> 'EditFlow':
        draft = GoalDraft(name=goal.name, target=str(goal.target), saved=str(goal.saved))
        return EditFlow({**self.drafts, goal.id: draft})

    def update(self, goal_id: str, field_name: str, value: str) -> 'EditFlow':
        draft = self.drafts.get(goal_id)
        if draft is None or field_name not in DRAFT_FIELDS:
            return self
        return EditFlow({**self.drafts, goal_id: replace(draft, **{field_name: value})})

    def cancel(self, goal_id: str) -> 'EditFlow':
        return EditFlow({k: v for k, v in self.drafts.items() if k != goal_id})

    def save(self, state: BudgetState, goal_id: str) -> Tuple['EditFlow', Either[dict, BudgetState]]:
        draft = self.drafts.get(goal_id)
        if draft is None:
            return self, Left({"error": "not_editing", "message": f"Goal {goal_id} is not being edited"})
        result = edit_goal(state, goal_id, draft)
        # an invalid draft keeps the goal in editing mode
        return (self.cancel(goal_id) if result.is_right() else self), result


@dataclass(frozen=True)
class Flash:
    message: str
    kind: str
    expires_at: float

    def active(self, now: float) -> bool:
        return now < self.expires_at


def flash(message: str, now: float, kind: str = "success", ttl: float = NOTIFICATION_SECONDS) -> Flash:
    return Flash(message=message, kind=kind, expires_at=now + ttl)


@dataclass(frozen=True)
class Celebration:
    until: float = 0.0

    def trigger(self, now: float, ttl: float = CELEBRATE_SECONDS) -> 'Celebration':
        return Celebration(until=max(self.until, now + ttl))

    def active(self, now: float) -> bool:
        return now < self.until
