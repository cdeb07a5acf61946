from dataclasses import replace
from typing import Any, Optional
from uuid import uuid4

from piggybank.config import HANGOUT_GOAL_NAME
from piggybank.domain import (
    BudgetState,
    Goal,
    GoalDraft,
    HangoutDraft,
    HangoutTemplate,
    Number,
    WishItem,
)
from piggybank.functional import (
    Either,
    Left,
    Right,
    clamp_number,
    find_goal,
    find_wish,
    not_found,
    parse_amount,
    require_amount,
    require_name,
)

CASH_DIRECTIONS = ("add", "spend")


def new_id() -> str:
    return str(uuid4())


def _rejected(error: str, message: str, **extra: Any) -> Left:
    return Left({"error": error, "message": message, **extra})


def _with_goal(goals: tuple[Goal, ...], goal_id: str, **changes: Any) -> tuple[Goal, ...]:
    return tuple(replace(g, **changes) if g.id == goal_id else g for g in goals)


def _append_goal(state: BudgetState, name: str, target: Number) -> BudgetState:
    goal = Goal(id=new_id(), name=name, target=target, saved=0)
    return replace(state, goals=state.goals + (goal,))


def adjust_cash(state: BudgetState, amount: Any, direction: str) -> Either[dict, BudgetState]:
    if direction not in CASH_DIRECTIONS:
        return _rejected("bad_direction", f"Unknown direction {direction!r}", direction=direction)

    def apply(value: Number) -> BudgetState:
        delta = value if direction == "add" else -value
        return replace(state, available=clamp_number(state.available + delta))

    return require_amount(amount).map(apply)


def deposit(state: BudgetState, amount: Any) -> Either[dict, BudgetState]:
    """Quick deposit into available cash (the piggy bank drop)."""
    return require_amount(amount).map(
        lambda value: replace(state, available=clamp_number(state.available + value))
    )


def add_goal(state: BudgetState, name: Optional[str], target: Any) -> Either[dict, BudgetState]:
    return require_name(name).bind(
        lambda clean: require_amount(target, "target").map(
            lambda value: _append_goal(state, clean, value)
        )
    )


def charge_card(state: BudgetState, amount: Any) -> Either[dict, BudgetState]:
    return require_amount(amount).map(
        lambda value: replace(state, credit_card_balance=clamp_number(state.credit_card_balance + value))
    )


def card_payment(state: BudgetState, amount: Number) -> Number:
    """A payment is capped by both what's available and what's owed."""
    return min(amount, state.available, state.credit_card_balance)


def pay_card(state: BudgetState, amount: Any) -> Either[dict, BudgetState]:
    def apply(value: Number) -> BudgetState:
        payment = card_payment(state, value)
        return replace(
            state,
            available=state.available - payment,
            credit_card_balance=state.credit_card_balance - payment,
        )

    return require_amount(amount).map(apply)


def reset_card(state: BudgetState) -> Either[dict, BudgetState]:
    """Write the card balance off without touching available cash."""
    if state.credit_card_balance == 0:
        return _rejected("nothing_owed", "Credit card balance is already zero")
    return Right(replace(state, credit_card_balance=0))


def transfer_to_goal(state: BudgetState, goal_id: str, amount: Any) -> Either[dict, BudgetState]:
    def apply(value: Number) -> Either[dict, BudgetState]:
        if not state.available:
            return _rejected("no_available_cash", "Nothing available to move")
        goal = find_goal(state.goals, goal_id).get_or_else(None)
        if goal is None:
            return Left(not_found("goal", goal_id))
        move = min(value, state.available)
        return Right(replace(
            state,
            available=state.available - move,
            goals=_with_goal(state.goals, goal_id, saved=clamp_number(goal.saved + move)),
        ))

    return require_amount(amount).bind(apply)


def release_from_goal(state: BudgetState, goal_id: str, amount: Any) -> Either[dict, BudgetState]:
    def apply(value: Number) -> Either[dict, BudgetState]:
        goal = find_goal(state.goals, goal_id).get_or_else(None)
        if goal is None:
            return Left(not_found("goal", goal_id))
        if not goal.saved:
            return _rejected("nothing_saved", f"Goal {goal.name} has nothing saved", id=goal_id)
        move = min(value, goal.saved)
        return Right(replace(
            state,
            available=clamp_number(state.available + move),
            goals=_with_goal(state.goals, goal_id, saved=goal.saved - move),
        ))

    return require_amount(amount).bind(apply)


def edit_goal(state: BudgetState, goal_id: str, draft: GoalDraft) -> Either[dict, BudgetState]:
    if find_goal(state.goals, goal_id).is_none():
        return Left(not_found("goal", goal_id))
    saved = parse_amount(draft.saved)
    return require_name(draft.name).bind(
        lambda name: require_amount(draft.target, "target").map(
            lambda target: replace(
                state,
                goals=_with_goal(state.goals, goal_id, name=name, target=target, saved=saved),
            )
        )
    )


def remove_goal(state: BudgetState, goal_id: str) -> Either[dict, BudgetState]:
    if find_goal(state.goals, goal_id).is_none():
        return Left(not_found("goal", goal_id))
    return Right(replace(state, goals=tuple(g for g in state.goals if g.id != goal_id)))


def add_wish(
    state: BudgetState, title: Optional[str], price: Any, link: Optional[str] = ""
) -> Either[dict, BudgetState]:
    def append(clean: str, value: Number) -> BudgetState:
        item = WishItem(id=new_id(), title=clean, price=value, link=(link or "").strip())
        return replace(state, wishlist=state.wishlist + (item,))

    return require_name(title, "title").bind(
        lambda clean: require_amount(price, "price").map(lambda value: append(clean, value))
    )


def delete_wish(state: BudgetState, wish_id: str) -> Either[dict, BudgetState]:
    return Right(replace(state, wishlist=tuple(w for w in state.wishlist if w.id != wish_id)))


def goal_from_wish(state: BudgetState, wish_id: str) -> Either[dict, BudgetState]:
    """Copy a wishlist item into a new goal; the wish itself stays on the list."""
    def promote(item: WishItem) -> Either[dict, BudgetState]:
        if not item.price:
            return _rejected("zero_amount", f"Wish {item.title} has no price", id=wish_id)
        return Right(_append_goal(state, item.title, item.price))

    return find_wish(state.wishlist, wish_id).to_either(not_found("wish", wish_id)).bind(promote)


def hangout_total(draft: HangoutDraft) -> Number:
    return clamp_number(parse_amount(draft.train) + parse_amount(draft.meals) + parse_amount(draft.activity))


def goal_from_hangout(state: BudgetState, draft: HangoutDraft) -> Either[dict, BudgetState]:
    # The name never follows the applied template, only the target does.
    total = hangout_total(draft)
    if not total:
        return _rejected("zero_amount", "Hangout budget is empty")
    return Right(_append_goal(state, HANGOUT_GOAL_NAME, total))


def save_template(state: BudgetState, name: Optional[str], draft: HangoutDraft) -> Either[dict, BudgetState]:
    def append(clean: str) -> Either[dict, BudgetState]:
        if not hangout_total(draft):
            return _rejected("zero_amount", "Hangout budget is empty")
        template = HangoutTemplate(
            id=new_id(),
            name=clean,
            train=parse_amount(draft.train),
            meals=parse_amount(draft.meals),
            activity=parse_amount(draft.activity),
        )
        return Right(replace(state, hangout_templates=state.hangout_templates + (template,)))

    return require_name(name).bind(append)


def apply_template(template: HangoutTemplate) -> HangoutDraft:
    return HangoutDraft(
        train=str(template.train),
        meals=str(template.meals),
        activity=str(template.activity),
    )
