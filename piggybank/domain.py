from dataclasses import dataclass, field
from typing import Union

Number = Union[int, float]


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target: Number
    saved: Number    # may run ahead of target


@dataclass(frozen=True)
class WishItem:
    id: str
    title: str
    price: Number
    link: str = ""


@dataclass(frozen=True)
class HangoutTemplate:
    id: str
    name: str
    train: Number
    meals: Number
    activity: Number


@dataclass(frozen=True)
class BudgetState:
    available: Number
    credit_card_balance: Number
    hangout_templates: tuple[HangoutTemplate, ...] = ()
    wishlist: tuple[WishItem, ...] = ()
    goals: tuple[Goal, ...] = ()


# Raw form text, parsed only when totalled or saved
@dataclass(frozen=True)
class HangoutDraft:
    train: str = ""
    meals: str = ""
    activity: str = ""


@dataclass(frozen=True)
class GoalDraft:
    name: str
    target: str
    saved: str


@dataclass(frozen=True)
class Totals:
    saved: Number
    target: Number
    left_to_save: Number
    net_available: Number  # negative when the card owes more than is available


@dataclass(frozen=True)
class GoalProgress:
    percent: int
    remaining: Number
    ahead: bool = field(default=False)
