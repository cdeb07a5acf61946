import logging
import time
from dataclasses import replace
from typing import Any, Callable, Dict, Optional

from piggybank import config
from piggybank import transforms
from piggybank.domain import BudgetState, HangoutDraft, Totals
from piggybank.events import (
    CARD_CHARGED,
    CARD_PAID,
    CARD_RESET,
    CASH_ADJUSTED,
    CASH_DEPOSITED,
    FUNDS_RELEASED,
    FUNDS_SAVED,
    GOAL_CREATED,
    GOAL_DELETED,
    GOAL_UPDATED,
    TEMPLATE_SAVED,
    WISH_ADDED,
    WISH_DELETED,
    EventBus,
    event_bus,
)
from piggybank.flows import Celebration, DeleteFlow, EditFlow, Flash, flash
from piggybank.functional import Either, find_goal, find_template, parse_amount
from piggybank.memo import summarize
from piggybank.storage import KeyValueStore, load_state, save_state

logger = logging.getLogger(__name__)

PayloadFn = Callable[[BudgetState, BudgetState], Dict[str, Any]]


class LedgerService:
    """Owner of the ledger for one UI session.

    Takes raw form input, runs the pure transform, and when the transform
    succeeds swaps in the new snapshot, writes it to the store and publishes
    an event whose handlers produce the success notification. Rejected input
    leaves everything untouched.

    store: key-value store the ledger is persisted to on every change
    bus: event bus notification handlers are registered on
    clock: seconds source used for notification and celebration expiry
    """

    def __init__(
        self,
        store: KeyValueStore,
        bus: EventBus = event_bus,
        clock: Callable[[], float] = time.monotonic,
        key: str = config.STORAGE_KEY,
    ):
        self.store = store
        self.bus = bus
        self.clock = clock
        self.key = key
        self.state: BudgetState = load_state(store, key)
        # normalise whatever was stored
        save_state(store, self.state, key)

        self.delete_flow = DeleteFlow()
        self.edit_flow = EditFlow()
        self.hangout_draft = HangoutDraft()
        self.active_tab = config.ACTION_TABS[0]
        self.notification: Optional[Flash] = None
        self.celebration = Celebration()

    # -- plumbing

    def _commit(self, result: Either[dict, BudgetState], event: Optional[str] = None,
                payload: Optional[PayloadFn] = None) -> bool:
        if result.is_left():
            logger.debug("Rejected %s: %s", event or "update", result.get_error())
            return False
        previous = self.state
        self.state = result.get_or_else(previous)
        save_state(self.store, self.state, self.key)
        if event:
            body = payload(previous, self.state) if payload else {}
            logger.info("%s %s", event, body)
            self._publish(event, body)
        return True

    def _publish(self, event: str, payload: Dict[str, Any]) -> None:
        now = self.clock()
        for result in self.bus.publish(event, payload):
            if result.get("message"):
                self.notification = flash(result["message"], now, result.get("kind", "success"))
            if result.get("celebrate"):
                self.celebration = self.celebration.trigger(now)

    def current_notification(self) -> Optional[Flash]:
        if self.notification and self.notification.active(self.clock()):
            return self.notification
        return None

    def celebrating(self) -> bool:
        return self.celebration.active(self.clock())

    def totals(self) -> Totals:
        return summarize(self.state)

    def set_tab(self, tab: str) -> None:
        if tab in config.ACTION_TABS:
            self.active_tab = tab

    # -- cash and card

    def adjust_cash(self, amount: Any, direction: str) -> bool:
        return self._commit(
            transforms.adjust_cash(self.state, amount, direction),
            CASH_ADJUSTED,
            lambda old, new: {"amount": parse_amount(amount), "direction": direction},
        )

    def deposit(self, amount: Any, source: str = "quick") -> bool:
        return self._commit(
            transforms.deposit(self.state, amount),
            CASH_DEPOSITED,
            lambda old, new: {"amount": new.available - old.available, "source": source},
        )

    def charge_card(self, amount: Any) -> bool:
        return self._commit(
            transforms.charge_card(self.state, amount),
            CARD_CHARGED,
            lambda old, new: {"amount": new.credit_card_balance - old.credit_card_balance},
        )

    def pay_card(self, amount: Any) -> bool:
        return self._commit(
            transforms.pay_card(self.state, amount),
            CARD_PAID,
            lambda old, new: {"amount": old.credit_card_balance - new.credit_card_balance},
        )

    def card(self, amount: Any, kind: str) -> bool:
        return self.charge_card(amount) if kind == "charge" else self.pay_card(amount)

    def reset_card(self) -> bool:
        return self._commit(
            transforms.reset_card(self.state),
            CARD_RESET,
            lambda old, new: {"amount": old.credit_card_balance},
        )

    # -- goals

    def add_goal(self, name: Optional[str], target: Any) -> bool:
        return self._commit(
            transforms.add_goal(self.state, name, target),
            GOAL_CREATED,
            lambda old, new: {"name": new.goals[-1].name, "id": new.goals[-1].id, "source": "form"},
        )

    def transfer_to_goal(self, goal_id: str, amount: Any) -> bool:
        return self._commit(
            transforms.transfer_to_goal(self.state, goal_id, amount),
            FUNDS_SAVED,
            lambda old, new: {"amount": old.available - new.available, "goal_id": goal_id},
        )

    def release_from_goal(self, goal_id: str, amount: Any) -> bool:
        return self._commit(
            transforms.release_from_goal(self.state, goal_id, amount),
            FUNDS_RELEASED,
            lambda old, new: {"amount": new.available - old.available, "goal_id": goal_id},
        )

    def start_edit(self, goal_id: str) -> None:
        goal = find_goal(self.state.goals, goal_id).get_or_else(None)
        if goal is not None:
            self.edit_flow = self.edit_flow.start(goal)

    def update_edit(self, goal_id: str, field_name: str, value: str) -> None:
        self.edit_flow = self.edit_flow.update(goal_id, field_name, value)

    def cancel_edit(self, goal_id: str) -> None:
        self.edit_flow = self.edit_flow.cancel(goal_id)

    def save_edit(self, goal_id: str) -> bool:
        self.edit_flow, result = self.edit_flow.save(self.state, goal_id)
        return self._commit(result, GOAL_UPDATED, lambda old, new: {"goal_id": goal_id})

    def request_delete(self, goal_id: str) -> None:
        self.delete_flow = self.delete_flow.request(self.state, goal_id)

    def cancel_delete(self) -> None:
        self.delete_flow = self.delete_flow.cancel()

    def confirm_delete(self) -> bool:
        candidate = self.delete_flow.candidate
        self.delete_flow, result = self.delete_flow.confirm(self.state)
        return self._commit(
            result,
            GOAL_DELETED,
            lambda old, new: {"goal_id": candidate.id, "name": candidate.name},
        )

    # -- wishlist

    def add_wish(self, title: Optional[str], price: Any, link: Optional[str] = "") -> bool:
        return self._commit(
            transforms.add_wish(self.state, title, price, link),
            WISH_ADDED,
            lambda old, new: {"id": new.wishlist[-1].id, "title": new.wishlist[-1].title},
        )

    def delete_wish(self, wish_id: str) -> bool:
        return self._commit(
            transforms.delete_wish(self.state, wish_id), WISH_DELETED, lambda old, new: {"id": wish_id}
        )

    def goal_from_wish(self, wish_id: str) -> bool:
        return self._commit(
            transforms.goal_from_wish(self.state, wish_id),
            GOAL_CREATED,
            lambda old, new: {"name": new.goals[-1].name, "id": new.goals[-1].id, "source": "wish"},
        )

    # -- hangout planner

    def update_hangout(self, field_name: str, value: str) -> None:
        if field_name in ("train", "meals", "activity"):
            self.hangout_draft = replace(self.hangout_draft, **{field_name: value})

    def hangout_total(self):
        return transforms.hangout_total(self.hangout_draft)

    def apply_template(self, template_id: str) -> None:
        template = find_template(self.state.hangout_templates, template_id).get_or_else(None)
        if template is not None:
            self.hangout_draft = transforms.apply_template(template)

    def save_template(self, name: Optional[str]) -> bool:
        return self._commit(
            transforms.save_template(self.state, name, self.hangout_draft),
            TEMPLATE_SAVED,
            lambda old, new: {"id": new.hangout_templates[-1].id, "name": new.hangout_templates[-1].name},
        )

    def goal_from_hangout(self) -> bool:
        return self._commit(
            transforms.goal_from_hangout(self.state, self.hangout_draft),
            GOAL_CREATED,
            lambda old, new: {"name": new.goals[-1].name, "id": new.goals[-1].id, "source": "hangout"},
        )
