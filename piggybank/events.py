from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

from piggybank.formatting import format_money

__all__ = [
    'event_bus', 'Event', 'EventBus', 'register_default_handlers',
    'CASH_ADJUSTED', 'CASH_DEPOSITED', 'GOAL_CREATED', 'GOAL_UPDATED', 'GOAL_DELETED',
    'CARD_CHARGED', 'CARD_PAID', 'CARD_RESET', 'FUNDS_SAVED', 'FUNDS_RELEASED',
    'WISH_ADDED', 'WISH_DELETED', 'TEMPLATE_SAVED',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


CASH_ADJUSTED = "CASH_ADJUSTED"
CASH_DEPOSITED = "CASH_DEPOSITED"
GOAL_CREATED = "GOAL_CREATED"
GOAL_UPDATED = "GOAL_UPDATED"
GOAL_DELETED = "GOAL_DELETED"
CARD_CHARGED = "CARD_CHARGED"
CARD_PAID = "CARD_PAID"
CARD_RESET = "CARD_RESET"
FUNDS_SAVED = "FUNDS_SAVED"
FUNDS_RELEASED = "FUNDS_RELEASED"
WISH_ADDED = "WISH_ADDED"
WISH_DELETED = "WISH_DELETED"
TEMPLATE_SAVED = "TEMPLATE_SAVED"

event_bus = EventBus()


def cash_message_handler(event: Event, payload: dict) -> dict:
    amount = format_money(payload.get("amount", 0))
    if payload.get("direction") == "spend":
        return {"message": f"Removed {amount} from your balance"}
    return {"message": f"Added {amount} to your balance"}


def deposit_message_handler(event: Event, payload: dict) -> dict:
    # drag-and-drop deposits only celebrate
    result = {"celebrate": True}
    if payload.get("source") != "drop":
        result["message"] = f"Added {format_money(payload.get('amount', 0))} to available cash"
    return result


def goal_created_handler(event: Event, payload: dict) -> dict:
    if payload.get("source") != "form":
        return {}
    return {"message": f"Created new goal: {payload.get('name', '')}"}


def card_message_handler(event: Event, payload: dict) -> dict:
    amount = format_money(payload.get("amount", 0))
    if event.name == CARD_CHARGED:
        return {"message": f"Added {amount} to card balance"}
    if event.name == CARD_PAID:
        return {"message": f"Paid {amount} to credit card"}
    return {"message": f"Credit card balance reset from {amount}"}


def transfer_message_handler(event: Event, payload: dict) -> dict:
    amount = format_money(payload.get("amount", 0))
    if event.name == FUNDS_SAVED:
        return {"message": f"Saved {amount} to your goal!"}
    return {"message": f"Released {amount} from goal"}


def register_default_handlers(bus: EventBus = event_bus):
    bus.subscribe(CASH_ADJUSTED, cash_message_handler)
    bus.subscribe(CASH_DEPOSITED, deposit_message_handler)
    bus.subscribe(GOAL_CREATED, goal_created_handler)
    for name in (CARD_CHARGED, CARD_PAID, CARD_RESET):
        bus.subscribe(name, card_message_handler)
    for name in (FUNDS_SAVED, FUNDS_RELEASED):
        bus.subscribe(name, transfer_message_handler)


register_default_handlers()
