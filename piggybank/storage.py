"""Persistence for the ledger.

The whole :class:`BudgetState` is written as one JSON document under a fixed
key of a small key-value store, the way the browser app keeps it in local
storage. Loading is defensive: whatever is found under the key is turned into
a valid state, falling back to defaults field by field.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

from piggybank import config
from piggybank.domain import BudgetState, Goal, HangoutTemplate, WishItem
from piggybank.functional import clamp_number
from piggybank.transforms import new_id

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Dict-backed store, handy for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Key-value store kept in a single JSON file of ``{key: text}`` pairs."""

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path else config.DATA_FILE

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: top level is %s", self.path, type(data).__name__)
            return {}
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open('w', encoding='utf-8') as handle:
            json.dump(data, handle, indent=2, sort_keys=True)


def default_state() -> BudgetState:
    return BudgetState(
        available=config.DEFAULT_AVAILABLE,
        credit_card_balance=config.DEFAULT_CREDIT_CARD_BALANCE,
        hangout_templates=tuple(HangoutTemplate(**t) for t in config.DEFAULT_HANGOUT_TEMPLATES),
        wishlist=(),
        goals=tuple(Goal(**g) for g in config.DEFAULT_GOALS),
    )


def _text(value: Any, fallback: str) -> str:
    return value if isinstance(value, str) and value else fallback


def _item_id(value: Any) -> str:
    # older data may carry numeric ids; keep them as text (NaN never equals itself and is dropped)
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value and value == value:
        return str(value)
    return _text(value, "")


def _decode_items(raw: list, build: Callable[[Dict[str, Any], str], Any]) -> tuple:
    seen: set[str] = set()
    items = []
    for entry in raw:
        fields = entry if isinstance(entry, dict) else {}
        item_id = _item_id(fields.get("id"))
        if not item_id or item_id in seen:
            item_id = new_id()
        seen.add(item_id)
        items.append(build(fields, item_id))
    return tuple(items)


def _template(fields: Dict[str, Any], item_id: str) -> HangoutTemplate:
    return HangoutTemplate(
        id=item_id,
        name=_text(fields.get("name"), config.FALLBACK_TEMPLATE_NAME),
        train=clamp_number(fields.get("train")),
        meals=clamp_number(fields.get("meals")),
        activity=clamp_number(fields.get("activity")),
    )


def _wish(fields: Dict[str, Any], item_id: str) -> WishItem:
    return WishItem(
        id=item_id,
        title=_text(fields.get("title"), config.FALLBACK_WISH_TITLE),
        price=clamp_number(fields.get("price")),
        link=_text(fields.get("link"), ""),
    )


def _goal(fields: Dict[str, Any], item_id: str) -> Goal:
    return Goal(
        id=item_id,
        name=_text(fields.get("name"), config.FALLBACK_GOAL_NAME),
        target=clamp_number(fields.get("target")),
        saved=clamp_number(fields.get("saved")),
    )


def decode_state(raw: Optional[str]) -> BudgetState:
    """Build a valid state from whatever text was stored. Never raises."""
    if not raw or not raw.strip():
        return default_state()
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Stored ledger is not valid JSON, starting from defaults")
        return default_state()
    if not isinstance(parsed, dict):
        logger.warning("Stored ledger is a %s, starting from defaults", type(parsed).__name__)
        return default_state()

    defaults = default_state()
    templates = parsed.get("hangoutTemplates")
    wishlist = parsed.get("wishlist")
    goals = parsed.get("goals")
    for key, value in (("hangoutTemplates", templates), ("wishlist", wishlist), ("goals", goals)):
        if value is not None and not isinstance(value, list):
            logger.warning("Stored %s is not a list, using the default", key)

    return BudgetState(
        available=clamp_number(parsed.get("available")),
        credit_card_balance=clamp_number(parsed.get("creditCardBalance")),
        hangout_templates=(
            _decode_items(templates, _template) if isinstance(templates, list)
            else defaults.hangout_templates
        ),
        wishlist=_decode_items(wishlist, _wish) if isinstance(wishlist, list) else (),
        goals=_decode_items(goals, _goal) if isinstance(goals, list) else defaults.goals,
    )


def to_payload(state: BudgetState) -> Dict[str, Any]:
    return {
        "available": state.available,
        "creditCardBalance": state.credit_card_balance,
        "hangoutTemplates": [
            {"id": t.id, "name": t.name, "train": t.train, "meals": t.meals, "activity": t.activity}
            for t in state.hangout_templates
        ],
        "wishlist": [
            {"id": w.id, "title": w.title, "price": w.price, "link": w.link}
            for w in state.wishlist
        ],
        "goals": [
            {"id": g.id, "name": g.name, "target": g.target, "saved": g.saved}
            for g in state.goals
        ],
    }


def encode_state(state: BudgetState) -> str:
    return json.dumps(to_payload(state))


def load_state(store: KeyValueStore, key: str = config.STORAGE_KEY) -> BudgetState:
    state = decode_state(store.get(key))
    logger.info("Loaded ledger: %d goals, %d wishes, %d templates",
                len(state.goals), len(state.wishlist), len(state.hangout_templates))
    return state


def save_state(store: KeyValueStore, state: BudgetState, key: str = config.STORAGE_KEY) -> None:
    # write errors propagate to the caller
    store.set(key, encode_state(state))
