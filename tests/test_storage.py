import json

import pytest

from piggybank.config import STORAGE_KEY
from piggybank.domain import BudgetState, Goal, HangoutTemplate, WishItem
from piggybank.storage import (
    JsonFileStore, MemoryStore, decode_state, default_state, encode_state, load_state, save_state,
)


def sample_state():
    return BudgetState(
        available=320.5,
        credit_card_balance=40,
        hangout_templates=(HangoutTemplate("t1", "Beach", 10, 20, 5),),
        wishlist=(WishItem("w1", "Lamp", 45, "https://example.com/lamp"), WishItem("w2", "Rug", 80, "")),
        goals=(Goal("g1", "Trip", 1000, 1200), Goal("g2", "Bike", 300, 0)),
    )


def test_round_trip():
    state = sample_state()
    assert decode_state(encode_state(state)) == state


def test_default_state():
    state = default_state()
    assert state.available == 500
    assert state.credit_card_balance == 0
    assert [t.id for t in state.hangout_templates] == ["nyc-day"]
    assert state.wishlist == ()
    assert [g.id for g in state.goals] == ["japan-trip", "iphone"]


@pytest.mark.parametrize("raw", [None, "", "   ", "null", "[]", "[1, 2]", "42", '"text"', "{not json", "NaN"])
def test_malformed_input_gives_default_state(raw):
    assert decode_state(raw) == default_state()


def test_empty_object_uses_field_defaults():
    state = decode_state("{}")
    defaults = default_state()
    assert state.available == 0
    assert state.credit_card_balance == 0
    assert state.hangout_templates == defaults.hangout_templates
    assert state.wishlist == ()
    assert state.goals == defaults.goals


def test_non_list_fields_fall_back():
    raw = json.dumps({
        "available": 100,
        "creditCardBalance": "lots",
        "goals": "not a list",
        "wishlist": {"a": 1},
        "hangoutTemplates": 7,
    })
    state = decode_state(raw)
    assert state.available == 100
    assert state.credit_card_balance == 0
    assert state.goals == default_state().goals
    assert state.wishlist == ()
    assert state.hangout_templates == default_state().hangout_templates


def test_item_level_defaults():
    raw = json.dumps({
        "available": -50,
        "goals": [{"target": "1000", "saved": 20}, {"id": "g2", "name": "", "target": 5}, None],
        "wishlist": [{"id": "w1", "price": -3, "link": None}],
        "hangoutTemplates": [{"id": "t1", "train": 1e400}],
    })
    state = decode_state(raw)
    assert state.available == 0

    first, second, third = state.goals
    assert first.id and first.name == "Untitled goal"
    assert first.target == 0 and first.saved == 20
    assert second.id == "g2" and second.name == "Untitled goal"
    assert third.name == "Untitled goal" and third.target == 0

    wish = state.wishlist[0]
    assert (wish.title, wish.price, wish.link) == ("Wish", 0, "")

    template = state.hangout_templates[0]
    assert template.name == "Hangout"
    assert template.train == 0


def test_duplicate_ids_are_reassigned():
    raw = json.dumps({"goals": [
        {"id": "same", "name": "A", "target": 1, "saved": 0},
        {"id": "same", "name": "B", "target": 1, "saved": 0},
    ]})
    goals = decode_state(raw).goals
    assert goals[0].id == "same"
    assert goals[1].id != "same"


def test_load_and_save_with_memory_store():
    store = MemoryStore()
    assert load_state(store) == default_state()

    state = sample_state()
    save_state(store, state)
    assert json.loads(store.get(STORAGE_KEY))["creditCardBalance"] == 40
    assert load_state(store) == state


def test_json_file_store(tmp_path):
    path = tmp_path / "nested" / "ledger.json"
    store = JsonFileStore(path)
    assert store.get(STORAGE_KEY) is None

    save_state(store, sample_state())
    assert path.exists()
    assert load_state(JsonFileStore(path)) == sample_state()


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("{broken", encoding="utf-8")
    assert JsonFileStore(path).get(STORAGE_KEY) is None
    assert load_state(JsonFileStore(path)) == default_state()


def test_save_errors_propagate(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")
    store = JsonFileStore(blocker / "ledger.json")
    with pytest.raises(OSError):
        save_state(store, sample_state())


def test_decode_huge_integers_does_not_raise():
    raw = '{"available": 1' + '0' * 400 + ', "goals": [{"id": "g", "name": "Big", "target": 1' + '0' * 400 + ', "saved": 5}]}'
    state = decode_state(raw)
    assert state.available == 0
    assert state.goals[0].target == 0
    assert state.goals[0].saved == 5


def test_numeric_ids_are_kept_as_text():
    raw = json.dumps({"goals": [
        {"id": 5, "name": "A", "target": 1, "saved": 0},
        {"id": 0, "name": "B", "target": 1, "saved": 0},
        {"id": True, "name": "C", "target": 1, "saved": 0},
    ]})
    first, second, third = decode_state(raw).goals
    assert first.id == "5"
    assert second.id not in ("0", "")
    assert third.id != "True"
