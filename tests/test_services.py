import json

from piggybank.config import STORAGE_KEY
from piggybank.events import EventBus, register_default_handlers
from piggybank.services import LedgerService
from piggybank.storage import MemoryStore, default_state, encode_state
from piggybank.domain import BudgetState, Goal


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now


def make_service(state=None, clock=None):
    store = MemoryStore()
    if state is not None:
        store.set(STORAGE_KEY, encode_state(state))
    bus = EventBus()
    register_default_handlers(bus)
    return LedgerService(store, bus=bus, clock=clock or FakeClock()), store


def stored(store):
    return json.loads(store.get(STORAGE_KEY))


def test_start_up_persists_defaults():
    service, store = make_service()
    assert service.state == default_state()
    assert stored(store)["available"] == 500


def test_add_goal_scenario_persists_and_notifies():
    service, store = make_service()
    assert service.add_goal("Trip", "1000")

    assert service.state.goals[-1].name == "Trip"
    assert service.state.available == 500
    assert stored(store)["goals"][-1]["name"] == "Trip"
    assert service.current_notification().message == "Created new goal: Trip"


def test_rejected_input_changes_nothing():
    service, store = make_service()
    before = store.get(STORAGE_KEY)

    assert not service.add_goal("", "100")
    assert not service.adjust_cash("0", "add")
    assert not service.pay_card("abc")
    assert not service.reset_card()

    assert service.state == default_state()
    assert store.get(STORAGE_KEY) == before
    assert service.current_notification() is None


def test_card_scenario_reports_actual_payment():
    service, _ = make_service()
    service.charge_card("200")
    assert service.state.credit_card_balance == 200

    service.card("500", "pay")
    assert service.state.available == 300
    assert service.state.credit_card_balance == 0
    assert service.current_notification().message == "Paid $200 to credit card"


def test_reset_card_keeps_available():
    service, _ = make_service()
    service.charge_card(75)
    assert service.reset_card()
    assert service.state.credit_card_balance == 0
    assert service.state.available == 500
    assert service.current_notification().message == "Credit card balance reset from $75"


def test_transfer_reports_moved_amount():
    state = BudgetState(available=500, credit_card_balance=0, goals=(Goal("g1", "Trip", 1000, 500),))
    service, store = make_service(state)

    assert service.transfer_to_goal("g1", "800")
    assert service.state.available == 0
    assert service.state.goals[0].saved == 1000
    assert stored(store)["goals"][0]["saved"] == 1000
    assert service.current_notification().message == "Saved $500 to your goal!"

    assert service.release_from_goal("g1", "100")
    assert service.state.available == 100
    assert service.current_notification().message == "Released $100 from goal"


def test_notification_expires_and_is_overwritten():
    clock = FakeClock()
    service, _ = make_service(clock=clock)
    service.adjust_cash("10", "add")
    clock.now += 1
    service.adjust_cash("5", "spend")
    assert service.current_notification().message == "Removed $5 from your balance"
    clock.now += 3
    assert service.current_notification() is None


def test_deposit_celebrates():
    clock = FakeClock()
    service, _ = make_service(clock=clock)
    service.deposit("40", source="drop")
    assert service.state.available == 540
    assert service.celebrating()
    assert service.current_notification() is None

    clock.now += 1
    assert not service.celebrating()
    service.deposit("10")
    assert service.current_notification().message == "Added $10 to available cash"


def test_delete_flow_through_service():
    service, store = make_service()
    service.request_delete("japan-trip")
    assert service.delete_flow.pending

    service.cancel_delete()
    assert len(service.state.goals) == 2

    service.request_delete("japan-trip")
    assert service.confirm_delete()
    assert [g["id"] for g in stored(store)["goals"]] == ["iphone"]
    assert not service.delete_flow.pending
    assert not service.confirm_delete()


def test_edit_flow_through_service():
    service, _ = make_service()
    service.start_edit("iphone")
    service.update_edit("iphone", "target", "0")
    assert not service.save_edit("iphone")
    assert service.edit_flow.is_editing("iphone")

    service.update_edit("iphone", "target", "999")
    assert service.save_edit("iphone")
    assert not service.edit_flow.is_editing("iphone")
    assert service.state.goals[1].target == 999

    service.start_edit("iphone")
    service.update_edit("iphone", "name", "Pixel")
    service.cancel_edit("iphone")
    assert service.state.goals[1].name == "New iPhone"


def test_wishlist_through_service():
    service, _ = make_service()
    assert service.add_wish("Camera", "650", "")
    wish_id = service.state.wishlist[0].id

    assert service.goal_from_wish(wish_id)
    assert service.state.goals[-1].target == 650
    assert len(service.state.wishlist) == 1

    assert service.delete_wish(wish_id)
    assert service.state.wishlist == ()


def test_hangout_through_service():
    service, _ = make_service()
    service.apply_template("nyc-day")
    assert service.hangout_total() == 140

    service.update_hangout("meals", "100")
    assert service.hangout_total() == 195
    assert service.goal_from_hangout()
    assert service.state.goals[-1].name == "NYC day trip"
    assert service.state.goals[-1].target == 195

    assert not service.save_template("   ")
    assert service.save_template("Big day")
    assert service.state.hangout_templates[-1].meals == 100


def test_tabs():
    service, _ = make_service()
    assert service.active_tab == "cash"
    service.set_tab("card")
    assert service.active_tab == "card"
    service.set_tab("nonsense")
    assert service.active_tab == "card"


def test_totals():
    service, _ = make_service()
    service.charge_card(600)
    totals = service.totals()
    assert totals.saved == 500
    assert totals.target == 3200
    assert totals.left_to_save == 2700
    assert totals.net_available == -100


def test_overflowing_deposits_survive_a_restart():
    service, store = make_service()
    service.deposit("1e308")
    service.deposit("1e308")
    assert service.state.available == 0

    service.adjust_cash("1e308", "add")
    service.adjust_cash("1e308", "add")

    bus = EventBus()
    register_default_handlers(bus)
    restarted = LedgerService(store, bus=bus, clock=FakeClock())
    assert restarted.state == service.state
    assert restarted.totals().net_available == 0
