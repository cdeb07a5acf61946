import importlib.util
from pathlib import Path

from piggybank.events import EventBus, register_default_handlers
from piggybank.services import LedgerService
from piggybank.storage import MemoryStore

MODULE_PATH = Path(__file__).resolve().parents[1] / 'app' / 'goal_inputs.py'


def _load_inputs_module():
    spec = importlib.util.spec_from_file_location('goal_inputs_test', MODULE_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _service():
    bus = EventBus()
    register_default_handlers(bus)
    return LedgerService(MemoryStore(), bus=bus, clock=lambda: 0.0)


def test_start_edit_seeds_inputs_from_goal():
    inputs = _load_inputs_module()
    ledger = _service()
    goal = ledger.state.goals[0]
    session = {}

    ledger.start_edit(goal.id)
    inputs.seed_edit_inputs(session, ledger, goal.id, overwrite=True)

    assert session[inputs.edit_key(goal.id, 'name')] == goal.name
    assert session[inputs.edit_key(goal.id, 'target')] == str(goal.target)
    assert session[inputs.edit_key(goal.id, 'saved')] == str(goal.saved)


def test_typed_values_survive_leaving_the_goals_page():
    inputs = _load_inputs_module()
    ledger = _service()
    goal = ledger.state.goals[0]
    session = {}
    ledger.start_edit(goal.id)
    inputs.seed_edit_inputs(session, ledger, goal.id, overwrite=True)

    name_key = inputs.edit_key(goal.id, 'name')
    session[name_key] = 'Pixel'
    inputs.push_edit_input(session, ledger, goal.id, 'name')

    # switching pages drops the widget state of the hidden inputs
    for field in inputs.EDIT_FIELDS:
        session.pop(inputs.edit_key(goal.id, field))

    inputs.seed_edit_inputs(session, ledger, goal.id)
    assert session[name_key] == 'Pixel'
    assert session[inputs.edit_key(goal.id, 'target')] == str(goal.target)

    inputs.push_edit_inputs(session, ledger, goal.id)
    assert ledger.save_edit(goal.id)
    saved = next(g for g in ledger.state.goals if g.id == goal.id)
    assert saved.name == 'Pixel'
    assert saved.target == goal.target


def test_seed_keeps_what_is_already_typed():
    inputs = _load_inputs_module()
    ledger = _service()
    goal = ledger.state.goals[0]
    ledger.start_edit(goal.id)
    session = {inputs.edit_key(goal.id, 'name'): 'half-typed'}

    inputs.seed_edit_inputs(session, ledger, goal.id)

    assert session[inputs.edit_key(goal.id, 'name')] == 'half-typed'


def test_seed_without_edit_does_nothing():
    inputs = _load_inputs_module()
    ledger = _service()
    session = {}

    inputs.seed_edit_inputs(session, ledger, ledger.state.goals[0].id)

    assert session == {}
