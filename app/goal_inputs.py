"""Keep the goal-edit text inputs in step with the ledger's edit drafts.

Streamlit forgets the state of widgets that were not rendered on the last
run, so the inputs are re-seeded from the draft, which outlives page
switches.
"""

EDIT_FIELDS = ("name", "target", "saved")


def edit_key(goal_id, field):
    return f"edit_{field}_{goal_id}"


def seed_edit_inputs(session_state, ledger, goal_id, overwrite=False):
    draft = ledger.edit_flow.draft_for(goal_id)
    if draft is None:
        return
    for field in EDIT_FIELDS:
        key = edit_key(goal_id, field)
        if overwrite or key not in session_state:
            session_state[key] = getattr(draft, field)


def push_edit_input(session_state, ledger, goal_id, field):
    key = edit_key(goal_id, field)
    if key in session_state:
        ledger.update_edit(goal_id, field, session_state[key])


def push_edit_inputs(session_state, ledger, goal_id):
    for field in EDIT_FIELDS:
        push_edit_input(session_state, ledger, goal_id, field)
