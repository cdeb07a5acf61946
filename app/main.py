import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import plotly.express as px

from app.goal_inputs import EDIT_FIELDS, edit_key, push_edit_input, push_edit_inputs, seed_edit_inputs
from piggybank.config import ACTION_TABS, configure_logging, ensure_data_directories
from piggybank.formatting import format_money
from piggybank.memo import goal_progress
from piggybank.services import LedgerService
from piggybank.storage import JsonFileStore

st.set_page_config(page_title="LetsSave", layout="wide")
configure_logging()

if "ledger" not in st.session_state:
    ensure_data_directories()
    st.session_state.ledger = LedgerService(JsonFileStore())

ledger: LedgerService = st.session_state.ledger

TAB_LABELS = {
    "cash": "💵 Cash",
    "card": "💳 Card",
    "hangout": "🚆 Hangout",
    "goal": "🎯 New goal",
}


def md_money(value) -> str:
    # keep markdown from reading "$...$" as math
    return format_money(value).replace("$", "\\$")


def goals_to_df(goals):
    rows = []
    for g in goals:
        progress = goal_progress(g)
        rows.append({
            "Goal": g.name,
            "Saved": g.saved,
            "Target": g.target,
            "Remaining": progress.remaining,
            "Progress": progress.percent,
        })
    return pd.DataFrame(rows, columns=["Goal", "Saved", "Target", "Remaining", "Progress"])


# -- callbacks; they run before the page re-renders

def _pop(key):
    value = st.session_state.get(key, "")
    st.session_state[key] = ""
    return value


def on_quick_deposit():
    ledger.deposit(_pop("coin_amount"), source="quick")


def on_reset_card():
    ledger.reset_card()


def on_tab_change():
    ledger.set_tab(st.session_state["action_tab"])


def on_hangout_field(field):
    ledger.update_hangout(field, st.session_state[f"hangout_{field}"])


def on_apply_template(template_id):
    ledger.apply_template(template_id)
    for field in ("train", "meals", "activity"):
        st.session_state[f"hangout_{field}"] = getattr(ledger.hangout_draft, field)


def on_goal_from_hangout():
    ledger.goal_from_hangout()


def on_save_template():
    if ledger.save_template(st.session_state.get("template_name", "")):
        st.session_state["template_name"] = ""


def on_goal_from_wish(wish_id):
    ledger.goal_from_wish(wish_id)


def on_delete_wish(wish_id):
    ledger.delete_wish(wish_id)


def on_start_edit(goal_id):
    ledger.start_edit(goal_id)
    seed_edit_inputs(st.session_state, ledger, goal_id, overwrite=True)


def on_edit_field(goal_id, field):
    push_edit_input(st.session_state, ledger, goal_id, field)


def on_cancel_edit(goal_id):
    ledger.cancel_edit(goal_id)


def on_save_edit(goal_id):
    push_edit_inputs(st.session_state, ledger, goal_id)
    ledger.save_edit(goal_id)


def on_request_delete(goal_id):
    ledger.request_delete(goal_id)


def on_confirm_delete():
    ledger.confirm_delete()


def on_cancel_delete():
    ledger.cancel_delete()


def on_move(goal_id, release=False):
    amount = _pop(f"move_{goal_id}")
    if release:
        ledger.release_from_goal(goal_id, amount)
    else:
        ledger.transfer_to_goal(goal_id, amount)


# -- page

st.sidebar.markdown("### 🐷 LetsSave")
menu = st.sidebar.radio("Menu", ["🏠 Overview", "💰 Balance", "🎁 Wishlist", "🎯 Goals"])
st.sidebar.caption("Stay focused on the goals you love.")

flash_msg = ledger.current_notification()
if flash_msg:
    st.success(flash_msg.message)

if ledger.delete_flow.pending:
    candidate = ledger.delete_flow.candidate
    with st.container(border=True):
        st.markdown("### 🩷 Delete this piggybank?")
        st.write(f"You're about to delete “{candidate.name}”. This can't be undone.")
        keep_col, delete_col = st.columns(2)
        keep_col.button("Keep it", key="btn_keep_goal", on_click=on_cancel_delete)
        delete_col.button("Delete", key="btn_confirm_delete", type="primary", on_click=on_confirm_delete)

state = ledger.state
totals = ledger.totals()

if menu == "🏠 Overview":
    st.title("🏠 Overview")

    k1, k2, k3, k4, k5 = st.columns(5)
    with k1:
        st.metric("Net available", format_money(totals.net_available))
    with k2:
        st.metric("Saved in goals", format_money(totals.saved))
    with k3:
        st.metric("Card balance", format_money(state.credit_card_balance))
        if state.credit_card_balance > 0:
            st.button("Reset", key="btn_reset_card", on_click=on_reset_card)
    with k4:
        st.metric("Left to save", format_money(totals.left_to_save))
    with k5:
        st.metric("Goals", len(state.goals))

    st.subheader("🪙 Feed the piggy")
    if ledger.celebrating():
        st.balloons()
    dep_col, btn_col = st.columns([3, 1])
    with dep_col:
        st.text_input("Coin amount", key="coin_amount", placeholder="25")
    with btn_col:
        label = f"Add ${st.session_state.get('coin_amount')}" if st.session_state.get("coin_amount") else "Add"
        st.button(label, key="btn_quick_deposit", on_click=on_quick_deposit)
    st.caption(f"Targets: {md_money(totals.target)} • {len(state.goals)} goals")

    df_goals = goals_to_df(state.goals)
    if not df_goals.empty:
        fig = px.bar(
            df_goals,
            x="Goal",
            y=["Saved", "Remaining"],
            labels={"value": "USD", "variable": ""},
            title="Goal progress",
            template="plotly_dark",
        )
        st.plotly_chart(fig, use_container_width=True)
    else:
        st.info("No goals yet. Create one from the Balance tab.")

elif menu == "💰 Balance":
    st.title("💰 Balance")
    st.caption(f"Available: {md_money(state.available)} • Net: {md_money(totals.net_available)}")

    st.radio(
        "Action",
        ACTION_TABS,
        index=ACTION_TABS.index(ledger.active_tab),
        format_func=lambda tab: TAB_LABELS[tab],
        horizontal=True,
        key="action_tab",
        on_change=on_tab_change,
    )

    if ledger.active_tab == "cash":
        with st.form("cash_form", clear_on_submit=True):
            amount = st.text_input("Amount", placeholder="50")
            direction = st.radio("Type", ["add", "spend"], horizontal=True,
                                 format_func=lambda d: "Add cash" if d == "add" else "Spent cash")
            if st.form_submit_button("Update balance"):
                ledger.adjust_cash(amount, direction)
                st.rerun()

    elif ledger.active_tab == "card":
        with st.form("card_form", clear_on_submit=True):
            amount = st.text_input("Amount", placeholder="120")
            kind = st.radio("Type", ["charge", "pay"], horizontal=True,
                            format_func=lambda k: "New charge" if k == "charge" else "Payment")
            if st.form_submit_button("Update card"):
                ledger.card(amount, kind)
                st.rerun()
        st.caption(f"Card balance: {md_money(state.credit_card_balance)}")

    elif ledger.active_tab == "hangout":
        st.write("**Templates**")
        if state.hangout_templates:
            tpl_cols = st.columns(len(state.hangout_templates))
            for col, template in zip(tpl_cols, state.hangout_templates):
                col.button(template.name, key=f"tpl_{template.id}",
                           on_click=on_apply_template, args=(template.id,))
        for field in ("train", "meals", "activity"):
            key = f"hangout_{field}"
            if key not in st.session_state:
                st.session_state[key] = getattr(ledger.hangout_draft, field)
            st.text_input(field.capitalize(), key=key, placeholder="0",
                          on_change=on_hangout_field, args=(field,))
        st.markdown(f"Total: **{md_money(ledger.hangout_total())}**")
        st.button("Create goal from budget", key="btn_hangout_goal", on_click=on_goal_from_hangout)
        name_col, save_col = st.columns([3, 1])
        name_col.text_input("Template name", key="template_name", placeholder="Beach day")
        save_col.button("Save template", key="btn_save_template", on_click=on_save_template)

    else:
        with st.form("goal_form", clear_on_submit=True):
            name = st.text_input("Goal name", placeholder="Japan trip")
            target = st.text_input("Target amount", placeholder="2000")
            if st.form_submit_button("Create goal"):
                ledger.add_goal(name, target)
                st.rerun()

elif menu == "🎁 Wishlist":
    st.title("🎁 Wishlist")
    with st.form("wish_form", clear_on_submit=True):
        c1, c2, c3 = st.columns(3)
        with c1:
            title = st.text_input("What do you want?")
        with c2:
            price = st.text_input("Price", placeholder="300")
        with c3:
            link = st.text_input("Link (optional)")
        if st.form_submit_button("Add to wishlist"):
            ledger.add_wish(title, price, link)
            st.rerun()

    if state.wishlist:
        for item in state.wishlist:
            info_col, goal_col, del_col = st.columns([4, 1, 1])
            with info_col:
                line = f"**{item.title}** · {md_money(item.price)}"
                if item.link:
                    line += f" · [link]({item.link})"
                st.markdown(line)
            goal_col.button("Make goal", key=f"wish_goal_{item.id}",
                            on_click=on_goal_from_wish, args=(item.id,))
            del_col.button("Delete", key=f"wish_del_{item.id}",
                           on_click=on_delete_wish, args=(item.id,))
    else:
        st.info("Your wishlist is empty.")

elif menu == "🎯 Goals":
    st.title("🎯 Your piggybanks")
    st.caption("Select a goal to see details and move money.")

    if not state.goals:
        st.info("No goals yet.")

    for goal in state.goals:
        progress = goal_progress(goal)
        with st.container(border=True):
            if ledger.edit_flow.is_editing(goal.id):
                seed_edit_inputs(st.session_state, ledger, goal.id)
                for field in EDIT_FIELDS:
                    st.text_input(field.capitalize(), key=edit_key(goal.id, field),
                                  on_change=on_edit_field, args=(goal.id, field))
                cancel_col, save_col = st.columns(2)
                cancel_col.button("Cancel", key=f"edit_cancel_{goal.id}",
                                  on_click=on_cancel_edit, args=(goal.id,))
                save_col.button("Save", key=f"edit_save_{goal.id}",
                                on_click=on_save_edit, args=(goal.id,))
            else:
                head_col, edit_col, del_col = st.columns([4, 1, 1])
                with head_col:
                    st.subheader(goal.name)
                    st.markdown(f"**{md_money(goal.saved)}** saved of {md_money(goal.target)}")
                edit_col.button("Edit", key=f"edit_{goal.id}", on_click=on_start_edit, args=(goal.id,))
                del_col.button("Delete", key=f"del_{goal.id}", on_click=on_request_delete, args=(goal.id,))

            st.progress(progress.percent / 100, text=f"{progress.percent}%")
            st.caption(
                f"{md_money(progress.remaining)} left to hit the target • "
                f"{'Ahead of goal!' if progress.ahead else 'On your way'}"
            )

            st.text_input("Move amount", key=f"move_{goal.id}", placeholder="100")
            save_col, release_col = st.columns(2)
            save_col.button("Save it", key=f"save_{goal.id}", on_click=on_move, args=(goal.id,))
            release_col.button("Release", key=f"release_{goal.id}", on_click=on_move, args=(goal.id, True))
            st.caption(f"Available: {md_money(state.available)} • Saved in this goal: {md_money(goal.saved)}")

    df_goals = goals_to_df(state.goals)
    if not df_goals.empty:
        disp = df_goals.copy()
        for col in ("Saved", "Target", "Remaining"):
            disp[col] = disp[col].map(format_money)
        disp["Progress"] = disp["Progress"].map(lambda p: f"{p}%")
        st.table(disp)
        st.download_button("⬇ Download CSV", disp.to_csv(index=False), file_name="goals.csv")
