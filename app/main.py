import asyncio
import os
import sys
from datetime import datetime, timezone

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from tracker.config import configure_logging, load_settings
from tracker.domain import (
    ACCOUNT_TYPES,
    DIVISIONS,
    RECURRING_PATTERNS,
    AccountDraft,
    CategoryDraft,
    Credentials,
    TransactionDraft,
    is_editable,
)
from tracker.events import NOTIFY
from tracker.categories import InitOutcome
from tracker.reshape import account_chart_rows, category_chart_rows, trend_chart_rows
from tracker.services import FinanceClient

st.set_page_config(page_title="Money Manager", layout="wide")

RANGE_LABELS = {"week": "Last 7 Days", "month": "Last 30 Days", "year": "This Year"}
TOAST_ICONS = {"success": "✅", "error": "❌", "info": "ℹ️"}


def get_client() -> FinanceClient:
    if "client" not in st.session_state:
        settings = load_settings()
        configure_logging(settings.log_level)
        client = FinanceClient(settings)
        st.session_state.toasts = []
        client.bus.subscribe(NOTIFY, lambda event, payload: st.session_state.toasts.append(payload))
        # httpx pools are bound to a loop, so every action runs on this one
        st.session_state.loop = asyncio.new_event_loop()
        st.session_state.client = client
    return st.session_state.client


def run(coro):
    return st.session_state.loop.run_until_complete(coro)


def show_toasts():
    while st.session_state.toasts:
        note = st.session_state.toasts.pop(0)
        st.toast(note["message"], icon=TOAST_ICONS.get(note["level"]))


def field_errors(snapshot) -> dict:
    return dict(snapshot.field_errors)


def money(amount: float) -> str:
    return f"${amount:,.2f}"


client = get_client()

if client.auth.is_authenticated and client.auth.snapshot.user is None:
    run(client.auth.get_me())


def login_page():
    st.title("💼 Money Manager")
    mode = st.radio("Mode", ["Log in", "Sign up"], horizontal=True)
    errors = field_errors(client.auth.snapshot)
    with st.form("auth_form"):
        name = st.text_input("Name") if mode == "Sign up" else ""
        if errors.get("name"):
            st.caption(f":red[{errors['name']}]")
        email = st.text_input("Email Address")
        if errors.get("email"):
            st.caption(f":red[{errors['email']}]")
        password = st.text_input("Password", type="password")
        if errors.get("password"):
            st.caption(f":red[{errors['password']}]")
        submitted = st.form_submit_button(mode)
    if submitted:
        creds = Credentials(email=email, password=password, name=name)
        action = client.auth.signup if mode == "Sign up" else client.auth.login
        run(action(creds))
        st.rerun()


def dashboard_page():
    user = client.auth.snapshot.user
    st.title(f"Welcome back, {user.name if user else 'User'} 👋")
    time_range = st.selectbox(
        "Time range",
        list(RANGE_LABELS),
        index=list(RANGE_LABELS).index(client.dashboard.snapshot.time_range),
        format_func=RANGE_LABELS.get,
    )
    if time_range != client.dashboard.snapshot.time_range:
        run(client.dashboard.set_time_range(time_range))
    if st.button("🔄 Refresh"):
        run(client.dashboard.load_all(time_range))

    state = client.dashboard.snapshot
    summary = state.summary
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Available Balance", money(summary.total_balance if summary else 0))
    with k2:
        st.metric("Total Income", money(summary.income if summary else 0))
    with k3:
        st.metric("Total Expenses", money(summary.expenses if summary else 0))
    with k4:
        st.metric("Savings Rate", f"{summary.savings_rate if summary else 0:.1f}%")

    left, right = st.columns(2)
    with left:
        st.subheader("Transaction Overview")
        rows = trend_chart_rows(state.trends)
        if rows:
            df = pd.DataFrame(rows)
            fig = go.Figure()
            fig.add_trace(go.Bar(x=df["name"], y=df["income"], name="Income", marker_color="#10b981"))
            fig.add_trace(go.Bar(x=df["name"], y=df["expenses"], name="Expenses", marker_color="#ef4444"))
            fig.update_layout(barmode="group", margin=dict(t=30, b=10, l=10, r=10))
            st.plotly_chart(fig, use_container_width=True)
            st.caption(f"Net savings: {money(df['savings'].sum())} · average per period: {money(df['savings'].mean())}")
        else:
            st.info("No transaction data available")
    with right:
        st.subheader("Expense Breakdown")
        rows = category_chart_rows(summary)
        if rows:
            fig = px.pie(pd.DataFrame(rows), values="value", names="name", hole=0.4)
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No expenses recorded for this period")

    st.subheader("Accounts")
    rows = account_chart_rows(state.overview)
    if rows:
        fig = px.bar(pd.DataFrame(rows), x="name", y="balance", color="type")
        fig.update_layout(margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

    st.subheader("Recent Transactions")
    recent = list(summary.recent_transactions) if summary else []
    if recent:
        st.dataframe(pd.DataFrame(recent), use_container_width=True, hide_index=True)
    else:
        st.info("No recent transactions")


def transaction_form(accounts, categories):
    errors = field_errors(client.transactions.snapshot)
    tx_type = st.radio("Transaction Type", ["expense", "income", "transfer"], horizontal=True)
    with st.form("tx_form", clear_on_submit=False):
        description = st.text_input("Title *")
        amount = st.number_input("Amount *", min_value=0.0, step=0.01, format="%.2f")
        account_ids = [a.id for a in accounts]
        names = {a.id: a.name for a in accounts}
        account_id = st.selectbox("Account *", [""] + account_ids, format_func=lambda i: names.get(i, "-"))
        category_id, to_account_id = "", ""
        if tx_type == "transfer":
            to_account_id = st.selectbox("To Account *", [""] + account_ids, format_func=lambda i: names.get(i, "-"))
        else:
            cats = {c.id: c.name for c in categories if c.type == tx_type}
            category_id = st.selectbox("Category *", [""] + list(cats), format_func=lambda i: cats.get(i, "-"))
        division = st.selectbox("Division *", [""] + list(DIVISIONS))
        when = st.date_input("Date *", value=datetime.now().date())
        tags = st.text_input("Tags (comma separated)")
        recurring = st.checkbox("Recurring")
        pattern = st.selectbox("Pattern", [""] + list(RECURRING_PATTERNS))
        submitted = st.form_submit_button("Add Transaction")
    for name, message in errors.items():
        st.caption(f":red[{name}: {message}]")
    if submitted:
        draft = TransactionDraft(
            type=tx_type, amount=amount, description=description, date=when,
            account_id=account_id, category_id=category_id, to_account_id=to_account_id,
            division=division, tags=tags, is_recurring=recurring, recurring_pattern=pattern,
        )
        if run(client.transactions.create(draft)):
            run(client.dashboard.load_all(client.dashboard.snapshot.time_range))
        st.rerun()


def transactions_page():
    st.title("🧾 Transactions")
    accounts = client.accounts.active()
    categories = client.categories.snapshot.categories
    store = client.transactions
    filters = store.snapshot.filters

    c1, c2, c3, c4 = st.columns(4)
    with c1:
        search = st.text_input("Search", value=filters.search)
        tx_type = st.selectbox("Type", ["", "income", "expense", "transfer"])
    with c2:
        account_id = st.selectbox("Account", [""] + [a.id for a in accounts], format_func=lambda i: {a.id: a.name for a in accounts}.get(i, "All"))
        category_id = st.selectbox("Category", [""] + [c.id for c in categories], format_func=lambda i: {c.id: c.name for c in categories}.get(i, "All"))
    with c3:
        division = st.selectbox("Division", [""] + list(DIVISIONS))
        dates = st.date_input("Date range", value=())
    with c4:
        sort_field = st.selectbox("Sort by", ["date", "type", "amount"])
        direction = st.selectbox("Direction", ["desc", "asc"])

    start = dates[0] if len(dates) > 0 else None
    end = dates[1] if len(dates) > 1 else None
    wanted = dict(search=search, type=tx_type, account_id=account_id, category_id=category_id, division=division, start=start, end=end)
    if any(getattr(filters, k) != v for k, v in wanted.items()):
        store.set_filters(**wanted)
    if (store.snapshot.sort.field, store.snapshot.sort.direction) != (sort_field, direction):
        store.set_sort(sort_field, direction)
    if st.button("Clear filters"):
        store.clear_filters()
        st.rerun()

    page = store.view()
    if page.total_pages > 1:
        number = st.number_input("Page", min_value=1, max_value=page.total_pages, value=min(store.snapshot.page, page.total_pages))
        if number != store.snapshot.page:
            store.set_page(int(number))
            page = store.view()

    totals = store.totals()
    m1, m2, m3 = st.columns(3)
    m1.metric("Income", money(totals["income"]))
    m2.metric("Expenses", money(totals["expenses"]))
    m3.metric("Net", money(totals["net"]))

    if page.items:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        st.dataframe(
            pd.DataFrame([
                {
                    "Date": t.date.strftime("%Y-%m-%d %H:%M"),
                    "Type": t.type,
                    "Description": t.description,
                    "Amount": t.amount,
                    "Category": t.category_name or t.category_id or "",
                    "Division": t.division,
                    "Tags": ", ".join(t.tags),
                    "Editable": is_editable(t, now),
                }
                for t in page.items
            ]),
            use_container_width=True,
            hide_index=True,
        )
        st.caption(f"{page.count} transactions · page {store.snapshot.page} of {page.total_pages}")
    else:
        st.info("No transactions match the selected filters")

    with st.expander("➕ Add Transaction"):
        transaction_form(accounts, categories)


def accounts_page():
    st.title("💳 Accounts")
    state = client.accounts.snapshot
    if state.accounts:
        st.dataframe(
            pd.DataFrame([{"Name": a.name, "Type": a.type, "Balance": a.balance, "Currency": a.currency, "Active": a.is_active} for a in state.accounts]),
            use_container_width=True,
            hide_index=True,
        )
    st.metric("Total Balance", money(client.accounts.total_balance()))

    errors = field_errors(state)
    with st.form("account_form", clear_on_submit=True):
        name = st.text_input("Account Name *")
        account_type = st.selectbox("Account Type *", list(ACCOUNT_TYPES))
        balance = st.number_input("Initial Balance *", step=0.01, format="%.2f")
        currency = st.text_input("Currency", value="USD")
        submitted = st.form_submit_button("Create Account")
    for field, message in errors.items():
        st.caption(f":red[{field}: {message}]")
    if submitted:
        run(client.accounts.create(AccountDraft(name=name, type=account_type, balance=balance, currency=currency)))
        st.rerun()


def categories_page():
    st.title("🏷️ Categories")
    if st.button("Initialize Categories"):
        if run(client.categories.initialize_defaults()) is not InitOutcome.FAILED:
            st.rerun()
    state = client.categories.snapshot
    income, expense = st.columns(2)
    with income:
        st.subheader("Income")
        for c in client.categories.income():
            st.markdown(f"- {c.icon} {c.name}{' *(default)*' if c.is_default else ''}")
    with expense:
        st.subheader("Expense")
        for c in client.categories.expense():
            st.markdown(f"- {c.icon} {c.name}{' *(default)*' if c.is_default else ''}")

    errors = field_errors(state)
    with st.form("category_form", clear_on_submit=True):
        name = st.text_input("Name *")
        category_type = st.selectbox("Type", ["expense", "income"])
        icon = st.text_input("Icon")
        submitted = st.form_submit_button("Create Category")
    for field, message in errors.items():
        st.caption(f":red[{field}: {message}]")
    if submitted:
        run(client.categories.create(CategoryDraft(name=name, type=category_type, icon=icon)))
        st.rerun()


if not client.auth.is_authenticated:
    login_page()
else:
    if "loaded" not in st.session_state:
        run(client.refresh())
        st.session_state.loaded = True
    st.sidebar.markdown(f"### 👤 {client.auth.snapshot.user.name if client.auth.snapshot.user else ''}")
    menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "🧾 Transactions", "💳 Accounts", "🏷️ Categories"])
    if st.sidebar.button("Log out"):
        client.auth.logout()
        client.dashboard.clear()
        st.session_state.pop("loaded", None)
        st.rerun()

    if menu == "🏠 Dashboard":
        dashboard_page()
    elif menu == "🧾 Transactions":
        transactions_page()
    elif menu == "💳 Accounts":
        accounts_page()
    else:
        categories_page()

show_toasts()
