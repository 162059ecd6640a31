import streamlit as st

from ufc_dashboard.api.sales import list_sales
from ufc_dashboard.errors import AuthInvalid, DashboardError
from ufc_dashboard.services.fetcher import ListQuery
from ufc_dashboard.services.listing import Paginator
from ufc_dashboard.services.view_models import sales_frame

from state import enter_view, get_client, render_notices, settings

scope = enter_view("sales")

st.header("💰 Sales Records")

if "sales_paginator" not in st.session_state:
    st.session_state["sales_paginator"] = Paginator(page_size=settings.page_size)
paginator = st.session_state["sales_paginator"]

search = st.text_input("Search by product name...")
if search != st.session_state.get("sales_search", ""):
    st.session_state["sales_search"] = search
    paginator.reset()

try:
    page = scope.guard(list_sales(
        get_client(),
        ListQuery(page=paginator.page, page_size=paginator.page_size, search_term=search),
    ))
except AuthInvalid:
    render_notices()
    st.warning("Please log in from the home page to continue.")
    st.stop()
except DashboardError as e:
    st.error(f"Error loading sales data: {e.message}")
    render_notices()
    st.stop()

if paginator.page_moved(page.total):
    st.rerun()

if not page.items:
    st.info("No sales records found")
else:
    df = sales_frame(page.items)
    st.dataframe(df, use_container_width=True)

    csv = df.to_csv(index=False).encode("utf-8")
    st.download_button(
        label="Export CSV",
        data=csv,
        file_name="sales.csv",
        mime="text/csv"
    )

prev_col, info_col, next_col = st.columns([1, 2, 1])
if prev_col.button("Previous", disabled=not paginator.has_previous):
    paginator.previous()
    st.rerun()
info_col.write(f"Page {paginator.page} of {max(paginator.pages, 1)}")
if next_col.button("Next", disabled=not paginator.has_next):
    paginator.next()
    st.rerun()

render_notices()
