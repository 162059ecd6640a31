import streamlit as st

from ufc_dashboard.api.inventory import list_inventory
from ufc_dashboard.errors import AuthInvalid, DashboardError
from ufc_dashboard.services.fetcher import ListQuery
from ufc_dashboard.services.listing import Paginator, SortState
from ufc_dashboard.services.view_models import inventory_frame

from state import enter_view, get_client, render_notices, settings

scope = enter_view("inventory")

st.header("📋 Inventory")

if "inventory_paginator" not in st.session_state:
    st.session_state["inventory_paginator"] = Paginator(page_size=settings.page_size)
    st.session_state["inventory_sort"] = SortState("product")
paginator = st.session_state["inventory_paginator"]
sort = st.session_state["inventory_sort"]

search = st.text_input("Search by product name...")
if search != st.session_state.get("inventory_search", ""):
    st.session_state["inventory_search"] = search
    paginator.reset()

sort_columns = {
    "product": "Product",
    "stock": "Stock",
    "buyingPrice": f"Buying Price ({settings.currency})",
    "lowStockThreshold": "Threshold",
}
for column, (field, label) in zip(st.columns(len(sort_columns)), sort_columns.items()):
    if column.button(f"{label} {sort.arrow(field)}", key=f"sort_{field}"):
        st.session_state["inventory_sort"] = sort.toggle(field)
        st.rerun()

try:
    page = scope.guard(list_inventory(
        get_client(),
        ListQuery(
            page=paginator.page,
            page_size=paginator.page_size,
            sort_field=sort.field,
            sort_order=sort.order,
            search_term=search,
        ),
    ))
except AuthInvalid:
    render_notices()
    st.warning("Please log in from the home page to continue.")
    st.stop()
except DashboardError as e:
    st.error(f"Failed to load inventory data: {e.message}")
    render_notices()
    st.stop()

if paginator.page_moved(page.total):
    st.rerun()

if not page.items:
    st.info("No inventory items found")
else:
    st.dataframe(inventory_frame(page.items), use_container_width=True)

    st.divider()
    item_map = {item.product: item for item in page.items}
    selection = st.selectbox("Edit product", list(item_map.keys()))
    if st.button("Edit"):
        item = item_map[selection]
        st.session_state["inventory_edit"] = {
            "product": item.product,
            "stock": item.stock,
            "buying_price": item.buying_price,
            "low_stock_threshold": item.low_stock_threshold,
        }
        st.switch_page("pages/5_Inventory_Form.py")

prev_col, info_col, next_col = st.columns([1, 2, 1])
if prev_col.button("Previous", disabled=not paginator.has_previous):
    paginator.previous()
    st.rerun()
info_col.write(f"Page {paginator.page} of {max(paginator.pages, 1)}")
if next_col.button("Next", disabled=not paginator.has_next):
    paginator.next()
    st.rerun()

render_notices()
