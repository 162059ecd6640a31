import streamlit as st

from ufc_dashboard.errors import AuthInvalid, DashboardError, FormValidationError
from ufc_dashboard.schemas import DEFAULT_LOW_STOCK_THRESHOLD, PRODUCTS
from ufc_dashboard.services.actions import submit_inventory

from state import enter_view, get_client, get_dashboard, render_notices

enter_view("inventory_form")

st.header("📦 Manage Inventory")
st.caption("Create or update stock for a product")

# Prefilled when coming from the inventory list
editing = st.session_state.pop("inventory_edit", None) or {}
options = [""] + PRODUCTS
if editing.get("product") and editing["product"] not in options:
    options.append(editing["product"])

with st.form("inventory_form"):
    product = st.selectbox(
        "Product",
        options=options,
        index=options.index(editing["product"]) if editing.get("product") else 0,
        format_func=lambda p: p or "Select a product",
    )
    stock = st.number_input("Stock", min_value=0, step=1, value=editing.get("stock"))
    buying_price = st.number_input("Buying price", min_value=0.0, step=0.01, value=float(editing.get("buying_price", 0.0)))
    threshold = st.number_input(
        "Low stock threshold",
        min_value=0,
        step=1,
        value=editing.get("low_stock_threshold", DEFAULT_LOW_STOCK_THRESHOLD),
    )
    submitted = st.form_submit_button("Submit")

if submitted:
    form = {
        "product": product,
        "stock": stock,
        "buying_price": buying_price,
        "low_stock_threshold": threshold,
    }
    try:
        item = submit_inventory(get_client(), form, dashboard=get_dashboard())
        st.info(f"{item.product}: {item.stock} in stock ({item.status})")
    except FormValidationError as e:
        for message in e.messages:
            st.error(message)
    except AuthInvalid:
        st.warning("Please log in from the home page to continue.")
    except DashboardError as e:
        st.error(e.message or "Failed to update inventory")

render_notices()
