import streamlit as st

from ufc_dashboard import metrics
from ufc_dashboard.errors import AuthInvalid, DashboardError, FormValidationError
from ufc_dashboard.schemas import PRODUCTS
from ufc_dashboard.services.actions import submit_sale

from state import enter_view, get_client, get_dashboard, render_notices, settings

enter_view("record_sale")

st.header("🧾 Record Sale")

product = st.selectbox("Product", options=[""] + PRODUCTS, format_func=lambda p: p or "Select Product")
quantity = st.number_input("Quantity", min_value=0, step=1, value=None)
selling_price = st.number_input("Selling price", min_value=0.0, step=0.01, value=None)
buying_price = st.number_input("Buying price", min_value=0.0, step=0.01, value=None)

preview = metrics.sale_preview(quantity, selling_price, buying_price)
col1, col2, col3 = st.columns(3)
col1.metric("Total Revenue", f"{settings.currency} {metrics.format_money(preview['total_revenue'])}")
col2.metric("Total Cost", f"{settings.currency} {metrics.format_money(preview['total_cost'])}")
col3.metric("Profit", f"{settings.currency} {metrics.format_money(preview['profit'])}")

if st.button("Record Sale", type="primary"):
    form = {
        "product": product,
        "quantity": quantity,
        "selling_price": selling_price,
        "buying_price": buying_price,
    }
    try:
        sale = submit_sale(get_client(), form, dashboard=get_dashboard())
        st.json(sale.model_dump(mode="json", by_alias=True, exclude_none=True))
    except FormValidationError as e:
        for message in e.messages:
            st.error(message)
    except AuthInvalid:
        st.warning("Please log in from the home page to continue.")
    except DashboardError as e:
        st.error(e.message or "Failed to record sale")

render_notices()
