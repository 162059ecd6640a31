import streamlit as st
import pandas as pd

from ufc_dashboard.errors import AuthInvalid, StaleViewError
from ufc_dashboard.services.view_models import sales_frame

from state import enter_view, get_dashboard, live_channel, render_notices, settings

scope = enter_view("dashboard")

st.header("📊 Dashboard")
st.caption("Sales performance and stock health")

granularity = st.selectbox("Filter Trends", options=["daily", "weekly", "monthly"], format_func=str.capitalize)

live_channel(scope)

try:
    view = get_dashboard().load(granularity, scope=scope)
except AuthInvalid:
    render_notices()
    st.warning("Please log in from the home page to continue.")
    st.stop()
except StaleViewError:
    st.stop()

# -----------------------------
# Summary cards
# -----------------------------

col1, col2, col3 = st.columns(3)
col1.metric("Total Sales", view.summary.data.total_sales)
col2.metric("Total Revenue", f"{settings.currency} {view.summary.data.total_revenue}")
col3.metric("Total Profit", f"{settings.currency} {view.summary.data.total_profit}")
if view.summary.failed:
    st.error(f"Sales summary unavailable: {view.summary.error}")

# -----------------------------
# Trends
# -----------------------------

left, right = st.columns(2)

with left:
    st.subheader("Revenue Trend")
    if view.revenue_trend.failed:
        st.error(f"Sales trend unavailable: {view.revenue_trend.error}")
    st.line_chart(view.revenue_trend.data.to_frame())

with right:
    st.subheader("Profit Trend")
    if view.profit_trend.failed:
        st.error(f"Sales trend unavailable: {view.profit_trend.error}")
    st.line_chart(view.profit_trend.data.to_frame())

st.subheader("Top Products Performance")
revenue_series, quantity_series = view.top_products.data
st.bar_chart(pd.concat([revenue_series.to_frame(), quantity_series.to_frame()], axis=1))

# -----------------------------
# Low stock
# -----------------------------

st.subheader("⚠️ Low Stock Alerts")

if view.low_stock.failed:
    st.error(f"Low stock snapshot unavailable: {view.low_stock.error}")

if not view.low_stock.data:
    st.success("No low stock alerts")
else:
    for alert in view.low_stock.data:
        st.markdown(
            f":red[{alert.product}: {alert.stock} units "
            f"(below threshold of {alert.low_stock_threshold})]"
        )

# -----------------------------
# Recent sales
# -----------------------------

st.subheader("🕒 Recent Sales")

if view.recent_sales.data:
    st.dataframe(sales_frame(view.recent_sales.data), use_container_width=True)
else:
    st.info("No recent sales available for this filter")

render_notices()
