import streamlit as st
import pandas as pd

from ufc_dashboard.api.sales import get_analytics
from ufc_dashboard.errors import AuthInvalid, DashboardError
from ufc_dashboard.services.listing import SortState
from ufc_dashboard.services.view_models import analytics_frame, product_series

from state import enter_view, get_client, render_notices

scope = enter_view("analytics")

st.header("📈 Sales Analytics by Product")

if "analytics_sort" not in st.session_state:
    st.session_state["analytics_sort"] = SortState("totalRevenue", "desc")
sort = st.session_state["analytics_sort"]

col1, col2 = st.columns(2)
if col1.button(f"Sort by Revenue {sort.arrow('totalRevenue')}"):
    st.session_state["analytics_sort"] = sort.toggle("totalRevenue")
    st.rerun()
if col2.button(f"Sort by Profit {sort.arrow('totalProfit')}"):
    st.session_state["analytics_sort"] = sort.toggle("totalProfit")
    st.rerun()

try:
    rows = scope.guard(get_analytics(get_client(), sort_by=sort.field, sort_order=sort.order))
except AuthInvalid:
    render_notices()
    st.warning("Please log in from the home page to continue.")
    st.stop()
except DashboardError as e:
    st.error(f"Failed to load analytics data: {e.message}")
    rows = []

chart = pd.concat(
    [product_series(rows, "total_revenue").to_frame(), product_series(rows, "total_profit").to_frame()],
    axis=1,
)
st.bar_chart(chart)

if rows:
    st.dataframe(analytics_frame(rows), use_container_width=True)
else:
    st.info("No analytics data available")

render_notices()
