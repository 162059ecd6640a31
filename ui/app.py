import streamlit as st

from ufc_dashboard.errors import DashboardError, FormValidationError
from ufc_dashboard.services.actions import AuthService
from ufc_dashboard.services.scope import switch_view

from state import get_client, render_notices

st.set_page_config(
    page_title="Universal Fashion Center",
    layout="wide"
)

st.title("Universal Fashion Center")

client = get_client()
auth = AuthService(client)

# Leaving a gated page tears down its scope and live channel
st.session_state["scope"] = switch_view(st.session_state.get("scope"), "home")

# the login form itself needs no "please log in" notice
if client.session.credential is not None and client.session.validate_on_mount():
    expires = client.session.expires_at
    st.success(f"Logged in. Session valid until {expires:%Y-%m-%d %H:%M} UTC.")
    st.markdown("""
Use the sidebar to navigate:
- Dashboard
- Record Sale
- Sales
- Analytics
- Inventory Form
- Inventory
""")
    if st.button("Logout"):
        auth.logout()
        st.rerun()
    render_notices()
    st.stop()

login_tab, register_tab = st.tabs(["Login", "Register"])

with login_tab:
    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login")

    if submitted:
        try:
            if auth.login({"username": username, "password": password}):
                st.rerun()
        except FormValidationError as e:
            for message in e.messages:
                st.error(message)
        except DashboardError as e:
            st.error(e.message or "Login failed")

with register_tab:
    with st.form("register_form"):
        new_username = st.text_input("Username")
        new_password = st.text_input("Password", type="password")
        registered = st.form_submit_button("Register")

    if registered:
        try:
            auth.register({"username": new_username, "password": new_password})
        except FormValidationError as e:
            for message in e.messages:
                st.error(message)
        except DashboardError as e:
            st.error(e.message or "Registration failed")

render_notices()
