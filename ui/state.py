"""Per-browser-session wiring shared by the Streamlit pages."""
import streamlit as st

from ufc_dashboard.config import get_settings
from ufc_dashboard.logging_config import setup_logging
from ufc_dashboard.services.dashboard import DashboardService
from ufc_dashboard.services.fetcher import ApiClient
from ufc_dashboard.services.live_events import LiveEventReconciler, SocketIOTransport
from ufc_dashboard.services.scope import ViewScope, switch_view
from ufc_dashboard.session import Session, TokenStore

settings = get_settings()
setup_logging(settings.log_level, settings.log_dir)

_TOAST_ICONS = {"info": "ℹ️", "success": "✅", "warning": "⚠️", "error": "❌"}


def get_client() -> ApiClient:
    if "client" not in st.session_state:
        session = Session(store=TokenStore(settings.token_store_path))
        st.session_state["client"] = ApiClient(session, settings)
    return st.session_state["client"]


def get_dashboard() -> DashboardService:
    if "dashboard" not in st.session_state:
        st.session_state["dashboard"] = DashboardService(get_client())
    return st.session_state["dashboard"]


def render_notices() -> None:
    for notice in get_client().notices.drain():
        st.toast(notice.message, icon=_TOAST_ICONS.get(notice.level))


def enter_view(name: str) -> ViewScope:
    """Open the scope of a credential-gated page, or stop at the login prompt."""
    client = get_client()
    scope = switch_view(st.session_state.get("scope"), name)
    st.session_state["scope"] = scope

    if not client.session.validate_on_mount():
        scope.close()
        render_notices()
        st.warning("Please log in from the home page to continue.")
        st.stop()
    return scope


def live_channel(scope: ViewScope) -> LiveEventReconciler:
    """Live low-stock channel bound to the current page scope."""
    reconciler = st.session_state.get("reconciler")
    if reconciler is None or reconciler.closed:
        reconciler = LiveEventReconciler(get_client().session, SocketIOTransport(settings.socket_url))
        st.session_state["reconciler"] = reconciler
        scope.own(reconciler.close)
        reconciler.open()
    get_dashboard().reconciler = reconciler
    return reconciler
