from __future__ import annotations

import os
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import streamlit as st

import group_health
from group_health.app.context import AppContext, build_context
from group_health.app.pages import dashboard, group_detail, reports, settings
from group_health.config import configure_logging, load_settings

st.set_page_config(page_title="group health", layout="wide")


# --- Context (one per process, shared by every session) ---
@st.cache_resource
def _get_context() -> AppContext:
    app_settings = load_settings()
    configure_logging(app_settings.log_level)
    return build_context(app_settings)


ctx = _get_context()

# --- Sidebar navigation ---
st.sidebar.title("Chat group health")

build_number = os.getenv("APP_BUILD") or os.getenv("BUILD_NUMBER") or group_health.__version__
st.sidebar.caption(f"Build: {build_number}")

PAGES = {
    "Overview": lambda: dashboard.render(ctx),
    "Reports": lambda: reports.render(ctx),
    "Group detail": lambda: group_detail.render(ctx),
    "Scoring settings": lambda: settings.render(ctx),
}

params = st.query_params
page_param = params.get("page")

nav_target = st.session_state.pop("nav_to_page", None)
if nav_target:
    st.session_state["sidebar_page_default"] = nav_target
elif page_param in PAGES and "sidebar_page" not in st.session_state:
    st.session_state["sidebar_page_default"] = page_param

page_labels = list(PAGES.keys())
current_page = st.session_state.pop("sidebar_page_default", None)
if current_page in page_labels:
    st.session_state["sidebar_page"] = current_page

selected = st.sidebar.radio("Pages", page_labels, key="sidebar_page")

# --- Render selected page ---
PAGES[selected]()
