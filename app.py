"""
app.py — GitHub Summarizer
Streamlit front end for the HTTP API in server.py.

Flow:
  1. Render hero
  2. User inputs GitHub username (+ optional force refresh)
  3. Call GET /api/lookup/{username}
  4. Display profile, recent repositories, AI summary
"""

import logging

import httpx
import streamlit as st

from config import API_BASE_URL, APP_ICON, APP_TITLE

# ─── Page config (must be first Streamlit call) ───────────────────────────────
st.set_page_config(
    page_title=APP_TITLE,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="collapsed",
)

from ui.components import (
    render_hero,
    render_profile,
    render_repositories,
    render_summary,
)
from utils.utils import validate_github_username

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# ─── API call ─────────────────────────────────────────────────────────────────
def request_lookup(username: str, force: bool) -> dict | None:
    """
    Call the backend lookup endpoint.
    Returns the response dict or None on error (the error is shown in the page).
    """
    try:
        response = httpx.get(
            f"{API_BASE_URL}/api/lookup/{username}",
            params={"force": str(force).lower()},
            timeout=60,
        )
    except httpx.HTTPError as exc:
        logger.warning(f"Backend request failed: {exc}")
        st.error("❌ Failed to reach server")
        return None

    try:
        body = response.json()
    except ValueError:
        body = {}

    if response.status_code != 200:
        st.error(f"❌ {body.get('error') or 'Something went wrong'}")
        return None
    return body


# ─── UI Layout ────────────────────────────────────────────────────────────────
render_hero()

st.markdown("---")

with st.form("lookup_form", clear_on_submit=False):
    col_input, col_force, col_btn = st.columns([4, 2, 1])

    with col_input:
        username_input = st.text_input(
            "GitHub Username",
            placeholder="Enter GitHub username (e.g. torvalds)",
        )

    with col_force:
        st.markdown("<br>", unsafe_allow_html=True)  # vertical align
        force_input = st.checkbox(
            "Force refresh",
            help="Skip the 12-hour cache and fetch fresh data from GitHub.",
        )

    with col_btn:
        st.markdown("<br>", unsafe_allow_html=True)
        submitted = st.form_submit_button("Summarize", use_container_width=True)

# ─── Run on submit ────────────────────────────────────────────────────────────
if submitted:
    username = username_input.strip()
    is_valid, err_msg = validate_github_username(username)

    if not is_valid:
        st.error(f"❌ {err_msg}")
    else:
        with st.spinner("🔍 Loading..."):
            data = request_lookup(username, force_input)

        if data:
            render_profile(data["profile"])
            st.markdown("---")
            left_col, right_col = st.columns([1, 1])
            with left_col:
                render_repositories(data["repositories"])
            with right_col:
                render_summary(data["summary"], data.get("cached", False))
