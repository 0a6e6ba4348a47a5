"""
ui/components.py — Reusable Streamlit UI components for the GitHub summarizer.
"""

import streamlit as st

from config import APP_ICON, APP_SUBTITLE, APP_TITLE, FALLBACK_SUMMARY
from utils.utils import days_since


def repo_caption(repo: dict) -> str:
    """One-line metadata for a repository: language, stars, last update."""
    parts = [repo.get("language") or "Unknown", f"⭐ {repo.get('stargazers_count', 0)}"]
    if repo.get("updated_at"):
        days = int(days_since(repo["updated_at"]))
        parts.append("updated today" if days == 0 else f"updated {days}d ago")
    return " • ".join(parts)


def render_hero():
    """Render the title and subtitle."""
    st.title(f"{APP_ICON} {APP_TITLE}")
    st.caption(APP_SUBTITLE)


def render_profile(profile: dict):
    """Render the profile card: avatar, name, bio, counts, link."""
    col_avatar, col_info = st.columns([1, 4])
    with col_avatar:
        if profile.get("avatar_url"):
            st.image(profile["avatar_url"], width=120)
    with col_info:
        st.markdown(f"## {profile.get('name') or profile.get('login', '')}")
        st.markdown(profile.get("bio") or "_No bio provided._")
        st.markdown(
            f"**Followers:** {profile.get('followers', 0)} • "
            f"**Following:** {profile.get('following', 0)}  \n"
            f"**Public repos:** {profile.get('public_repos', 0)}"
        )
        if profile.get("html_url"):
            st.markdown(f"[View on GitHub]({profile['html_url']})")


def render_repositories(repos: list[dict]):
    """Render the recent repository list."""
    st.markdown("### Recent Repositories")
    if not repos:
        st.info("This user has no public repositories.")
        return
    for repo in repos:
        st.markdown(f"**[{repo.get('name')}]({repo.get('html_url', '')})**")
        st.markdown(repo.get("description") or "_No description._")
        st.caption(repo_caption(repo))


def render_summary(summary: str, cached: bool):
    """Render the AI summary and where it came from."""
    st.markdown("### AI Summary")
    if summary == FALLBACK_SUMMARY:
        st.warning("⚠️ AI summary generation unavailable — showing placeholder text.")
    st.write(summary or "AI summary unavailable.")
    st.caption("⚡ Served from cache (< 12h old)." if cached else "Fetched fresh from GitHub.")
