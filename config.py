"""
config.py — Central configuration: constants, environment settings, prompt template.
"""

import os

from dotenv import load_dotenv

load_dotenv()  # local .env

# ─── Environment ─────────────────────────────────────────────────────────────
HF_TOKEN     = os.getenv("HF_TOKEN", "")
DATABASE_URL = os.getenv("DATABASE_URL", "")
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "")
PORT         = int(os.getenv("PORT", "4000"))
API_BASE_URL = os.getenv("API_BASE_URL", f"http://localhost:{PORT}")

# ─── GitHub API ───────────────────────────────────────────────────────────────
GITHUB_API_BASE        = "https://api.github.com"
GITHUB_REPOS_LIMIT     = 5     # most recently updated repos kept per user
GITHUB_REQUEST_TIMEOUT = 10    # seconds

# ─── Cache ───────────────────────────────────────────────────────────────────
CACHE_TTL_SECONDS   = 12 * 3600   # a record older than this is refreshed
STORE_RETRY_SECONDS = 30          # store reported not-ready after an error

# ─── Hugging Face router (OpenAI-compatible) ─────────────────────────────────
HF_BASE_URL             = "https://router.huggingface.co/v1"
HF_MODEL                = "mistralai/Mistral-7B-Instruct-v0.2:featherless-ai"
SUMMARY_TIMEOUT_SECONDS = 30

FALLBACK_SUMMARY = (
    "AI could not generate a summary at the moment, "
    "but the profile and repositories are shown above."
)

# ─── Prompt Template ─────────────────────────────────────────────────────────
SUMMARY_PROMPT_TEMPLATE = """
You are an AI assistant that summarizes GitHub developers.

Here is the profile and their repositories:

Profile:
Name: {name}
Bio: {bio}
Followers: {followers}
Public repos: {public_repos}
Location: {location}

Repositories:
{repo_lines}

Write a friendly, detailed, professional summary (3–5 sentences) describing:
- what this developer is good at,
- their skills,
- their project style,
- what they seem to focus on,
- any strengths you can infer.

Return ONLY the summary. No headings, no bullet points, no extra explanations.
""".strip()

# ─── Username Validation ──────────────────────────────────────────────────────
GITHUB_USERNAME_REGEX = r"^[a-zA-Z0-9\-]{1,39}$"

# ─── UI ──────────────────────────────────────────────────────────────────────
APP_TITLE    = "GitHub Summarizer"
APP_SUBTITLE = "A developer's profile, recent work, and an AI-written summary."
APP_ICON     = "🐙"
