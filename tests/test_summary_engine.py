"""
tests/test_summary_engine.py — Unit tests for summary_engine.py

The OpenAI-compatible client is replaced by a fake (no API calls).
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio
from types import SimpleNamespace

import httpx
import pytest
from openai import APIConnectionError

from config import FALLBACK_SUMMARY, HF_MODEL
from core.summary_engine import SummaryEngine, SummaryGenerationError


# ─── Mock data ────────────────────────────────────────────────────────────────

MOCK_PROFILE = {
    "login":        "octocat",
    "name":         "The Octocat",
    "bio":          "GitHub mascot",
    "followers":    42,
    "public_repos": 8,
    "location":     None,
}

MOCK_REPOS = [
    {
        "name": f"repo-{i}",
        "description": None if i == 0 else f"Project number {i}",
        "language": ["Python", None, "Go"][i % 3],
        "stargazers_count": i * 10,
    }
    for i in range(7)
]


class FakeCompletions:
    def __init__(self, content="A prolific developer.", exc=None, delay=0.0):
        self.content = content
        self.exc = exc
        self.delay = delay
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc:
            raise self.exc
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def make_engine(**kwargs) -> tuple[SummaryEngine, FakeCompletions]:
    timeout = kwargs.pop("timeout", 5)
    completions = FakeCompletions(**kwargs)
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return SummaryEngine(api_key="hf_test", client=client, timeout=timeout), completions


# ─── Tests ────────────────────────────────────────────────────────────────────

class TestPrompt:
    def test_profile_fields(self):
        engine, _ = make_engine()
        prompt = engine._build_prompt(MOCK_PROFILE, MOCK_REPOS)
        assert "Name: The Octocat" in prompt
        assert "Bio: GitHub mascot" in prompt
        assert "Followers: 42" in prompt
        assert "Location: Not specified" in prompt

    def test_name_falls_back_to_login(self):
        engine, _ = make_engine()
        prompt = engine._build_prompt({**MOCK_PROFILE, "name": None}, [])
        assert "Name: octocat" in prompt

    def test_repo_lines_capped_at_five(self):
        engine, _ = make_engine()
        prompt = engine._build_prompt(MOCK_PROFILE, MOCK_REPOS)
        assert "5. repo-4" in prompt
        assert "repo-5" not in prompt
        assert "1. repo-0 — No description (Language: Python, Stars: 0)" in prompt
        assert "(Language: Unknown, Stars: 10)" in prompt

    def test_empty_repos_differs_from_unknown(self):
        engine, _ = make_engine()
        empty = engine._build_prompt(MOCK_PROFILE, [])
        unknown = engine._build_prompt(MOCK_PROFILE, None)
        assert "This user has no public repositories." in empty
        assert "Repository information is unavailable." in unknown
        assert empty != unknown


class TestSummarize:
    @pytest.mark.asyncio
    async def test_returns_stripped_text(self):
        engine, completions = make_engine(content="  A prolific developer.\n")
        assert await engine.summarize(MOCK_PROFILE, MOCK_REPOS) == "A prolific developer."
        assert completions.calls[0]["model"] == HF_MODEL
        assert completions.calls[0]["messages"][0]["role"] == "user"

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        engine = SummaryEngine(api_key="")
        with pytest.raises(SummaryGenerationError, match="HF_TOKEN"):
            await engine.summarize(MOCK_PROFILE, MOCK_REPOS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "   "])
    async def test_empty_output(self, content):
        engine, _ = make_engine(content=content)
        with pytest.raises(SummaryGenerationError, match="No message content"):
            await engine.summarize(MOCK_PROFILE, MOCK_REPOS)

    @pytest.mark.asyncio
    async def test_api_error(self):
        exc = APIConnectionError(request=httpx.Request("POST", "https://router.huggingface.co/v1"))
        engine, _ = make_engine(exc=exc)
        with pytest.raises(SummaryGenerationError):
            await engine.summarize(MOCK_PROFILE, MOCK_REPOS)


class TestGenerate:
    @pytest.mark.asyncio
    async def test_success_is_not_fallback(self):
        engine, _ = make_engine()
        assert await engine.generate(MOCK_PROFILE, MOCK_REPOS) == ("A prolific developer.", False)

    @pytest.mark.asyncio
    async def test_missing_credentials_uses_fallback(self):
        engine = SummaryEngine(api_key=None)
        assert await engine.generate(MOCK_PROFILE, MOCK_REPOS) == (FALLBACK_SUMMARY, True)

    @pytest.mark.asyncio
    async def test_unexpected_error_uses_fallback(self):
        engine, _ = make_engine(exc=RuntimeError("boom"))
        assert await engine.generate(MOCK_PROFILE, MOCK_REPOS) == (FALLBACK_SUMMARY, True)

    @pytest.mark.asyncio
    async def test_hung_call_times_out_to_fallback(self):
        engine, completions = make_engine(delay=5, timeout=0.05)
        assert await engine.generate(MOCK_PROFILE, MOCK_REPOS) == (FALLBACK_SUMMARY, True)
        assert len(completions.calls) == 1

    def test_client_does_not_retry(self):
        engine = SummaryEngine(api_key="hf_test")
        assert engine.client.max_retries == 0

    @pytest.mark.asyncio
    async def test_single_attempt_only(self):
        engine, completions = make_engine(content=None)
        await engine.generate(MOCK_PROFILE, MOCK_REPOS)
        assert len(completions.calls) == 1
