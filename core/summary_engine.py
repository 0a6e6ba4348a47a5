"""
summary_engine.py — Generate a short developer summary with a hosted LLM.

Input:  GitHub profile dict + list of repository dicts
Output: (summary_text, is_fallback)

Strategy:
  - Single chat completion through the Hugging Face router (OpenAI-compatible API)
  - No retries: one failed attempt is final for that lookup
  - Any failure, including a timeout, degrades to FALLBACK_SUMMARY
"""

import asyncio
import logging

from openai import AsyncOpenAI, APIError

from config import (
    FALLBACK_SUMMARY,
    GITHUB_REPOS_LIMIT,
    HF_BASE_URL,
    HF_MODEL,
    SUMMARY_PROMPT_TEMPLATE,
    SUMMARY_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class SummaryGenerationError(Exception):
    """Raised when no summary could be produced (credentials, empty output, API error)."""


class SummaryEngine:
    """Summarizes a GitHub developer from their profile and recent repositories."""

    def __init__(self, api_key: str | None, client=None, timeout: float = SUMMARY_TIMEOUT_SECONDS):
        self.api_key = api_key
        self.timeout = timeout
        if client is not None:
            self.client = client
        elif api_key:
            self.client = AsyncOpenAI(base_url=HF_BASE_URL, api_key=api_key, max_retries=0)
        else:
            logger.warning("HF_TOKEN is not set – AI summaries will fail.")
            self.client = None

    @staticmethod
    def _build_repo_lines(repos: list[dict] | None) -> str:
        # [] means "zero public repos", None means the list was never fetched
        if repos is None:
            return "Repository information is unavailable."
        if not repos:
            return "This user has no public repositories."
        return "\n".join(
            f"{i}. {repo.get('name')} — {repo.get('description') or 'No description'} "
            f"(Language: {repo.get('language') or 'Unknown'}, "
            f"Stars: {repo.get('stargazers_count', 0)})"
            for i, repo in enumerate(repos[:GITHUB_REPOS_LIMIT], start=1)
        )

    def _build_prompt(self, profile: dict, repos: list[dict] | None) -> str:
        """Fill the prompt template with profile values and repository lines."""
        return SUMMARY_PROMPT_TEMPLATE.format(
            name=profile.get("name") or profile.get("login", "unknown"),
            bio=profile.get("bio") or "No bio",
            followers=profile.get("followers", 0),
            public_repos=profile.get("public_repos", 0),
            location=profile.get("location") or "Not specified",
            repo_lines=self._build_repo_lines(repos),
        )

    async def summarize(self, profile: dict, repos: list[dict] | None) -> str:
        """
        Make one chat completion call and return the stripped summary text.

        Raises:
            SummaryGenerationError on missing credentials, empty output or API failure.
        """
        if self.client is None:
            raise SummaryGenerationError("HF_TOKEN is not set")

        prompt = self._build_prompt(profile, repos)
        try:
            completion = await self.client.chat.completions.create(
                model=HF_MODEL,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIError as exc:
            raise SummaryGenerationError(f"Failed to generate AI summary: {exc}") from exc

        message = completion.choices[0].message.content if completion.choices else None
        if not message or not message.strip():
            raise SummaryGenerationError("No message content returned from HF router")
        return message.strip()

    async def generate(self, profile: dict, repos: list[dict] | None) -> tuple[str, bool]:
        """
        Produce a summary, never raising.

        Returns:
            (summary_text, is_fallback)
            is_fallback: True if generation failed and FALLBACK_SUMMARY was used
        """
        try:
            summary = await asyncio.wait_for(self.summarize(profile, repos), timeout=self.timeout)
            logger.info("Summary generated successfully.")
            return summary, False
        except SummaryGenerationError as exc:
            logger.error(f"AI summary error: {exc}. Using fallback.")
        except asyncio.TimeoutError:
            logger.error(f"AI summary timed out after {self.timeout}s. Using fallback.")
        except Exception as exc:
            logger.error(f"Unexpected error in summary engine: {exc}. Using fallback.")

        return FALLBACK_SUMMARY, True

    async def close(self) -> None:
        if isinstance(self.client, AsyncOpenAI):
            await self.client.close()
