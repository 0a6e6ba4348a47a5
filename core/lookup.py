"""
lookup.py — Cache-aside orchestration of a username lookup.

Flow per lookup:
  1. Normalize the username into the cache key
  2. Serve a fresh (< CACHE_TTL_SECONDS) stored record unless force_refresh
  3. Otherwise fetch profile → repositories → summary, in that order
  4. Persist the refreshed record when the store is ready

Only upstream profile/repository failures fail a lookup. A missing or broken
cache store and a failed summary both degrade to a still-successful result.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from config import CACHE_TTL_SECONDS, GITHUB_REPOS_LIMIT
from core.cache import CacheStore, CachedResult, StoreUnavailableError
from core.github_client import GitHubClient, GitHubAPIError, GitHubUserNotFoundError
from core.summary_engine import SummaryEngine
from utils.utils import normalize_username, utc_now

logger = logging.getLogger(__name__)


class UpstreamUnavailableError(Exception):
    """Raised when the profile or repositories could not be fetched from GitHub."""


@dataclass
class LookupResult:
    profile: dict
    repositories: list[dict]
    summary: str
    served_from_cache: bool

    def to_response(self) -> dict:
        """JSON body of GET /api/lookup/{username}."""
        return {
            "profile":      self.profile,
            "repositories": self.repositories,
            "summary":      self.summary,
            "cached":       self.served_from_cache,
        }


class LookupOrchestrator:
    """
    Decides between the cache store and a fresh upstream fetch.

    The orchestrator holds no locks: concurrent lookups for the same key may
    both refresh, and the store's atomic upsert keeps one record per key.
    """

    def __init__(
        self,
        store: CacheStore,
        github: GitHubClient,
        summarizer: SummaryEngine,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.github = github
        self.summarizer = summarizer
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    async def _read_cached(self, key: str) -> tuple[CachedResult | None, bool]:
        """
        Returns (record, store_ready). A read error counts as a not-ready store
        so the caller skips the write as well.
        """
        try:
            return await self.store.get(key), True
        except StoreUnavailableError as exc:
            logger.warning(f"Cache read failed for {key}: {exc}. Fetching uncached.")
            return None, False

    async def _fetch_upstream(self, key: str) -> tuple[dict, list[dict]]:
        try:
            profile = await self.github.fetch_profile(key)
            repos = await self.github.fetch_repos(key)
        except (GitHubUserNotFoundError, GitHubAPIError) as exc:
            logger.warning(f"Upstream fetch failed for {key}: {exc}")
            raise UpstreamUnavailableError(str(exc)) from exc
        return profile, list(repos)[:GITHUB_REPOS_LIMIT]

    async def lookup(self, username: str, force_refresh: bool = False) -> LookupResult:
        key = normalize_username(username)
        store_ready = self.store.is_ready()
        if not store_ready:
            logger.info(f"Cache store not ready; fetching {key} uncached.")

        if store_ready and not force_refresh:
            cached, store_ready = await self._read_cached(key)
            if cached is not None and cached.is_fresh(self.clock(), self.ttl_seconds):
                logger.info(f"Cache hit for {key} (fetched at {cached.fetched_at.isoformat()})")
                return LookupResult(
                    profile=cached.profile,
                    repositories=cached.repositories,
                    summary=cached.summary,
                    served_from_cache=True,
                )
            if cached is not None:
                logger.info(f"Cache expired for {key}")

        profile, repos = await self._fetch_upstream(key)
        summary, _ = await self.summarizer.generate(profile, repos)

        if store_ready:
            record = CachedResult(
                key=key,
                profile=profile,
                repositories=repos,
                summary=summary,
                fetched_at=self.clock(),
            )
            try:
                await self.store.upsert(record)
            except StoreUnavailableError as exc:
                logger.warning(f"Cache write failed for {key}: {exc}")

        return LookupResult(
            profile=profile,
            repositories=repos,
            summary=summary,
            served_from_cache=False,
        )
