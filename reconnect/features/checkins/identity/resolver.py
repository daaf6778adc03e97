"""
Directory resolver: identifier -> display name.

Consults the IdentityCache first, then the external lookup tools (single or
batched). Every path ends in a cached ResolvedContact; nothing raises past
this class. Concurrent requests for the same uncached identifier share one
in-flight lookup.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable

from reconnect.features.checkins.domain import ResolvedContact
from reconnect.features.checkins.identity.cache import IdentityCache
from reconnect.features.checkins.identity.lookup_client import (
    BatchLookupRequest,
    DirectoryLookupClient,
    DirectoryLookupError,
    Found,
    LookupFailed,
    LookupOutcome,
    LookupRequest,
)
from reconnect.features.checkins.identity.normalizer import (
    candidate_search_strings,
    display_name_from_email,
    format_fallback_name,
    is_email,
    normalize_phone,
)
from reconnect.infrastructure.observability.logging import get_logger, log_lookup

logger = get_logger(__name__)


def fallback_contact(identifier: str) -> ResolvedContact:
    return ResolvedContact(name=format_fallback_name(identifier), is_resolved=False)


class DirectoryResolver:
    def __init__(self, cache: IdentityCache, client: DirectoryLookupClient):
        self.cache = cache
        self.client = client
        self._inflight: dict[str, asyncio.Future[ResolvedContact]] = {}

    async def resolve_one(self, identifier: str) -> ResolvedContact:
        local = self._resolve_locally(identifier)
        if local is not None:
            return local

        cached = self.cache.get(identifier)
        if cached is not None:
            logger.debug("Identity cache hit", identifier=identifier, resolved=cached.is_resolved)
            return cached

        pending = self._inflight.get(identifier)
        if pending is not None:
            return await asyncio.shield(pending)

        future = self._register(identifier)
        result = fallback_contact(identifier)
        try:
            result = await self._lookup_single(identifier)
            self.cache.set(identifier, result)
        except Exception as e:
            logger.error("Unexpected error resolving identifier", error=str(e))
            self.cache.set(identifier, result)
        finally:
            self._settle(identifier, future, result)
        return result

    async def resolve_many(self, identifiers: Iterable[str]) -> dict[str, ResolvedContact]:
        """Resolve a set of identifiers with at most one batch lookup process."""
        ordered = list(dict.fromkeys(identifiers))
        results: dict[str, ResolvedContact] = {}
        waiting: dict[str, asyncio.Future[ResolvedContact]] = {}
        to_fetch: list[str] = []

        for identifier in ordered:
            local = self._resolve_locally(identifier)
            if local is not None:
                results[identifier] = local
                continue
            cached = self.cache.get(identifier)
            if cached is not None:
                results[identifier] = cached
                continue
            pending = self._inflight.get(identifier)
            if pending is not None:
                waiting[identifier] = pending
                continue
            to_fetch.append(identifier)

        if to_fetch:
            futures = {identifier: self._register(identifier) for identifier in to_fetch}
            fetched = {identifier: fallback_contact(identifier) for identifier in to_fetch}
            try:
                fetched = await self._lookup_batch(to_fetch)
            except Exception as e:
                logger.error("Unexpected error in batch resolution", error=str(e))
            finally:
                for identifier, future in futures.items():
                    self._settle(identifier, future, fetched[identifier])

            for identifier, contact in fetched.items():
                self.cache.set(identifier, contact)
            results.update(fetched)

        for identifier, pending in waiting.items():
            results[identifier] = await asyncio.shield(pending)

        return {identifier: results[identifier] for identifier in ordered}

    def _resolve_locally(self, identifier: str) -> ResolvedContact | None:
        """Emails and too-short numbers never reach the directory."""
        if is_email(identifier):
            result = ResolvedContact(name=display_name_from_email(identifier), is_resolved=False)
        elif normalize_phone(identifier).is_too_short:
            result = fallback_contact(identifier)
        else:
            return None

        self.cache.set(identifier, result)
        return result

    async def _lookup_single(self, identifier: str) -> ResolvedContact:
        phone = normalize_phone(identifier)
        request = LookupRequest(
            identifier=identifier,
            search_strings=tuple(candidate_search_strings(phone)),
        )

        start = time.perf_counter()
        try:
            outcome = await self.client.lookup(request)
        except DirectoryLookupError as e:
            outcome = LookupFailed(str(e))
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        result = self._contact_from_outcome(identifier, outcome)
        log_lookup(
            "phone",
            result.is_resolved,
            duration_ms,
            error=outcome.message if isinstance(outcome, LookupFailed) else None,
        )
        return result

    async def _lookup_batch(self, identifiers: list[str]) -> dict[str, ResolvedContact]:
        start = time.perf_counter()
        try:
            outcomes = await self.client.lookup_batch(BatchLookupRequest(tuple(identifiers)))
        except DirectoryLookupError as e:
            logger.warning(
                "Batch directory lookup failed",
                requested=len(identifiers),
                operation=e.operation,
                error=str(e),
            )
            outcomes = {identifier: LookupFailed(str(e)) for identifier in identifiers}

        results = {
            identifier: self._contact_from_outcome(
                identifier, outcomes.get(identifier, LookupFailed("missing from batch output"))
            )
            for identifier in identifiers
        }
        logger.info(
            "Batch directory lookup complete",
            requested=len(identifiers),
            resolved=sum(1 for contact in results.values() if contact.is_resolved),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return results

    @staticmethod
    def _contact_from_outcome(identifier: str, outcome: LookupOutcome) -> ResolvedContact:
        if isinstance(outcome, Found):
            return ResolvedContact(name=outcome.name, is_resolved=True)
        return fallback_contact(identifier)

    def _register(self, identifier: str) -> asyncio.Future[ResolvedContact]:
        future = asyncio.get_running_loop().create_future()
        self._inflight[identifier] = future
        return future

    def _settle(
        self,
        identifier: str,
        future: asyncio.Future[ResolvedContact],
        result: ResolvedContact,
    ) -> None:
        if self._inflight.get(identifier) is future:
            del self._inflight[identifier]
        if not future.done():
            future.set_result(result)
