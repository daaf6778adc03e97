import asyncio

import pytest

from reconnect.features.checkins.domain import ResolvedContact
from reconnect.features.checkins.identity import DirectoryResolver

from tests.fakes import BrokenEntryLookupClient, FakeLookupClient


@pytest.mark.asyncio
async def test_resolve_one_found(cache, lookup_client):
    resolver = DirectoryResolver(cache, lookup_client)

    result = await resolver.resolve_one("+15551234567")

    assert result == ResolvedContact(name="Jennifer Wilson", is_resolved=True)
    assert lookup_client.single_requests[0].search_strings[-1] == "5551234567"


@pytest.mark.asyncio
async def test_same_identifier_twice_hits_tool_once(cache, lookup_client):
    resolver = DirectoryResolver(cache, lookup_client)

    first = await resolver.resolve_one("+15551234567")
    second = await resolver.resolve_one("+15551234567")

    assert first == second
    assert len(lookup_client.single_requests) == 1


@pytest.mark.asyncio
async def test_not_found_is_negatively_cached(cache, lookup_client):
    resolver = DirectoryResolver(cache, lookup_client)

    result = await resolver.resolve_one("+15168498802")
    await resolver.resolve_one("+15168498802")

    assert result == ResolvedContact(name="(516) 849-8802", is_resolved=False)
    assert len(lookup_client.single_requests) == 1
    assert cache.get("+15168498802") == result


@pytest.mark.asyncio
async def test_lookup_failure_falls_back_and_caches(cache, lookup_client):
    lookup_client.fail_with = "Lookup timed out after 5.0s"
    resolver = DirectoryResolver(cache, lookup_client)

    result = await resolver.resolve_one("+15551234567")

    assert result == ResolvedContact(name="(555) 123-4567", is_resolved=False)
    assert cache.has("+15551234567")


@pytest.mark.asyncio
async def test_retry_after_negative_entry_expires(cache, clock, lookup_client):
    lookup_client.fail_with = "ERROR"
    resolver = DirectoryResolver(cache, lookup_client)
    await resolver.resolve_one("+15551234567")

    lookup_client.fail_with = None
    clock.advance(1801)
    result = await resolver.resolve_one("+15551234567")

    assert result.is_resolved
    assert len(lookup_client.single_requests) == 2


@pytest.mark.asyncio
async def test_email_and_short_numbers_stay_local(cache, lookup_client):
    resolver = DirectoryResolver(cache, lookup_client)

    email = await resolver.resolve_one("sarah.johnson@example.com")
    short = await resolver.resolve_one("12345")

    assert email == ResolvedContact(name="Sarah Johnson", is_resolved=False)
    assert short == ResolvedContact(name="12345", is_resolved=False)
    assert lookup_client.single_requests == []


@pytest.mark.asyncio
async def test_cache_key_is_the_raw_identifier(cache, lookup_client):
    resolver = DirectoryResolver(cache, lookup_client)

    await resolver.resolve_one("+15551234567")

    assert cache.has("+15551234567")
    assert not cache.has("5551234567")


@pytest.mark.asyncio
async def test_resolve_many_uses_one_batch_for_uncached(cache, lookup_client):
    resolver = DirectoryResolver(cache, lookup_client)
    await resolver.resolve_one("+15559876543")

    results = await resolver.resolve_many(
        ["+15551234567", "+15559876543", "+15168498802", "friend@example.com"]
    )

    assert len(lookup_client.batch_requests) == 1
    assert lookup_client.batch_requests[0].identifiers == ("+15551234567", "+15168498802")
    assert results["+15551234567"].name == "Jennifer Wilson"
    assert results["+15559876543"].name == "Lisa Chang"
    assert results["+15168498802"] == ResolvedContact("(516) 849-8802", False)
    assert results["friend@example.com"] == ResolvedContact("Friend", False)


@pytest.mark.asyncio
async def test_resolve_many_all_cached_skips_tool(cache, lookup_client):
    resolver = DirectoryResolver(cache, lookup_client)
    await resolver.resolve_many(["+15551234567"])
    await resolver.resolve_many(["+15551234567"])

    assert len(lookup_client.batch_requests) == 1


@pytest.mark.asyncio
async def test_batch_failure_falls_back_for_every_identifier(cache, lookup_client):
    lookup_client.fail_with = "Unparseable batch output"
    resolver = DirectoryResolver(cache, lookup_client)

    results = await resolver.resolve_many(["+15551234567", "+15559876543"])

    assert all(not contact.is_resolved for contact in results.values())
    assert cache.stats().unresolved == 2


@pytest.mark.asyncio
async def test_batch_partial_failure_only_affects_that_entry(cache):
    client = BrokenEntryLookupClient({"+15551234567": "Jennifer Wilson", "+15559876543": "Lisa Chang"})
    resolver = DirectoryResolver(cache, client)

    results = await resolver.resolve_many(["+15551234567", "+15559876543"])

    assert results["+15551234567"] == ResolvedContact("(555) 123-4567", False)
    assert results["+15559876543"] == ResolvedContact("Lisa Chang", True)


@pytest.mark.asyncio
async def test_concurrent_resolutions_share_one_lookup(cache):
    client = FakeLookupClient({"+15551234567": "Jennifer Wilson"}, delay=0.05)
    resolver = DirectoryResolver(cache, client)

    results = await asyncio.gather(
        resolver.resolve_one("+15551234567"),
        resolver.resolve_one("+15551234567"),
        resolver.resolve_many(["+15551234567"]),
    )

    assert len(client.single_requests) == 1
    assert client.batch_requests == []
    assert results[0] == results[1] == results[2]["+15551234567"]
