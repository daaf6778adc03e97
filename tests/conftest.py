import pytest

from reconnect.features.checkins.identity import IdentityCache
from tests.fakes import FakeClock, FakeLookupClient


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return IdentityCache(ttl_seconds=1800, capacity=1000, clock=clock)


@pytest.fixture
def lookup_client():
    return FakeLookupClient(
        {
            "+15551234567": "Jennifer Wilson",
            "+15559876543": "Lisa Chang",
        }
    )
