"""
Upstash REST client and the versioned read-model cache.
"""
from decimal import Decimal
from unittest.mock import AsyncMock

import httpx
import pytest

from core.breaker import CircuitBreaker
from core.cache import Cache
from core.read_model_cache import CacheGroup, ReadModelCache
from fintechs.razorpay import RazorpayClient
from models.enums import AvailabilityStatus, PaymentStatus, PropertyPurpose, UserRole
from services.payment_service import PaymentService


def _upstash(store: dict, calls: list):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        command, _, key = request.url.path.strip("/").partition("/")
        if command == "ping":
            return httpx.Response(200, json={"result": "PONG"})
        if command == "get":
            return httpx.Response(200, json={"result": store.get(key)})
        if command == "set":
            store[key] = request.content.decode()
            return httpx.Response(200, json={"result": "OK"})
        if command == "incr":
            store[key] = str(int(store.get(key) or 0) + 1)
            return httpx.Response(200, json={"result": int(store[key])})
        return httpx.Response(400)

    return httpx.MockTransport(handler)


def _malformed_cache(**reply) -> Cache:
    """Upstash that answers every command with a 200 the client cannot use."""
    return Cache(
        "https://eu1-upstash.example.io",
        "token-123",
        breaker=CircuitBreaker(name="test-malformed", failure_threshold=100),
        transport=httpx.MockTransport(lambda request: httpx.Response(200, **reply)),
    )


@pytest.fixture
def upstash():
    store: dict[str, str] = {}
    calls: list[httpx.Request] = []
    cache = Cache(
        "https://eu1-upstash.example.io",
        "token-123",
        transport=_upstash(store, calls),
    )
    return cache, store, calls


class TestCache:
    async def test_set_get_incr(self, upstash) -> None:
        cache, store, calls = upstash

        assert await cache.set("listing", '{"a": 1}', ttl=60) is True
        assert await cache.get("listing") == '{"a": 1}'
        assert await cache.incr("epoch") == 1
        assert await cache.incr("epoch") == 2

        set_call = calls[0]
        assert set_call.method == "POST"
        assert set_call.url.params["ex"] == "60"
        assert set_call.headers["Authorization"] == "Bearer token-123"

    async def test_ping(self, upstash) -> None:
        cache, _, _ = upstash
        assert await cache.ping() is True

    async def test_disabled_cache_never_calls_out(self) -> None:
        cache = Cache(None, None)

        assert cache.enabled is False
        assert await cache.get("k") is None
        assert await cache.set("k", "v") is False
        assert await cache.incr("k") is None

    async def test_backend_errors_degrade_to_misses(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        cache = Cache(
            "https://eu1-upstash.example.io",
            "token-123",
            breaker=CircuitBreaker(name="test-cache", failure_threshold=2),
            transport=transport,
        )

        assert await cache.get("k") is None
        assert await cache.set("k", "v") is False
        # breaker is open now; calls short-circuit without raising
        assert await cache.incr("k") is None
        assert cache.breaker.state == "OPEN"

    async def test_set_rejects_none(self, upstash) -> None:
        cache, _, _ = upstash
        with pytest.raises(ValueError):
            await cache.set("k", None)

    @pytest.mark.parametrize(
        "reply",
        [
            {"text": "oops"},
            {"json": ["not", "a", "dict"]},
        ],
    )
    async def test_malformed_replies_are_misses(self, reply) -> None:
        cache = _malformed_cache(**reply)

        assert await cache.get("listing") is None
        assert await cache.incr("epoch") is None
        assert await cache.ping() is False

    async def test_non_numeric_incr_is_a_miss(self) -> None:
        cache = _malformed_cache(json={"result": None})
        assert await cache.incr("epoch") is None


class TestReadModelCache:
    async def test_get_or_load_caches_until_group_is_invalidated(
        self, read_cache: ReadModelCache
    ) -> None:
        loads = []

        async def loader():
            loads.append(1)
            return {"items": [len(loads)]}

        first = await read_cache.get_or_load(CacheGroup.LISTING_PAGE, (1, 20), loader)
        second = await read_cache.get_or_load(CacheGroup.LISTING_PAGE, (1, 20), loader)
        assert first == second == {"items": [1]}
        assert len(loads) == 1

        await read_cache.invalidate_group(CacheGroup.LISTING_PAGE)

        third = await read_cache.get_or_load(CacheGroup.LISTING_PAGE, (1, 20), loader)
        assert third == {"items": [2]}

    async def test_params_and_groups_get_distinct_keys(self, read_cache) -> None:
        page_one = await read_cache.key_for(CacheGroup.LISTING_PAGE, 1, 20)
        page_two = await read_cache.key_for(CacheGroup.LISTING_PAGE, 2, 20)
        search = await read_cache.key_for(CacheGroup.SEARCH_RESULTS, 1, 20)
        cities = await read_cache.key_for(CacheGroup.CITY_LIST)

        assert len({page_one, page_two, search, cities}) == 4
        assert cities.endswith(":all")

    async def test_detail_scope_only_evicts_that_property(self, read_cache) -> None:
        seven = await read_cache.key_for(CacheGroup.PROPERTY_DETAIL, 7, scope=7)
        eight = await read_cache.key_for(CacheGroup.PROPERTY_DETAIL, 8, scope=8)

        await read_cache.invalidate_property(7)

        assert await read_cache.key_for(CacheGroup.PROPERTY_DETAIL, 7, scope=7) != seven
        assert await read_cache.key_for(CacheGroup.PROPERTY_DETAIL, 8, scope=8) == eight

    async def test_city_list_survives_unless_requested(self, read_cache) -> None:
        cities = await read_cache.key_for(CacheGroup.CITY_LIST)

        await read_cache.invalidate_property(3)
        assert await read_cache.key_for(CacheGroup.CITY_LIST) == cities

        await read_cache.invalidate_property(3, cities=True)
        assert await read_cache.key_for(CacheGroup.CITY_LIST) != cities

    async def test_load_started_before_invalidation_cannot_mask_it(
        self, read_cache, cache_backend
    ) -> None:
        """A slow reader stores under the old epoch, so later readers never see it."""

        async def slow_loader():
            await read_cache.invalidate_group(CacheGroup.SEARCH_RESULTS)
            return {"items": ["stale"]}

        async def fresh_loader():
            return {"items": ["fresh"]}

        stale = await read_cache.get_or_load(
            CacheGroup.SEARCH_RESULTS, ("mumbai",), slow_loader
        )
        fresh = await read_cache.get_or_load(
            CacheGroup.SEARCH_RESULTS, ("mumbai",), fresh_loader
        )

        assert stale == {"items": ["stale"]}
        assert fresh == {"items": ["fresh"]}

    async def test_corrupt_cached_value_is_a_miss(self, read_cache, cache_backend) -> None:
        key = await read_cache.key_for(CacheGroup.CITY_LIST)
        cache_backend.store[key] = "{not json"

        value, found = await read_cache.get(key)

        assert found is False
        assert value is None


class TestPostCommitIsolation:
    """Writes that committed must report success even if eviction or events fail."""

    @pytest.fixture
    def broken_read_cache(self) -> ReadModelCache:
        return ReadModelCache(_malformed_cache(text="oops"), ttl=60, namespace="test")

    async def test_verify_succeeds_over_malformed_cache(
        self, db, test_settings, receipts, publisher, make_user, make_property,
        broken_read_cache,
    ) -> None:
        service = PaymentService(
            db,
            test_settings,
            RazorpayClient(test_settings),
            broken_read_cache,
            receipts,
            publisher=publisher,
        )
        owner = await make_user(role=UserRole.BUILDER, company_name="Skyline Builders")
        renter = await make_user()
        rental = await make_property(
            owner,
            purpose=PropertyPurpose.RENT,
            price=None,
            rent_amount=Decimal("12000"),
        )

        order = await service.create_order(renter.id, rental.id)
        paid = await service.verify_payment(order.gateway_order_id, "pay_1", "sig")

        assert paid.status == PaymentStatus.SUCCESS
        receipts.schedule.assert_called_once()
        publisher.assert_awaited()

    async def test_verify_survives_raising_invalidation_and_publisher(
        self, payment_service, read_cache, publisher, receipts, make_user, make_property
    ) -> None:
        read_cache.invalidate_property = AsyncMock(side_effect=RuntimeError("down"))
        publisher.side_effect = RuntimeError("broker gone")
        owner = await make_user(role=UserRole.BUILDER, company_name="Skyline Builders")
        buyer = await make_user()
        prop = await make_property(owner)

        order = await payment_service.create_order(buyer.id, prop.id)
        paid = await payment_service.verify_payment(order.gateway_order_id, "pay_1", "s")

        assert paid.status == PaymentStatus.SUCCESS
        receipts.schedule.assert_called_once()
        read_cache.invalidate_property.assert_awaited_once()

    async def test_property_writes_survive_raising_invalidation(
        self, property_service, read_cache, publisher, make_user, make_property
    ) -> None:
        read_cache.invalidate_property = AsyncMock(side_effect=RuntimeError("down"))
        owner = await make_user(role=UserRole.BUILDER, company_name="Skyline Builders")
        prop = await make_property(owner)
        prop_id = prop.id

        updated = await property_service.update_availability(
            prop_id, AvailabilityStatus.BOOKED
        )

        assert updated.availability_status == AvailabilityStatus.BOOKED
        publisher.assert_awaited_once()
        assert publisher.await_args.args[0] == "property.status_changed"
