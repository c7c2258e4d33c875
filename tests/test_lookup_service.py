"""Tests for the lookup service, its channel and client."""

import pytest

from conftest import FakeResolver
from emojify.core.exceptions import (
    LookupServiceStoppedError,
    ReferenceSourceError,
)
from emojify.core.models import LookupReply, LookupRequest, ShortCode
from emojify.core.types import ReplyStatus
from emojify.lookup import LookupChannel, LookupClient, LookupService


def code(text: str) -> ShortCode:
    return ShortCode(text=text)


class TestMemoization:
    """Tests for the lookup cache."""

    def test_repeat_lookup_served_from_cache(self, lookup_client, fake_resolver, reference_table):
        first = lookup_client.call(code("wave"), reference_table)
        second = lookup_client.call(code("wave"), reference_table)
        assert first == second == "👋"
        assert fake_resolver.calls == ["wave"]

    def test_placeholder_is_cached(self, lookup_client, fake_resolver, reference_table):
        for _ in range(3):
            assert lookup_client.call(code("no_such_thing"), reference_table) == "?no_such_thing?"
        assert fake_resolver.calls == ["no such thing"]

    def test_stats_and_cache_size(self, lookup_service, lookup_client, reference_table):
        lookup_client.call(code("wave"), reference_table)
        lookup_client.call(code("wave"), reference_table)
        lookup_client.call(code("nope"), reference_table)
        assert lookup_service.stats.hits == 1
        assert lookup_service.stats.misses == 2
        assert lookup_service.cache_size == 2

    def test_handle_reports_status(self, fake_resolver, reference_table):
        """handle() can be driven directly without the worker thread."""
        service = LookupService(fake_resolver)
        ok = service.handle(LookupRequest(token=code("rocket"), context=reference_table))
        missing = service.handle(LookupRequest(token=code("nope"), context=reference_table))
        assert ok == LookupReply(status=ReplyStatus.OK, value="🚀")
        assert missing == LookupReply(status=ReplyStatus.UNRESOLVED, value="?nope?")


class TestSourceFailures:
    """Tests for reference source failures."""

    def test_source_failure_not_cached(self, reference_table):
        resolver = FakeResolver(broken=True)
        with LookupService(resolver) as service:
            client = LookupClient(service.channel)
            for _ in range(2):
                with pytest.raises(ReferenceSourceError):
                    client.call(code("wave"), reference_table)
            assert service.cache_size == 0
            assert service.stats.source_failures == 2
        assert resolver.calls == ["wave", "wave"]

    def test_service_keeps_serving_after_failure(self, reference_table):
        resolver = FakeResolver({"wave": "👋"}, broken=True)
        with LookupService(resolver) as service:
            client = LookupClient(service.channel)
            with pytest.raises(ReferenceSourceError):
                client.call(code("wave"), reference_table)
            resolver.broken = False
            assert client.call(code("wave"), reference_table) == "👋"
            assert service.is_running

    def test_unexpected_error_stops_service(self, reference_table):
        class Exploding:
            def resolve(self, description, table):
                raise RuntimeError("boom")

        service = LookupService(Exploding()).start()
        client = LookupClient(service.channel)
        with pytest.raises(LookupServiceStoppedError):
            client.call(code("wave"), reference_table)
        service.stop()
        assert isinstance(service.error, RuntimeError)
        assert not service.is_running


class TestOrdering:
    """Tests for in-order replies."""

    def test_replies_follow_request_order(self, lookup_service, reference_table):
        channel = lookup_service.channel
        names = ["wave", "nope", "rocket", "wave", "thumbs_up"]
        for name in names:
            channel.requests.put(LookupRequest(token=code(name), context=reference_table))
        values = [channel.replies.get(timeout=5).value for _ in names]
        assert values == ["👋", "?nope?", "🚀", "👋", "👍"]


class TestLifecycle:
    """Tests for starting and stopping the service."""

    def test_stop_closes_channel(self, fake_resolver):
        service = LookupService(fake_resolver).start()
        assert service.is_running
        service.stop()
        assert service.channel.is_closed
        assert not service.is_running

    def test_call_after_stop_raises(self, fake_resolver, reference_table):
        service = LookupService(fake_resolver).start()
        service.stop()
        with pytest.raises(LookupServiceStoppedError):
            LookupClient(service.channel).call(code("wave"), reference_table)

    def test_call_before_start_raises(self, fake_resolver, reference_table):
        """A client never waits on a service that was not started."""
        service = LookupService(fake_resolver)
        with pytest.raises(LookupServiceStoppedError):
            LookupClient(service.channel).call(code("wave"), reference_table)
        assert service.channel.requests.empty()
        assert fake_resolver.calls == []

    def test_stopped_error_is_source_class(self):
        assert issubclass(LookupServiceStoppedError, ReferenceSourceError)

    def test_cannot_start_twice(self, fake_resolver):
        service = LookupService(fake_resolver).start()
        try:
            with pytest.raises(RuntimeError):
                service.start()
        finally:
            service.stop()

    def test_stop_without_start_is_noop(self, fake_resolver):
        LookupService(fake_resolver).stop()

    def test_shared_channel(self, fake_resolver, reference_table):
        channel = LookupChannel()
        with LookupService(fake_resolver, channel) as service:
            assert service.channel is channel
            assert LookupClient(channel).call(code("rocket"), reference_table) == "🚀"
