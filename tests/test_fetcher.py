"""Tests for page fetching and the politeness delay."""

import asyncio

import httpx
import pytest

from hn_front_miner import fetcher as fetcher_module
from hn_front_miner.fetcher import CrawlCancelled, FetchError, PageFetcher, Throttle
from hn_front_miner.models import PageParams


def run_fetch(handler, params, **kwargs):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            async with PageFetcher(client=client, throttle=Throttle(0), **kwargs) as fetcher:
                return await fetcher.fetch(params)
    return asyncio.run(_run())


class TestPageFetcher:
    def test_returns_body(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text="<html>ok</html>")

        assert run_fetch(handler, PageParams("2007-10-01", 3)) == "<html>ok</html>"
        assert seen == ["https://news.ycombinator.com/front?day=2007-10-01&p=3"]

    def test_client_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        with pytest.raises(FetchError) as excinfo:
            run_fetch(handler, PageParams("2007-10-01"), max_retries=3, initial_backoff=0)
        assert excinfo.value.status_code == 404
        assert len(calls) == 1

    def test_retryable_status_then_success(self):
        responses = [httpx.Response(503), httpx.Response(200, text="fine")]

        def handler(request):
            return responses.pop(0)

        assert run_fetch(handler, PageParams("2007-10-01"), max_retries=3, initial_backoff=0) == "fine"

    def test_retries_exhausted(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        with pytest.raises(FetchError) as excinfo:
            run_fetch(handler, PageParams("2007-10-01"), max_retries=2, initial_backoff=0)
        assert excinfo.value.status_code == 500
        assert len(calls) == 2

    def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError) as excinfo:
            run_fetch(handler, PageParams("2007-10-01"), max_retries=1)
        assert excinfo.value.status_code is None
        assert "request error" in excinfo.value.reason

    def test_network_error_then_success(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, text="recovered")

        assert run_fetch(handler, PageParams("2007-10-01"), max_retries=2, initial_backoff=0) == "recovered"
        assert len(calls) == 2

    def test_requires_context_manager(self):
        async def _run():
            await PageFetcher().fetch(PageParams("2007-10-01"))

        with pytest.raises(RuntimeError):
            asyncio.run(_run())


class TestThrottle:
    def test_first_wait_does_not_sleep(self, monkeypatch):
        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        monkeypatch.setattr(fetcher_module.asyncio, "sleep", fake_sleep)

        async def _run():
            throttle = Throttle(1.5)
            await throttle.wait()
            await throttle.wait()
            await throttle.wait()

        asyncio.run(_run())
        assert delays == [1.5, 1.5]

    def test_stop_before_wait(self):
        throttle = Throttle(0)
        throttle.stop()
        with pytest.raises(CrawlCancelled):
            asyncio.run(throttle.wait())

    def test_stop_during_delay(self, monkeypatch):
        throttle = Throttle(1.0)

        async def fake_sleep(seconds):
            throttle.stop()

        monkeypatch.setattr(fetcher_module.asyncio, "sleep", fake_sleep)

        async def _run():
            await throttle.wait()
            await throttle.wait()

        with pytest.raises(CrawlCancelled):
            asyncio.run(_run())
