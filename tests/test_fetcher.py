"""PagedAggregateFetcher and AkindoClient against a mocked upstream."""

import asyncio

import httpx
import pytest

from conftest import connected_client, data_page, items_page, make_detail, make_item
from controllers.wave_hacks import PagedAggregateFetcher
from stores.akindo import (
    AkindoClient,
    AkindoHTTPError,
    AkindoNetworkError,
    AkindoNotFoundError,
    AkindoPayloadError,
    AkindoTimeoutError,
)


def _page_number(request: httpx.Request) -> int:
    return int(request.url.params.get("page", "1"))


class TestFetchPage:
    def test_sends_page_query_param(self, fetcher_factory):
        seen = []

        def handler(request):
            seen.append(request.url.params.get("page"))
            return httpx.Response(200, json=items_page([make_item("a")], total_pages=4, total_items=61))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_page(3)

        page = asyncio.run(run())
        assert seen == ["3"]
        assert page.meta.total_pages == 4
        assert page.meta.total_items == 61
        assert [item.id for item in page.items] == ["a"]

    def test_normalises_data_shape(self, fetcher_factory):
        def handler(request):
            return httpx.Response(200, json=data_page([make_item("a"), make_item("b")], page=2, page_count=5, total=90))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_page(2)

        page = asyncio.run(run())
        assert page.meta.total_pages == 5
        assert page.meta.total_items == 90
        assert page.meta.page == 2
        assert [item.id for item in page.items] == ["a", "b"]

    def test_rejects_page_below_one(self, fetcher_factory):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=items_page([]))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                await fetcher.fetch_page(0)

        with pytest.raises(ValueError):
            asyncio.run(run())
        assert calls == []


class TestFetchAllPages:
    def test_orders_by_page_index_not_completion(self, fetcher_factory):
        completed = []

        async def handler(request):
            page = _page_number(request)
            # page 2 is the slowest, page 3 finishes first
            await asyncio.sleep({1: 0, 2: 0.05, 3: 0}[page])
            completed.append(page)
            items = [make_item(f"p{page}-{i}") for i in range(2)]
            return httpx.Response(200, json=items_page(items, total_pages=3, total_items=6))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_all_pages()

        items = asyncio.run(run())
        assert completed == [1, 3, 2]
        assert [item.id for item in items] == ["p1-0", "p1-1", "p2-0", "p2-1", "p3-0", "p3-1"]

    def test_single_page_makes_one_request(self, fetcher_factory):
        calls = []

        def handler(request):
            calls.append(_page_number(request))
            return httpx.Response(200, json=items_page([make_item("only")], total_pages=1))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_all_pages()

        items = asyncio.run(run())
        assert calls == [1]
        assert [item.id for item in items] == ["only"]

    def test_zero_total_pages_skips_fan_out(self, fetcher_factory):
        calls = []

        def handler(request):
            calls.append(_page_number(request))
            return httpx.Response(200, json=items_page([], total_pages=0))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_all_pages()

        assert asyncio.run(run()) == []
        assert calls == [1]

    def test_remaining_pages_requested_concurrently(self, fetcher_factory):
        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return httpx.Response(200, json=items_page([make_item(str(_page_number(request)))], total_pages=5))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_all_pages()

        items = asyncio.run(run())
        assert len(items) == 5
        assert peak == 4

    def test_any_page_failure_fails_whole_fetch(self, fetcher_factory):
        def handler(request):
            if _page_number(request) == 2:
                return httpx.Response(400, json={"message": "bad page"})
            return httpx.Response(200, json=items_page([make_item("x")], total_pages=3))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_all_pages()

        with pytest.raises(AkindoHTTPError) as exc_info:
            asyncio.run(run())
        assert exc_info.value.status_code == 400


class TestFetchDetail:
    def test_fetches_by_id(self, fetcher_factory):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json=make_detail("wh-9"))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_detail("wh-9")

        detail = asyncio.run(run())
        assert paths == ["/public/wave-hacks/wh-9"]
        assert detail.id == "wh-9"
        assert detail.community.discord_url == "https://discord.gg/x"
        assert [c.title for c in detail.active_criteria] == ["Originality", "Impact"]

    def test_id_stays_one_path_segment(self, fetcher_factory):
        seen = []

        def handler(request):
            seen.append(request.url)
            return httpx.Response(200, json=make_detail("x?page=2"))

        async def run():
            async with fetcher_factory(handler) as fetcher:
                return await fetcher.fetch_detail("x?page=2#frag/../other")

        asyncio.run(run())
        url = seen[0]
        assert url.raw_path == b"/public/wave-hacks/x%3Fpage%3D2%23frag%2F..%2Fother"
        assert url.query == b""

    def test_empty_id_rejected(self, fetcher_factory):
        async def run():
            async with fetcher_factory(lambda request: httpx.Response(200, json={})) as fetcher:
                await fetcher.fetch_detail("")

        with pytest.raises(ValueError):
            asyncio.run(run())

    def test_404_raises_not_found(self, fetcher_factory):
        async def run():
            async with fetcher_factory(lambda request: httpx.Response(404, json={"message": "nope"})) as fetcher:
                await fetcher.fetch_detail("missing")

        with pytest.raises(AkindoNotFoundError):
            asyncio.run(run())


class TestClientRetries:
    def test_retries_transient_status_then_succeeds(self):
        statuses = iter([503, 429, 200])
        calls = []

        def handler(request):
            status = next(statuses)
            calls.append(status)
            if status != 200:
                return httpx.Response(status)
            return httpx.Response(200, json=items_page([make_item("a")]))

        async def run():
            async with connected_client(handler) as client:
                return await PagedAggregateFetcher(client).fetch_page(1)

        page = asyncio.run(run())
        assert calls == [503, 429, 200]
        assert len(page.items) == 1

    def test_gives_up_after_retry_limit(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(502)

        async def run():
            async with connected_client(handler) as client:
                await client.get_page(1)

        with pytest.raises(AkindoHTTPError) as exc_info:
            asyncio.run(run())
        # one attempt plus three retries
        assert len(calls) == 4
        assert exc_info.value.status_code == 502

    def test_no_retry_on_other_client_errors(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(403)

        async def run():
            async with connected_client(handler) as client:
                await client.get_page(1)

        with pytest.raises(AkindoHTTPError):
            asyncio.run(run())
        assert len(calls) == 1

    def test_timeout_is_typed(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async def run():
            async with connected_client(handler) as client:
                await client.get_detail("slow")

        with pytest.raises(AkindoTimeoutError):
            asyncio.run(run())

    def test_connection_failure_is_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async def run():
            async with connected_client(handler) as client:
                await client.get_page(1)

        with pytest.raises(AkindoNetworkError):
            asyncio.run(run())

    def test_invalid_json_is_payload_error(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>maintenance</html>")

        async def run():
            async with connected_client(handler) as client:
                await client.get_page(1)

        with pytest.raises(AkindoPayloadError):
            asyncio.run(run())

    def test_not_connected(self):
        client = AkindoClient(base_url="https://example.invalid")
        with pytest.raises(RuntimeError):
            client.client

    def test_close_releases_http_client(self):
        async def run():
            async with connected_client(lambda request: httpx.Response(200, json=items_page([]))) as client:
                http_client = client.client
                await client.get_page(1)
            return client, http_client

        client, http_client = asyncio.run(run())
        assert http_client.is_closed
        with pytest.raises(RuntimeError):
            client.client


class TestRetryAfter:
    @staticmethod
    def _delay(status, retry_after=None, attempt=1):
        client = AkindoClient(base_url="https://example.invalid", timeout=5.0, retry_backoff=0.3)
        headers = {"Retry-After": retry_after} if retry_after is not None else {}
        return client._retry_delay(httpx.Response(status, headers=headers), attempt)

    def test_exponential_backoff_without_header(self):
        assert self._delay(429) == pytest.approx(0.3)
        assert self._delay(429, attempt=3) == pytest.approx(1.2)

    def test_seconds_header_is_used(self):
        assert self._delay(429, "2") == 2.0
        assert self._delay(503, "0") == 0.0

    def test_capped_at_timeout(self):
        assert self._delay(413, "120") == 5.0

    def test_http_date_header(self):
        assert self._delay(503, "Wed, 21 Oct 2015 07:28:00 GMT") == 0.0

    def test_ignored_for_other_statuses(self):
        assert self._delay(502, "2") == pytest.approx(0.3)

    def test_garbage_header_falls_back(self):
        assert self._delay(429, "soon") == pytest.approx(0.3)

    def test_retry_loop_waits_for_header(self, monkeypatch):
        waits = []

        async def fake_sleep(delay):
            waits.append(delay)

        monkeypatch.setattr("stores.akindo.asyncio.sleep", fake_sleep)
        statuses = iter([429, 200])

        def handler(request):
            status = next(statuses)
            if status != 200:
                return httpx.Response(status, headers={"Retry-After": "3"})
            return httpx.Response(200, json=items_page([make_item("a")]))

        async def run():
            async with connected_client(handler) as client:
                return await client.get_page(1)

        assert len(asyncio.run(run()).items) == 1
        assert waits == [3.0]
