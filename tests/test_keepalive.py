from __future__ import annotations

import asyncio

import httpx

from sms_notifier.keepalive import SelfPinger


def _ping(handler):
    async def scenario():
        pinger = SelfPinger("https://notifier.example.com/", transport=httpx.MockTransport(handler))
        try:
            await pinger.ping()
        finally:
            await pinger.aclose()

    asyncio.run(scenario())


def test_ping_requests_public_url():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="running")

    _ping(handler)

    assert [(r.method, str(r.url)) for r in seen] == [("GET", "https://notifier.example.com/")]


def test_ping_failure_is_swallowed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    _ping(handler)


def test_run_pings_every_interval():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    async def scenario():
        pinger = SelfPinger(
            "https://notifier.example.com/", interval=0.02, transport=httpx.MockTransport(handler)
        )
        runner = asyncio.create_task(pinger.run())
        await asyncio.sleep(0.11)
        runner.cancel()
        await asyncio.gather(runner, return_exceptions=True)
        await pinger.aclose()

    asyncio.run(scenario())

    assert len(seen) >= 2
