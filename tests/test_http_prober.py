import asyncio

import aiohttp
from aiohttp import web
from aiohttp import test_utils

from status_checker.http_prober import HttpProber
from status_checker.scheduler import check_urls
from status_checker.settings import CheckConfig, ProxySettings


async def ok(request):
    return web.Response(text="ok")


async def head_blocked(request):
    if request.method == "HEAD":
        return web.Response(status=405)
    return web.Response(text="ok")


async def moved(request):
    raise web.HTTPFound("/ok")


async def slow(request):
    await asyncio.sleep(1)
    return web.Response(text="late")


def make_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/ok", ok)
    app.router.add_route("*", "/head-blocked", head_blocked)
    app.router.add_get("/moved", moved)
    app.router.add_get("/slow", slow)
    return app


def serve(fn):
    """Run `fn(server)` against a loopback server and return its result."""
    async def main():
        server = test_utils.TestServer(make_app())
        await server.start_server()
        try:
            return await fn(server)
        finally:
            await server.close()
    return asyncio.run(main())


def request(method, path, **config_overrides):
    async def fn(server):
        async with aiohttp.ClientSession() as session:
            prober = HttpProber(session, CheckConfig(**config_overrides))
            return await prober.request(method, str(server.make_url(path)))
    return serve(fn)


def test_head_ok():
    r = request("HEAD", "/ok")
    assert r.status == 200
    assert r.reason == "OK"
    assert r.ok
    assert r.elapsed_ms >= 0


def test_head_rejected():
    r = request("HEAD", "/head-blocked")
    assert r.status == 405
    assert not r.ok


def test_redirect_is_followed():
    r = request("GET", "/moved")
    assert r.status == 200
    assert r.final_url.endswith("/ok")


def test_timeout_is_no_response():
    r = request("GET", "/slow", attempt_timeout_s=0.2)
    assert r.status is None
    assert r.error_type is not None


def test_connection_refused_is_no_response():
    async def fn(server):
        url = str(server.make_url("/ok"))
        await server.close()
        async with aiohttp.ClientSession() as session:
            return await HttpProber(session, CheckConfig()).request("GET", url)
    r = serve(fn)
    assert r.status is None
    assert r.error_type is not None


def test_check_urls_against_loopback():
    async def fn(server):
        urls = [
            str(server.make_url("/ok")),
            str(server.make_url("/head-blocked")),
            str(server.make_url("/missing")),
            "ht!tp://bad",
        ]
        events = []
        results = await check_urls(
            urls, config=CheckConfig(attempt_timeout_s=2.0), on_progress=events.append,
        )
        return urls, results, events

    urls, results, events = serve(fn)
    by_url = {r.original_url: r for r in results}

    assert [r.original_url for r in results] == urls
    assert by_url[urls[0]].method_used == "HEAD"
    assert by_url[urls[1]].method_used == "GET"
    assert by_url[urls[1]].status == 200
    # The 404 is kept even though the https variant fails outright
    assert by_url[urls[2]].status == 404
    assert by_url[urls[2]].error is None
    assert by_url["ht!tp://bad"].status == 400
    assert events[-1].percent == 100


class RecordingSession:
    """Stands in for aiohttp.ClientSession and keeps the request kwargs."""

    def __init__(self):
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return FakeResponse(url)


class FakeResponse:
    status = 200
    reason = "OK"

    def __init__(self, url):
        self.url = url

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def send_through_recorder(config, proxy=None):
    session = RecordingSession()
    r = asyncio.run(HttpProber(session, config, proxy).request("GET", "https://example.com"))
    assert r.ok
    return session.calls[0][2]


def test_proxy_is_passed_when_enabled():
    proxy = ProxySettings(server="http://proxy.example.com:3128", username="u", password="p")
    kwargs = send_through_recorder(CheckConfig(use_proxy=True), proxy)
    assert kwargs["proxy"] == "http://u:p@proxy.example.com:3128"


def test_proxy_is_ignored_when_disabled():
    proxy = ProxySettings(server="http://proxy.example.com:3128")
    kwargs = send_through_recorder(CheckConfig(use_proxy=False), proxy)
    assert kwargs["proxy"] is None


def test_ssl_verification_can_be_turned_off():
    assert send_through_recorder(CheckConfig(verify_ssl=False))["ssl"] is False
    assert "ssl" not in send_through_recorder(CheckConfig(verify_ssl=True))


def test_request_shape():
    kwargs = send_through_recorder(CheckConfig(user_agent="Checker/2.0", attempt_timeout_s=3.0))
    assert kwargs["allow_redirects"] is True
    assert kwargs["headers"]["User-Agent"] == "Checker/2.0"
    assert kwargs["timeout"].total == 3.0
