"""Tests for the Docker Hub updater."""

import asyncio

import pytest

aiohttp_mod = pytest.importorskip("aiohttp")

from aiohttp import web
import aiohttp.test_utils

from common.http_client import HttpClient
from updater.docker import DockerUpdater
from versioning.errors import HttpError, JsonParsing, UpstreamConnectionError, VersionParsing
from versioning.models import Resource, ResourceKind

TAGS = ["latest", "0.2", "0.3", "0.4", "0.6", "0.7", "0.8.0", "0.9.0"]
ALPINE = Resource(ResourceKind.DOCKER, "library/alpine")


def _run_with_server(app, body):
    """Run ``body(updater, base_url)`` against a test server serving ``app``."""

    async def _run():
        async with aiohttp.test_utils.TestServer(app) as ts:
            base = f"http://{ts.host}:{ts.port}"
            async with HttpClient(timeout=5) as http:
                return await body(DockerUpdater(http, base_url=base), base)

    return asyncio.run(_run())


class TestDockerParseVersions:
    """Tests for tag listing parsing."""

    def test_legacy_list_form(self):
        updater = DockerUpdater(http=None)
        data = [{"layer": "", "name": t} for t in TAGS]
        assert [v.string for v in updater.parse_versions(data)] == TAGS

    def test_paged_form(self):
        updater = DockerUpdater(http=None)
        data = {"count": 2, "next": None, "results": [{"name": "3.18"}, {"name": "3.19"}]}
        assert [v.string for v in updater.parse_versions(data)] == ["3.18", "3.19"]

    def test_empty_listing_is_not_an_error(self):
        updater = DockerUpdater(http=None)
        assert updater.parse_versions({"results": []}) == []
        assert updater.parse_versions([]) == []

    @pytest.mark.parametrize("data", [
        {"detail": "oops"},
        "not a list",
        [{"name": "1.0"}, "bare-string"],
        [{"name": "1.0"}, {"layer": ""}],
        [{"name": 3}],
    ])
    def test_malformed_entry_fails_whole_listing(self, data):
        updater = DockerUpdater(http=None)
        with pytest.raises(JsonParsing):
            updater.parse_versions(data)

    def test_empty_tag_name_fails(self):
        updater = DockerUpdater(http=None)
        with pytest.raises(VersionParsing):
            updater.parse_versions([{"name": ""}])


class TestDockerUpdaterMatching:
    """Tests for URL building and resource classification."""

    def test_url(self):
        updater = DockerUpdater(http=None)
        assert updater.url(ALPINE) == (
            "https://registry.hub.docker.com/v2/repositories/library/alpine/tags?page_size=100"
        )

    def test_matches_docker_hub_only(self):
        updater = DockerUpdater(http=None)
        assert updater.matches(ALPINE)
        assert not updater.matches(Resource(ResourceKind.DOCKER, "ghcr.io/owner/img"))
        assert not updater.matches(Resource(ResourceKind.GITHUB, "actions/checkout"))


class TestDockerUpdaterFetch:
    """Tests for fetching against a local registry stand-in."""

    def test_follows_next_links(self):
        async def tags(request):
            base = f"http://{request.host}"
            if request.query.get("page") == "2":
                return web.json_response({"next": None, "results": [{"name": "3.19"}]})
            return web.json_response({
                "next": f"{base}/v2/repositories/library/alpine/tags?page=2&page_size=100",
                "results": [{"name": "latest"}, {"name": "3.18"}],
            })

        app = web.Application()
        app.router.add_get("/v2/repositories/library/alpine/tags", tags)

        async def body(updater, base):
            return await updater.get_versions(updater.url(ALPINE))

        versions = _run_with_server(app, body)
        assert [v.string for v in versions] == ["latest", "3.18", "3.19"]

    def test_non_2xx_is_http_error(self):
        async def missing(request):
            return web.json_response({"message": "not found"}, status=404)

        app = web.Application()
        app.router.add_get("/v2/repositories/library/alpine/tags", missing)

        async def body(updater, base):
            with pytest.raises(HttpError) as excinfo:
                await updater.get_versions(updater.url(ALPINE))
            return excinfo.value

        err = _run_with_server(app, body)
        assert err.status == 404
        assert err.url.startswith("http://")
        assert "/v2/repositories/library/alpine/tags" in err.url

    def test_invalid_json_is_json_parsing(self):
        async def garbage(request):
            return web.Response(text="<html>rate limited</html>", content_type="text/html")

        app = web.Application()
        app.router.add_get("/v2/repositories/library/alpine/tags", garbage)

        async def body(updater, base):
            with pytest.raises(JsonParsing):
                await updater.get_versions(updater.url(ALPINE))

        _run_with_server(app, body)

    def test_non_utf8_body_is_json_parsing(self):
        async def latin(request):
            return web.Response(
                body=b'{"results": [{"name": "\xff\xfe"}]}', content_type="application/json"
            )

        app = web.Application()
        app.router.add_get("/v2/repositories/library/alpine/tags", latin)

        async def body(updater, base):
            with pytest.raises(JsonParsing):
                await updater.get_versions(updater.url(ALPINE))

        _run_with_server(app, body)

    def test_connection_refused_is_upstream_error(self):
        async def _run():
            async with HttpClient(timeout=5) as http:
                # Port 1 on loopback is never listening in test environments.
                updater = DockerUpdater(http, base_url="http://127.0.0.1:1")
                with pytest.raises(UpstreamConnectionError):
                    await updater.get_versions(updater.url(ALPINE))

        asyncio.run(_run())
