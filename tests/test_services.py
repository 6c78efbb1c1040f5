"""Tests for the HTTP service helpers and their default adapters."""

from __future__ import annotations

import httpx
import pytest

from episode_browser.errors import NetworkError
from episode_browser.services.connectivity_service import check_connectivity
from episode_browser.services.episode_api_service import (
    API_USER_AGENT,
    fetch_characters,
    fetch_page,
    unique_ids,
)
from episode_browser.services.interfaces import (
    AppServices,
    ConnectivityService,
    DefaultConnectivityService,
    DefaultEpisodeApiService,
    EpisodeApiService,
    build_default_app_services,
)

BASE_URL = "https://api.test/api"


def _episode(episode_id: int) -> dict:
    return {
        "id": episode_id,
        "name": f"Episode {episode_id}",
        "air_date": "December 2, 2013",
        "episode": f"S01E{episode_id:02d}",
        "characters": [],
        "url": f"{BASE_URL}/episode/{episode_id}",
        "created": "2017-11-10T12:56:33.798Z",
    }


def _character(character_id: int) -> dict:
    return {
        "id": character_id,
        "name": f"Character {character_id}",
        "status": "Alive",
        "species": "Human",
        "type": "",
        "gender": "Male",
        "origin": {"name": "Earth", "url": ""},
        "location": {"name": "Earth", "url": ""},
        "image": "",
        "episode": [f"{BASE_URL}/episode/1"],
    }


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestFetchPage:
    @pytest.mark.asyncio
    async def test_parses_page_and_cursor(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "info": {"next": f"{BASE_URL}/episode?page=3"},
                    "results": [_episode(21), _episode(22)],
                },
            )

        async with _client(handler) as client:
            page = await fetch_page(client=client, page_number=2, base_url=BASE_URL)

        assert page.number == 2
        assert [e.id for e in page.episodes] == [21, 22]
        assert page.next_cursor == 3
        assert seen[0].url.path == "/api/episode"
        assert seen[0].url.params["page"] == "2"
        assert seen[0].headers["User-Agent"] == API_USER_AGENT

    @pytest.mark.asyncio
    async def test_404_is_empty_exhausted_page(self):
        async with _client(lambda request: httpx.Response(404)) as client:
            page = await fetch_page(client=client, page_number=9, base_url=BASE_URL)
        assert page.episodes == ()
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_superscript_cursor_ends_paging(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={"info": {"next": f"{BASE_URL}/episode?page=%C2%B2"}, "results": [_episode(1)]},
            )

        async with _client(handler) as client:
            page = await fetch_page(client=client, page_number=1, base_url=BASE_URL)

        assert [e.id for e in page.episodes] == [1]
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_server_error_raises_network_error(self):
        async with _client(lambda request: httpx.Response(500)) as client:
            with pytest.raises(NetworkError) as excinfo:
                await fetch_page(client=client, page_number=1, base_url=BASE_URL)
        assert excinfo.value.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_raises_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(NetworkError) as excinfo:
                await fetch_page(client=client, page_number=1, base_url=BASE_URL)
        assert excinfo.value.status_code is None

    @pytest.mark.asyncio
    async def test_invalid_json_raises_network_error(self):
        async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(NetworkError):
                await fetch_page(client=client, page_number=1, base_url=BASE_URL)

    @pytest.mark.asyncio
    async def test_non_object_payload_raises_network_error(self):
        async with _client(lambda request: httpx.Response(200, json=[1, 2])) as client:
            with pytest.raises(NetworkError):
                await fetch_page(client=client, page_number=1, base_url=BASE_URL)


class TestFetchCharacters:
    @pytest.mark.asyncio
    async def test_empty_ids_make_no_request(self):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[])

        async with _client(handler) as client:
            assert await fetch_characters(client=client, ids=[], base_url=BASE_URL) == []
        assert calls == []

    @pytest.mark.asyncio
    async def test_batch_request_joins_unique_ids(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[_character(1), _character(2)])

        async with _client(handler) as client:
            characters = await fetch_characters(client=client, ids=[1, 2, 1], base_url=BASE_URL)

        assert [c.id for c in characters] == [1, 2]
        assert seen[0].url.path == "/api/character/1,2"

    @pytest.mark.asyncio
    async def test_single_object_payload_becomes_list(self):
        async with _client(lambda request: httpx.Response(200, json=_character(7))) as client:
            characters = await fetch_characters(client=client, ids=[7], base_url=BASE_URL)
        assert [c.id for c in characters] == [7]

    @pytest.mark.asyncio
    async def test_404_yields_empty_list(self):
        async with _client(lambda request: httpx.Response(404)) as client:
            assert await fetch_characters(client=client, ids=[999], base_url=BASE_URL) == []

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        async with _client(lambda request: httpx.Response(503)) as client:
            with pytest.raises(NetworkError):
                await fetch_characters(client=client, ids=[1], base_url=BASE_URL)

    def test_unique_ids_keeps_first_seen_order(self):
        assert unique_ids([3, 1, 3, 2, 1]) == [3, 1, 2]


class TestConnectivity:
    @pytest.mark.asyncio
    async def test_any_response_means_online(self):
        methods: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(503)

        async with _client(handler) as client:
            assert await check_connectivity(client=client, url=BASE_URL) is True
        assert methods == ["HEAD"]

    @pytest.mark.asyncio
    async def test_transport_failure_means_offline(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        async with _client(handler) as client:
            assert await check_connectivity(client=client, url=BASE_URL) is False


class TestServiceInterfaces:
    def test_default_services_satisfy_protocols(self):
        services = build_default_app_services()
        assert isinstance(services, AppServices)
        assert isinstance(services.episode_api, DefaultEpisodeApiService)
        assert isinstance(services.episode_api, EpisodeApiService)
        assert isinstance(services.connectivity, DefaultConnectivityService)
        assert isinstance(services.connectivity, ConnectivityService)

    @pytest.mark.asyncio
    async def test_default_episode_api_delegates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"info": {"next": None}, "results": [_episode(1)]})

        async with _client(handler) as client:
            page = await DefaultEpisodeApiService().fetch_page(
                client=client, page_number=1, base_url=BASE_URL, timeout_seconds=5
            )
        assert [e.id for e in page.episodes] == [1]
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_default_connectivity_delegates(self):
        async with _client(lambda request: httpx.Response(200)) as client:
            assert await DefaultConnectivityService().is_connected(
                client=client, url=BASE_URL, timeout_seconds=1.0
            )
