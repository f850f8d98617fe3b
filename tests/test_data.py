"""Tests for wren.data — scoped and privileged data-store clients."""

import httpx
import pytest

from wren.config import AppConfig
from wren.data import DataAccess, DataAccessConfig
from wren.errors import ConfigurationError


class Recorder:
    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(200, json=[])


def _data(recorder: Recorder, service_key: str = "") -> DataAccess:
    config = DataAccessConfig(url="https://data.example.test", anon_key="anon", service_key=service_key)
    return DataAccess(config, transport=httpx.MockTransport(recorder))


class TestDataAccess:
    def test_url_required(self) -> None:
        with pytest.raises(ConfigurationError, match="url is required"):
            DataAccess(DataAccessConfig(url="", anon_key="anon"))

    def test_from_app_config(self) -> None:
        assert DataAccess.from_app_config(AppConfig()) is None
        data = DataAccess.from_app_config(
            AppConfig(data_url="https://data.example.test", data_anon_key="anon", data_service_key="svc")
        )
        assert data is not None
        assert data.has_admin
        assert data.config.anon_key == "anon"

    async def test_scoped_client_carries_caller_token(self) -> None:
        recorder = Recorder()
        async with _data(recorder).scoped("caller-token") as db:
            await db.get("/rest/v1/items", params={"select": "*"})
        request = recorder.requests[0]
        assert request.url.host == "data.example.test"
        assert request.url.path == "/rest/v1/items"
        assert request.url.params["select"] == "*"
        assert request.headers["authorization"] == "Bearer caller-token"
        assert request.headers["apikey"] == "anon"

    async def test_admin_client_uses_service_key(self) -> None:
        recorder = Recorder()
        data = _data(recorder, service_key="svc")
        await data.admin.get("/rest/v1/items")
        assert recorder.requests[0].headers["authorization"] == "Bearer svc"
        assert recorder.requests[0].headers["apikey"] == "svc"
        await data.aclose()

    async def test_admin_client_shared_until_closed(self) -> None:
        data = _data(Recorder(), service_key="svc")
        admin = data.admin
        assert data.admin is admin
        await data.aclose()
        assert admin.is_closed
        assert data.admin is not admin
        await data.aclose()

    def test_admin_without_service_key(self) -> None:
        data = _data(Recorder())
        assert not data.has_admin
        with pytest.raises(ConfigurationError, match="service key"):
            data.admin
