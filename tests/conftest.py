"""Shared fixtures: settings without ambient env, and a SearXNG stand-in on httpx.MockTransport."""

import logging
from typing import Callable, Dict, List, Union

import httpx
import pytest

from searx_alfred.core.logger import ROOT_LOGGER
from searx_alfred.core.settings import Settings
from searx_alfred.search.http import HttpFetcher

BASE_URL = "https://searx.example.org"

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response], Exception]


class FakeSearx:
    """Routes requests by path; records every request it sees."""

    def __init__(self, routes: Dict[str, Route]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        # fresh copy so one route can answer several requests
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def fetcher(self) -> HttpFetcher:
        return HttpFetcher(httpx.Client(transport=httpx.MockTransport(self)))


@pytest.fixture
def make_settings(tmp_path) -> Callable[..., Settings]:
    def factory(**overrides) -> Settings:
        values = {
            "searxng_url": BASE_URL,
            "alfred_workflow_data": str(tmp_path / "data"),
            "alfred_workflow_version": "1.2.3",
            "alfred_version": "5.5",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def fake_searx() -> Callable[[Dict[str, Route]], FakeSearx]:
    return FakeSearx


@pytest.fixture(autouse=True)
def reset_package_logger():
    """The CLI binds a handler to the (captured) stderr; drop it between tests."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = True
