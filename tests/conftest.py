from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import httpx
import pytest
from acul_deploy.core.config import Settings, load_settings

DEPLOY_URL = "https://example.vercel.app"
AUTH0_DOMAIN = "tenant.eu.auth0.com"

INDEX_HTML = """<!doctype html>
<html>
  <head>
    <script type="module" crossorigin src="/assets/main.abc123.js"></script>
    <link rel="modulepreload" crossorigin href="/assets/shared/react-vendor.mno345.js">
    <link rel="modulepreload" crossorigin href="/assets/shared/vendor.ghi789.js">
    <link rel="stylesheet" crossorigin href="/assets/shared/style.def456.css">
  </head>
  <body><div id="root"></div></body>
</html>
"""


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for name in ("AUTH0_DOMAIN", "AUTH0_MGMT_TOKEN", "VERCEL_URL"):
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests.
    monkeypatch.chdir(tmp_path)
    load_settings.cache_clear()
    yield
    load_settings.cache_clear()


@pytest.fixture
def deploy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTH0_DOMAIN", AUTH0_DOMAIN)
    monkeypatch.setenv("AUTH0_MGMT_TOKEN", "mgmt-token")
    monkeypatch.setenv("VERCEL_URL", DEPLOY_URL + "/")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        auth0_domain=AUTH0_DOMAIN,
        auth0_mgmt_token="mgmt-token",
        vercel_url=DEPLOY_URL + "/",
        deployment_info_path=tmp_path / "deployment-info.json",
        build_dir=tmp_path / "dist" / "assets",
    )


@dataclass
class FakeServer:
    """
    Serves the deployed site and the Management API from one MockTransport.
    """

    html: str = INDEX_HTML
    probe_body: str | None = None
    patch_statuses: list[int] = field(default_factory=lambda: [200])
    patch_body: str = ""
    requests: list[httpx.Request] = field(default_factory=list)

    @property
    def patches(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "PATCH"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        path = request.url.path

        if host == "example.vercel.app":
            if path == "/":
                return httpx.Response(200, text=self.html)
            if path == "/screens/login-id/login-id/default.json":
                if self.probe_body is None:
                    return httpx.Response(404, text="not found")
                return httpx.Response(200, text=self.probe_body)
            return httpx.Response(404)

        if host == AUTH0_DOMAIN and request.method == "PATCH":
            idx = min(len(self.patches) - 1, len(self.patch_statuses) - 1)
            status = self.patch_statuses[idx]
            if status == 204:
                return httpx.Response(204)
            return httpx.Response(status, text=self.patch_body or json.dumps({}))

        return httpx.Response(500, text="unexpected request")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def no_sleep() -> Callable[[float], None]:
    calls: list[float] = []

    def _sleep(seconds: float) -> None:
        calls.append(seconds)

    _sleep.calls = calls  # type: ignore[attr-defined]
    return _sleep


@pytest.fixture
def make_build(tmp_path: Path) -> Callable[[list[str]], Path]:
    def _make(names: list[str]) -> Path:
        root = tmp_path / "dist" / "assets"
        root.mkdir(parents=True, exist_ok=True)
        for name in names:
            p = root / name
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text("// built\n")
        return root

    return _make
