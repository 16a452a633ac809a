from __future__ import annotations

import httpx
import pytest
from acul_deploy.assets import remote
from acul_deploy.core.errors import MissingHashesError
from acul_deploy.http import HttpStatusError, make_http_client

BASE = "https://example.vercel.app/"


def test_hashes_from_html(server) -> None:
    found = remote.hashes_from_html(server.html)
    assert found == {
        "style": "def456",
        "main": "abc123",
        "login_id": None,
        "vendor": "ghi789",
        "react_vendor": "mno345",
    }


def test_hashes_from_deployment_probes_login_id(server) -> None:
    server.probe_body = '{"script": "/assets/login-id/index.jkl012.js"}'
    with make_http_client(transport=server.transport()) as client:
        got = remote.hashes_from_deployment(client, BASE)

    assert got.login_id == "jkl012"
    assert got.main == "abc123"
    assert [r.url.path for r in server.requests] == [
        "/",
        "/screens/login-id/login-id/default.json",
    ]


def test_login_id_from_html_skips_probe(server) -> None:
    server.html += '<script src="/assets/login-id/index.fromhtml.js"></script>'
    with make_http_client(transport=server.transport()) as client:
        got = remote.hashes_from_deployment(client, BASE)

    assert got.login_id == "fromhtml"
    assert [r.url.path for r in server.requests] == ["/"]


def test_probe_failure_is_tolerated(server) -> None:
    with make_http_client(transport=server.transport()) as client:
        got = remote.hashes_from_deployment(client, BASE)
    assert got.login_id is None

    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with make_http_client(transport=httpx.MockTransport(_refuse)) as client:
        assert remote.probe_login_id_hash(client, BASE) is None


def test_missing_required_hashes_carry_preview(server) -> None:
    server.html = "<html>" + "x" * 1000 + "</html>"
    with make_http_client(transport=server.transport()) as client:
        with pytest.raises(MissingHashesError) as ei:
            remote.hashes_from_deployment(client, BASE)

    assert ei.value.missing == ("style", "main", "vendor")
    assert ei.value.preview is not None
    assert len(ei.value.preview) == remote.PREVIEW_CHARS
    assert ei.value.preview.startswith("<html>")


def test_fetch_error_status_is_fatal() -> None:
    transport = httpx.MockTransport(lambda r: httpx.Response(503, text="down"))
    with make_http_client(transport=transport) as client:
        with pytest.raises(HttpStatusError) as ei:
            remote.fetch_deployed_html(client, BASE)
    assert ei.value.status_code == 503
