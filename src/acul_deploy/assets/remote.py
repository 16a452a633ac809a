from __future__ import annotations

import re

import httpx
import structlog

from acul_deploy.http import HttpFetchError, request_with_retries

from .hashes import ASSET_KEYS, AssetHashSet, camel_keys, validate_hashes

log = structlog.get_logger(__name__)

_HASH = r"([a-zA-Z0-9_-]+)"

HTML_PATTERNS: dict[str, re.Pattern[str]] = {
    "style": re.compile(rf"/assets/shared/style\.{_HASH}\.css"),
    "main": re.compile(rf"/assets/main\.{_HASH}\.js"),
    "login_id": re.compile(rf"/assets/login-id/index\.{_HASH}\.js"),
    "vendor": re.compile(rf"/assets/shared/vendor\.{_HASH}\.js"),
    "react_vendor": re.compile(rf"/assets/shared/react-vendor\.{_HASH}\.js"),
}

LOGIN_ID_PROBE_PATH = "/screens/login-id/login-id/default.json"
_LOGIN_ID_PROBE_RE = re.compile(rf"index\.{_HASH}\.js")

REMOTE_REQUIRED: tuple[str, ...] = ("style", "main", "vendor")

PREVIEW_CHARS = 500


def _root(base_url: str) -> str:
    return base_url.rstrip("/")


def fetch_deployed_html(
    client: httpx.Client, base_url: str, *, max_attempts: int = 1
) -> str:
    resp = request_with_retries(
        client, method="GET", url=f"{_root(base_url)}/", max_attempts=max_attempts
    )
    log.info("Fetched deployed index.html", url=str(resp.url), bytes=len(resp.content))
    return resp.text


def hashes_from_html(html: str) -> dict[str, str | None]:
    out: dict[str, str | None] = {}
    for key, pattern in HTML_PATTERNS.items():
        m = pattern.search(html)
        out[key] = m.group(1) if m else None
    return out


def probe_login_id_hash(client: httpx.Client, base_url: str) -> str | None:
    """
    Look for the login-id bundle hash in the screen's default settings file.

    The probe is best effort: a failure leaves the hash unresolved.
    """
    url = f"{_root(base_url)}{LOGIN_ID_PROBE_PATH}"
    try:
        resp = client.get(url)
    except httpx.HTTPError as e:
        log.warning("login-id probe failed", url=url, error=str(e))
        return None

    m = _LOGIN_ID_PROBE_RE.search(resp.text)
    return m.group(1) if m else None


def hashes_from_deployment(
    client: httpx.Client,
    base_url: str,
    *,
    required: tuple[str, ...] = REMOTE_REQUIRED,
    max_attempts: int = 1,
) -> AssetHashSet:
    try:
        html = fetch_deployed_html(client, base_url, max_attempts=max_attempts)
    except HttpFetchError as e:
        log.error("Failed to fetch deployed site", base_url=base_url, error=str(e))
        raise

    found = hashes_from_html(html)
    if not found["login_id"]:
        found["login_id"] = probe_login_id_hash(client, base_url)

    hashes = AssetHashSet(**found)

    optional_missing = [k for k in ASSET_KEYS if k not in required and not found[k]]
    if optional_missing:
        log.warning("Optional asset hashes not found", keys=camel_keys(optional_missing))

    preview = html[:PREVIEW_CHARS]
    if hashes.missing(required):
        log.error("Deployed markup preview", preview=preview)
    validate_hashes(hashes, required, preview=preview)

    log.info("Extracted hashes from deployment", **hashes.resolved())
    return hashes
