from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

import httpx
import structlog

from acul_deploy.core.config import SCREEN_UPDATE_PAUSE_S
from acul_deploy.core.errors import ManagementApiError
from acul_deploy.headtags import render_config_json
from acul_deploy.http import HttpTransportError

log = structlog.get_logger(__name__)

_SUCCESS_STATUSES = frozenset({200, 204})


@dataclass(frozen=True, slots=True)
class ScreenTarget:
    prompt: str
    screen: str

    @property
    def label(self) -> str:
        return f"{self.prompt}/{self.screen}"

    @property
    def name(self) -> str:
        return self.screen if self.prompt == self.screen else self.label


def parse_screen_target(value: str) -> ScreenTarget:
    """
    "login-id" -> prompt and screen both "login-id";
    "signup/signup-password" -> explicit prompt and screen.
    """
    value = value.strip().strip("/")
    prompt, sep, screen = value.partition("/")
    if not prompt or (sep and not screen) or "/" in screen:
        raise ValueError(f"Invalid screen target: {value!r}")
    return ScreenTarget(prompt=prompt, screen=screen or prompt)


def management_base_url(domain: str) -> str:
    host = domain.strip()
    for scheme in ("https://", "http://"):
        if host.startswith(scheme):
            host = host[len(scheme) :]
    return f"https://{host.rstrip('/')}"


class ManagementClient:
    def __init__(self, *, client: httpx.Client, token: str) -> None:
        self._client = client
        self._token = token

    def rendering_path(self, target: ScreenTarget) -> str:
        return f"/api/v2/prompts/{target.prompt}/screen/{target.screen}/rendering"

    def update_screen_rendering(
        self, target: ScreenTarget, config: Mapping[str, Any]
    ) -> int:
        body = render_config_json(config).encode("utf-8")
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Content-Length": str(len(body)),
        }

        try:
            resp = self._client.request(
                "PATCH", self.rendering_path(target), content=body, headers=headers
            )
        except httpx.HTTPError as e:
            log.error("Request error", target=target.label, error=str(e))
            raise HttpTransportError(
                method="PATCH", url=self.rendering_path(target), error=e
            ) from e

        if resp.status_code not in _SUCCESS_STATUSES:
            log.error(
                "Screen update failed",
                target=target.label,
                status_code=resp.status_code,
                response=resp.text,
            )
            raise ManagementApiError(
                prompt=target.prompt,
                screen=target.screen,
                status_code=resp.status_code,
                body=resp.text,
            )

        log.info("Screen updated", target=target.label, status_code=resp.status_code)
        return resp.status_code


def update_screens(
    api: ManagementClient,
    targets: Sequence[ScreenTarget],
    config: Mapping[str, Any],
    *,
    pause_s: float = SCREEN_UPDATE_PAUSE_S,
    sleep: Callable[[float], None] = time.sleep,
) -> list[ScreenTarget]:
    """
    Update each screen in order, stopping at the first failure.
    """
    updated: list[ScreenTarget] = []
    for i, target in enumerate(targets):
        if i > 0:
            sleep(pause_s)
        api.update_screen_rendering(target, config)
        updated.append(target)
    return updated
