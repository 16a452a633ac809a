from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Literal, Sequence

import httpx

from acul_deploy.assets.hashes import AssetHashSet, hashes_from_build
from acul_deploy.assets.remote import hashes_from_deployment
from acul_deploy.core import (
    ILogger,
    Settings,
    get_logger,
    monotonic_ms,
    require_deploy_env,
)
from acul_deploy.headtags import build_config, render_config_json
from acul_deploy.http import make_http_client
from acul_deploy.management import (
    ManagementClient,
    ScreenTarget,
    management_base_url,
    parse_screen_target,
    update_screens,
)
from acul_deploy.record import DeploymentRecord, write_deployment_record

HashSource = Literal["remote", "build"]


@dataclass(slots=True)
class DeployResult:
    hashes: AssetHashSet
    config: dict[str, Any]
    screens_updated: list[ScreenTarget] = field(default_factory=list)
    record_path: Path | None = None
    duration_ms: int = 0


def resolve_hashes(
    settings: Settings,
    *,
    source: HashSource,
    base_url: str | None = None,
    build_dir: Path | None = None,
    transport: httpx.BaseTransport | None = None,
) -> AssetHashSet:
    if source == "build":
        return hashes_from_build(build_dir or settings.build_dir)

    if not base_url:
        raise ValueError("remote hash source requires a base URL")
    with make_http_client(transport=transport) as client:
        return hashes_from_deployment(
            client, base_url, max_attempts=settings.fetch_max_attempts
        )


def run_deploy(
    settings: Settings,
    *,
    source: HashSource = "remote",
    build_dir: Path | None = None,
    screens: Sequence[str] | None = None,
    dry_run: bool = False,
    transport: httpx.BaseTransport | None = None,
    sleep: Callable[[float], None] = time.sleep,
    logger: ILogger | None = None,
) -> DeployResult:
    """
    validate-env -> extract hashes -> build config -> PATCH each screen ->
    write the deployment record.

    Any failure raises; nothing is retried or resumed.
    """
    log = logger or get_logger("acul_deploy.runner")
    t0 = monotonic_ms()

    env = require_deploy_env(settings)
    targets = [parse_screen_target(s) for s in (screens or settings.screens)]
    if not targets:
        raise ValueError("No screens selected")

    log.info(
        "Starting ACUL configuration update",
        domain=env.domain,
        base_url=env.base_url,
        source=source,
        screens=[t.label for t in targets],
    )

    hashes = resolve_hashes(
        settings,
        source=source,
        base_url=env.base_url,
        build_dir=build_dir,
        transport=transport,
    )
    config = build_config(hashes, env.base_url)
    result = DeployResult(hashes=hashes, config=config)
    log.info("Configuration to be applied", body=render_config_json(config))

    if dry_run:
        log.info("Dry run, skipping screen updates", head_tags=len(config["head_tags"]))
        result.duration_ms = monotonic_ms() - t0
        return result

    log.info("Updating screens", count=len(targets))
    with make_http_client(
        base_url=management_base_url(env.domain), transport=transport
    ) as client:
        api = ManagementClient(client=client, token=env.token)
        result.screens_updated = update_screens(api, targets, config, sleep=sleep)

    record = DeploymentRecord(
        vercel_url=env.base_url,
        hashes=hashes,
        screens_updated=[t.name for t in result.screens_updated],
    )
    result.record_path = write_deployment_record(settings.deployment_info_path, record)
    result.duration_ms = monotonic_ms() - t0

    log.info(
        "All screens updated",
        screens=len(result.screens_updated),
        record=str(result.record_path),
        duration_ms=result.duration_ms,
    )
    return result
