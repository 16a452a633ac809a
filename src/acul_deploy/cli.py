from __future__ import annotations

import argparse
from pathlib import Path

import httpx
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from acul_deploy.assets.hashes import AssetHashSet
from acul_deploy.core import (
    ConfigError,
    DeployError,
    ILogger,
    Settings,
    bind,
    clear_bindings,
    configure_logging,
    get_logger,
    load_settings,
    new_run_id,
)
from acul_deploy.runner import DeployResult, resolve_hashes, run_deploy

console = Console()


def _add_source_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--source",
        choices=("remote", "build"),
        default="remote",
        help="Read hashes from the deployed site (default) or a local build directory.",
    )
    p.add_argument(
        "--build-dir",
        type=Path,
        default=None,
        help="Build output directory for --source build. Default: ACUL_DEPLOY_BUILD_DIR.",
    )


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="acul-deploy")
    sub = p.add_subparsers(dest="cmd", required=True)

    deploy = sub.add_parser(
        "deploy", help="Push the deployed bundle's head tags to the ACUL screens"
    )
    _add_source_args(deploy)
    deploy.add_argument(
        "--screen",
        action="append",
        dest="screens",
        help="Screen to update, as <screen> or <prompt>/<screen> (repeatable). "
        "Default: ACUL_DEPLOY_SCREENS.",
    )
    deploy.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve hashes and print the configuration without updating screens.",
    )

    hashes = sub.add_parser("hashes", help="Print the resolved asset hashes")
    _add_source_args(hashes)

    return p


def _hash_table(hashes: AssetHashSet) -> Table:
    tbl = Table(title="Asset hashes", show_header=True, box=None)
    tbl.add_column("asset")
    tbl.add_column("hash")
    for key, value in hashes.to_json_dict().items():
        tbl.add_row(key, value or "[yellow]-[/yellow]")
    return tbl


def _print_result(result: DeployResult, *, dry_run: bool) -> None:
    console.print(_hash_table(result.hashes))
    console.print(Panel.fit(JSON.from_data(result.config), title="Configuration"))

    tbl = Table(title="Result", show_header=True, box=None)
    tbl.add_row("status", "[cyan]dry-run[/cyan]" if dry_run else "[green]ok[/green]")
    tbl.add_row("screens", ", ".join(t.label for t in result.screens_updated) or "-")
    if result.record_path is not None:
        tbl.add_row("record", str(result.record_path))
    console.print(tbl)


def _fail(log: ILogger, e: Exception) -> int:
    log.error("Deployment failed", error=str(e), error_type=type(e).__name__)
    console.print(Text.assemble(("Deployment failed: ", "bold red"), str(e)))
    return 1


def _run(
    args: argparse.Namespace,
    s: Settings,
    log: ILogger,
    *,
    transport: httpx.BaseTransport | None,
) -> int:
    try:
        if args.cmd == "hashes":
            if args.source == "remote" and not s.vercel_url:
                raise ConfigError(["VERCEL_URL"])
            hashes = resolve_hashes(
                s,
                source=args.source,
                base_url=s.vercel_url,
                build_dir=args.build_dir,
                transport=transport,
            )
            console.print(_hash_table(hashes))
            return 0

        result = run_deploy(
            s,
            source=args.source,
            build_dir=args.build_dir,
            screens=args.screens,
            dry_run=args.dry_run,
            transport=transport,
            logger=log,
        )
    except (DeployError, ValueError) as e:
        return _fail(log, e)

    _print_result(result, dry_run=args.dry_run)
    return 0


def main(
    argv: list[str] | None = None, *, transport: httpx.BaseTransport | None = None
) -> int:
    args = _build_parser().parse_args(argv)

    # Settings errors surface before logging is configured from them.
    try:
        s = load_settings()
    except ConfigError as e:
        configure_logging()
        return _fail(get_logger("acul_deploy"), e)

    configure_logging(level=s.log_level, fmt=s.log_format)
    log = get_logger("acul_deploy")

    run_id = new_run_id()
    bind(run_id=run_id, command=args.cmd)

    console.print(
        Panel.fit(
            Text(f"acul-deploy - {args.cmd}\nrun_id={run_id}", style="bold"),
            title="Run",
        )
    )

    try:
        return _run(args, s, log, transport=transport)
    finally:
        clear_bindings()


if __name__ == "__main__":
    raise SystemExit(main())
