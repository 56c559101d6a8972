from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv
from rich.console import Console

from .chart.loader import load_chart
from .chart.types import OrgChart
from .config import DEFAULT_TEAM_PREFIX, SyncConfig, load_config
from .errors import ConfigError, OrgSyncError, SyncError
from .github.client import GithubClient
from .github.state import GithubState, load_github_state
from .report import build_run_report, print_preflight, print_result, write_run_report
from .sync.diff import preflight
from .sync.engine import sync_teams

load_dotenv()  # pick up GITHUB_TOKEN and friends from .env if present
console = Console()


def _load_config_or_exit(args: argparse.Namespace) -> SyncConfig:
    overrides: Dict[str, Any] = {
        "data_url": args.data_url,
        "github_token": args.github_token,
        "github_org": args.github_org,
        "team_prefix": args.github_team_prefix,
        "dry_run": True if getattr(args, "dry_run", False) else None,
        "delete_failure": getattr(args, "delete_failure", None),
    }
    try:
        cfg = load_config(Path(args.config) if args.config else None, overrides=overrides)
        cfg.validate()
        return cfg
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)
    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {e}")
        sys.exit(2)


def _load_inputs(cfg: SyncConfig) -> Tuple[OrgChart, GithubClient, GithubState]:
    chart = load_chart(cfg.data_url, cfg.team_prefix, timeout_s=cfg.timeout_s)
    client = GithubClient(
        token=cfg.github_token,
        base_url=cfg.api_url,
        page_size=cfg.page_size,
        timeout_s=cfg.timeout_s,
    )
    state = load_github_state(client, cfg.github_org, cfg.team_prefix, dry=cfg.dry_run)
    return chart, client, state


def cmd_diff(args: argparse.Namespace) -> int:
    cfg = _load_config_or_exit(args)
    try:
        chart, _, state = _load_inputs(cfg)
    except OrgSyncError as e:
        console.print(f"[red]Failed to load data:[/red] {e}")
        return 1
    print_preflight(preflight(chart, state))
    return 0


def cmd_gh_sync(args: argparse.Namespace) -> int:
    cfg = _load_config_or_exit(args)
    try:
        chart, client, state = _load_inputs(cfg)
    except OrgSyncError as e:
        console.print(f"[red]Failed to load data:[/red] {e}")
        return 1

    if state.dry:
        console.print("[bold yellow]running in DRY mode[/bold yellow]")

    report = preflight(chart, state)
    print_preflight(report)

    error: Optional[str] = None
    try:
        result = sync_teams(chart, state, client, delete_failure=cfg.delete_failure, verbose=args.verbose)
    except SyncError as e:
        result = e.result
        error = str(e)
        console.print(f"[red]Sync failed:[/red] {e}")

    print_result(result, chart)

    if args.output_json:
        payload = build_run_report(report, result, organisation=state.organisation, dry_run=state.dry, error=error)
        write_run_report(Path(args.output_json), payload)

    return 1 if error else 0


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=str, default=None, help="Path to an optional YAML config file")
    p.add_argument("--data-url", type=str, help="Org chart location: CouchDB database URL or JSON/YAML file")
    p.add_argument("--github-token", type=str, help="GitHub token (default: $GITHUB_TOKEN)")
    p.add_argument("--github-org", type=str, help="GitHub organisation to sync")
    p.add_argument(
        "--github-team-prefix",
        type=str,
        default=None,
        help=f"Prefix of the GitHub teams managed by this tool (default: {DEFAULT_TEAM_PREFIX})",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="orgsync",
        description="Org chart management: mirror org chart teams into GitHub.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_sync = sub.add_parser("gh-sync", help="Sync GitHub teams and memberships with the org chart")
    _add_common_args(p_sync)
    p_sync.add_argument("--dry-run", action="store_true", help="Report what would change without writing to GitHub")
    p_sync.add_argument(
        "--delete-failure",
        choices=["propagate", "ignore"],
        default=None,
        help="What to do when deleting a team fails (default: propagate)",
    )
    p_sync.add_argument("--output-json", type=str, help="Write a JSON run report to this path")
    p_sync.add_argument("--verbose", action="store_true", help="Print every membership grant")
    p_sync.set_defaults(func=cmd_gh_sync)

    p_diff = sub.add_parser("diff", help="Show differences between the org chart and GitHub without syncing")
    _add_common_args(p_diff)
    p_diff.set_defaults(func=cmd_diff)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except SystemExit:
        raise
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 2
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
