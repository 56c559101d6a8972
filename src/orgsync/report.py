from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Dict, Optional

from rich.console import Console

from .chart.types import OrgChart
from .sync.diff import PreflightReport
from .sync.results import SyncResult

console = Console()


def print_preflight(report: PreflightReport) -> None:
    for m in report.github_members_not_in_chart:
        console.print(f"github user {m.login} not found in orgchart")
    for e in report.employees_not_in_github:
        console.print(f"employee {e.name} ({e.github}) not found in github, will be added")
    for t in report.github_teams_not_in_chart:
        console.print(f"github team {t.name} not found in orgchart, will be removed")
    for t in report.teams_not_in_github:
        console.print(f"team {t.name} ({t.github}) not found in github, will be added")


def print_result(result: SyncResult, chart: OrgChart) -> None:
    for team in result.removed_teams:
        console.print(f"removed {team.name} from github")
    for e in result.unable_to_create_membership:
        console.print(
            f"[yellow]unable to add member {e.name} to {chart.team_of(e).name} team, github handle not provided[/yellow]"
        )
    for e in result.unable_to_create_maintainer:
        console.print(
            f"[yellow]unable to add maintainer {e.name} to {chart.team_of(e).name} team, github handle not provided[/yellow]"
        )
    console.print(
        f"[bold]Teams:[/bold] created={len(result.created_teams)} "
        f"edited={len(result.edited_teams)} removed={len(result.removed_teams)}"
    )


def build_run_report(
    report: PreflightReport,
    result: Optional[SyncResult],
    *,
    organisation: str,
    dry_run: bool,
    error: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "organisation": organisation,
        "dry_run": dry_run,
        "created_at": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "status": "failed" if error else "completed",
        "error": error,
        "preflight": {
            "github_members_not_in_chart": [m.login for m in report.github_members_not_in_chart],
            "employees_not_in_github": [e.github for e in report.employees_not_in_github],
            "github_teams_not_in_chart": [t.name for t in report.github_teams_not_in_chart],
            "teams_not_in_github": [t.github for t in report.teams_not_in_github],
        },
        "result": result.to_dict() if result else None,
    }


def write_run_report(path: Path, payload: Dict[str, Any]) -> None:
    """
    Write the run report next to its final name, then rename it into place
    so a scheduler picking up reports never reads a partial one.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with NamedTemporaryFile("w", encoding="utf-8", dir=path.parent, prefix=".orgsync-", suffix=".json", delete=False) as tmp:
        json.dump(payload, tmp, ensure_ascii=False, indent=2, sort_keys=True)
        tmp.write("\n")
    Path(tmp.name).replace(path)
    console.print(f"[bold]Report:[/bold] {path}")
