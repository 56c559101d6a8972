from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from rich.console import Console

from ..chart.types import Employee, OrgChart, Team
from ..errors import NotFoundError
from ..github.client import GithubClient
from ..github.models import GithubTeam
from ..github.state import GithubState

console = Console()


@dataclass
class TeamMembership:
    team: GithubTeam
    members: List[str] = field(default_factory=list)
    maintainers: List[str] = field(default_factory=list)

    def add_member(self, handle: str) -> None:
        if handle not in self.members:
            self.members.append(handle)

    def add_maintainer(self, handle: str) -> None:
        if handle not in self.maintainers:
            self.maintainers.append(handle)


def _entry_for(plan: Dict[str, TeamMembership], state: GithubState, team: Team) -> TeamMembership:
    gh_team = state.teams.get(team.github)
    if gh_team is None:
        raise NotFoundError(f"team {team.github} not found in github")
    entry = plan.get(gh_team.name)
    if entry is None:
        entry = TeamMembership(team=gh_team)
        plan[gh_team.name] = entry
    return entry


def _add_lead(entry: TeamMembership, state: GithubState, lead: Employee) -> None:
    if not lead.github:
        state.result.unable_to_create_maintainer.append(lead)
        return
    entry.add_maintainer(lead.github)


def plan_memberships(chart: OrgChart, state: GithubState) -> Dict[str, TeamMembership]:
    """
    Desired members and maintainers per GitHub team, keyed by team name.

    Employees and leads without a GitHub handle are recorded on the run
    result instead of failing the plan. Every chart team gets an entry,
    including teams with no direct employees.
    """
    plan: Dict[str, TeamMembership] = {}

    for employee in chart.employees:
        if not employee.github:
            state.result.unable_to_create_membership.append(employee)
            continue
        _entry_for(plan, state, chart.team_of(employee)).add_member(employee.github)

    for team in chart.teams:
        entry = _entry_for(plan, state, team)
        if team.tech_lead_id:
            try:
                tech_lead = chart.employee_by_id(team.tech_lead_id)
            except NotFoundError as exc:
                raise NotFoundError(f"could not find tech lead {team.tech_lead_id} for team {team.name}") from exc
            _add_lead(entry, state, tech_lead)
        if team.product_lead_id:
            try:
                product_lead = chart.employee_by_id(team.product_lead_id)
            except NotFoundError as exc:
                raise NotFoundError(
                    f"could not find product lead {team.product_lead_id} for team {team.name}"
                ) from exc
            _add_lead(entry, state, product_lead)

    return plan


def sync_team_members(
    state: GithubState,
    client: GithubClient,
    team: GithubTeam,
    members: List[str],
    maintainers: List[str],
    verbose: bool = False,
) -> None:
    """Grant memberships additively; existing memberships are never revoked."""
    console.print(f"syncing members and maintainers for {team.name}")
    if state.dry:
        return
    for handle in members:
        if verbose:
            console.print(f"[dim]adding {handle} as member to {team.name}[/dim]")
        client.add_team_membership(team.id, handle, "member")
    for handle in maintainers:
        if verbose:
            console.print(f"[dim]adding {handle} as maintainer to {team.name}[/dim]")
        client.add_team_membership(team.id, handle, "maintainer")
