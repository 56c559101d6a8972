from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..chart.types import Employee, OrgChart, Team
from ..github.models import GithubTeam, GithubUser
from ..github.state import GithubState

# Inputs are a few hundred entries at most; plain nested scans keep the
# input ordering of each side.


def github_members_not_in_chart(chart: OrgChart, state: GithubState) -> List[GithubUser]:
    return [m for m in state.members if not any(e.github == m.login for e in chart.employees)]


def employees_not_in_github(chart: OrgChart, state: GithubState) -> List[Employee]:
    # employees without a handle are "not linked yet", reported separately
    return [
        e
        for e in chart.employees
        if e.github and not any(e.github == m.login for m in state.members)
    ]


def github_teams_not_in_chart(chart: OrgChart, state: GithubState) -> List[GithubTeam]:
    return [t for t in state.teams.values() if not any(team.github == t.name for team in chart.teams)]


def teams_not_in_github(chart: OrgChart, state: GithubState) -> List[Team]:
    return [t for t in chart.teams if not any(t.github == gh.name for gh in state.teams.values())]


@dataclass
class PreflightReport:
    github_members_not_in_chart: List[GithubUser]
    employees_not_in_github: List[Employee]
    github_teams_not_in_chart: List[GithubTeam]
    teams_not_in_github: List[Team]


def preflight(chart: OrgChart, state: GithubState) -> PreflightReport:
    return PreflightReport(
        github_members_not_in_chart=github_members_not_in_chart(chart, state),
        employees_not_in_github=employees_not_in_github(chart, state),
        github_teams_not_in_chart=github_teams_not_in_chart(chart, state),
        teams_not_in_github=teams_not_in_github(chart, state),
    )
