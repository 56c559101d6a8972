from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from orgsync.chart.loader import build_chart
from orgsync.chart.types import OrgChart
from orgsync.errors import GithubApiError
from orgsync.github.models import GithubTeam, GithubUser, TeamParent
from orgsync.github.state import GithubState

PREFIX = "org-"


class FakeGithubClient:
    """Records every write call; ids are handed out from 100 upwards."""

    def __init__(self, fail_on: Optional[Dict[str, Any]] = None) -> None:
        self.calls: List[tuple] = []
        self.fail_on = fail_on or {}
        self._next_id = 100
        self._teams_by_id: Dict[int, GithubTeam] = {}

    def _maybe_fail(self, op: str, key: Any) -> None:
        if op in self.fail_on and self.fail_on[op] in (key, "*"):
            raise GithubApiError(f"{op} {key} failed", status_code=500)

    def create_team(self, org, name, description, parent_id, privacy="closed"):
        self._maybe_fail("create_team", name)
        self.calls.append(("create_team", name, parent_id, privacy))
        self._next_id += 1
        parent = None
        if parent_id is not None:
            p = self._teams_by_id[parent_id]
            parent = TeamParent(id=p.id, name=p.name)
        team = GithubTeam(id=self._next_id, name=name, description=description, privacy=privacy, parent=parent)
        self._teams_by_id[team.id] = team
        return team

    def edit_team(self, team_id, name, description, parent_id, privacy="closed"):
        self._maybe_fail("edit_team", name)
        self.calls.append(("edit_team", name, parent_id, privacy))
        parent = None
        if parent_id is not None:
            p = self._teams_by_id[parent_id]
            parent = TeamParent(id=p.id, name=p.name)
        team = GithubTeam(id=team_id, name=name, description=description, privacy=privacy, parent=parent)
        self._teams_by_id[team_id] = team
        return team

    def delete_team(self, team_id):
        self._maybe_fail("delete_team", team_id)
        self.calls.append(("delete_team", team_id))

    def add_team_membership(self, team_id, handle, role="member"):
        self._maybe_fail("add_team_membership", handle)
        self.calls.append(("add_team_membership", team_id, handle, role))

    def register(self, team: GithubTeam) -> GithubTeam:
        self._teams_by_id[team.id] = team
        return team

    def ops(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


def make_chart(teams: List[Dict[str, Any]], employees: List[Dict[str, Any]]) -> OrgChart:
    return build_chart({"teams": teams, "employees": employees}, PREFIX)


def make_state(
    teams: Optional[List[GithubTeam]] = None,
    logins: Optional[List[str]] = None,
    dry: bool = False,
) -> GithubState:
    state = GithubState(organisation="acme", team_prefix=PREFIX, dry=dry)
    for t in teams or []:
        state.add_team(t)
    state.add_members(GithubUser(id=i, login=login) for i, login in enumerate(logins or []))
    return state


@pytest.fixture
def client() -> FakeGithubClient:
    return FakeGithubClient()


@pytest.fixture
def simple_chart() -> OrgChart:
    return make_chart(
        teams=[
            {"id": "engineering", "name": "Engineering", "techLead": "e1"},
            {"id": "platform_team", "name": "Platform", "parent": "engineering", "productLead": "e2"},
        ],
        employees=[
            {"id": "e1", "name": "Ada", "github": "ada", "memberOf": "engineering"},
            {"id": "e2", "name": "Grace", "github": "grace", "memberOf": "platform_team"},
            {"id": "e3", "name": "Linus", "github": "", "memberOf": "platform_team"},
        ],
    )
