from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from rich.console import Console

from ..sync.results import SyncResult
from .client import GithubClient
from .models import GithubTeam, GithubUser

console = Console()


@dataclass
class GithubState:
    """
    Snapshot of one organisation's prefixed teams and its members, taken at
    the start of a run. `teams` is mutated as the run creates, edits and
    removes teams; `members` is never touched after loading.
    """

    organisation: str
    team_prefix: str
    teams: Dict[str, GithubTeam] = field(default_factory=dict)
    members: List[GithubUser] = field(default_factory=list)
    dry: bool = False
    result: SyncResult = field(default_factory=SyncResult)

    def add_team(self, team: GithubTeam) -> None:
        self.teams[team.name] = team

    def add_members(self, members: Iterable[GithubUser]) -> None:
        self.members.extend(members)

    def forget_team(self, team: GithubTeam) -> None:
        self.teams.pop(team.name, None)


def load_github_state(client: GithubClient, organisation: str, team_prefix: str, dry: bool = False) -> GithubState:
    state = GithubState(organisation=organisation, team_prefix=team_prefix, dry=dry)
    state.add_members(client.list_org_members(organisation))
    all_teams = client.list_teams(organisation)
    for team in all_teams:
        if team.name.startswith(team_prefix):
            state.add_team(team)
    console.print(
        f"[bold]GitHub {organisation}:[/bold] {len(state.members)} members, "
        f"{len(state.teams)} of {len(all_teams)} teams match prefix '{team_prefix}'"
    )
    return state
