from __future__ import annotations

from typing import Dict, List, Literal, Optional

from rich.console import Console

from ..chart.types import OrgChart, Team
from ..errors import CyclicHierarchyError, GithubApiError
from ..github.client import GithubClient
from ..github.models import GithubTeam
from ..github.state import GithubState

console = Console()

DeleteFailurePolicy = Literal["propagate", "ignore"]
DELETE_FAILURE_POLICIES = ("propagate", "ignore")

TEAM_PRIVACY = "closed"


class HierarchyReconciler:
    """
    Brings the snapshot's teams in line with the chart's team tree.

    Teams are created lazily, parents first: creating a team walks up its
    parent chain and creates whatever is missing on the way, so no separate
    topological ordering is needed. Results are cached per team id for the
    lifetime of the reconciler (or until the root reset clears the snapshot).
    """

    def __init__(
        self,
        chart: OrgChart,
        state: GithubState,
        client: GithubClient,
        delete_failure: DeleteFailurePolicy = "propagate",
    ) -> None:
        if delete_failure not in DELETE_FAILURE_POLICIES:
            raise ValueError(f"Unknown delete failure policy: {delete_failure}")
        self.chart = chart
        self.state = state
        self.client = client
        self.delete_failure = delete_failure
        self._resolved: Dict[str, GithubTeam] = {}
        self._path: List[str] = []

    @property
    def _tag(self) -> str:
        return " [dim](dry)[/dim]" if self.state.dry else ""

    def create_team_if_missing(self, team_id: str) -> GithubTeam:
        cached = self._resolved.get(team_id)
        if cached is not None and self.state.teams.get(cached.name) is cached:
            return cached
        if team_id in self._path:
            raise CyclicHierarchyError(self._path[self._path.index(team_id):] + [team_id])

        team = self.chart.team_by_id(team_id)
        self._path.append(team_id)
        try:
            gh_team = self._ensure(team)
        finally:
            self._path.pop()
        self._resolved[team_id] = gh_team
        return gh_team

    def _ensure(self, team: Team) -> GithubTeam:
        parent = self.chart.parent_of(team)
        expected_parent = parent.github if parent else None

        existing = self.state.teams.get(team.github)
        if existing is not None:
            if existing.parent_name == expected_parent:
                return existing
            parent_gh = self.create_team_if_missing(parent.id) if parent else None
            return self._edit(existing, team, parent_gh)

        parent_gh = self.create_team_if_missing(parent.id) if parent else None
        return self._create(team, parent_gh)

    def _create(self, team: Team, parent_gh: Optional[GithubTeam]) -> GithubTeam:
        if self.state.dry:
            created = GithubTeam(
                name=team.github,
                description=team.description,
                privacy=TEAM_PRIVACY,
                parent=parent_gh.as_parent() if parent_gh else None,
            )
        else:
            created = self.client.create_team(
                self.state.organisation,
                team.github,
                team.description,
                parent_gh.id if parent_gh else None,
                TEAM_PRIVACY,
            )
        self.state.add_team(created)
        self.state.result.created_teams.append(created)
        console.print(f"[green]created team[/green] {created.name}{self._tag}")
        return created

    def _edit(self, existing: GithubTeam, team: Team, parent_gh: Optional[GithubTeam]) -> GithubTeam:
        new_parent = parent_gh.as_parent() if parent_gh else None
        if self.state.dry:
            edited = existing.model_copy(
                update={"description": team.description, "privacy": TEAM_PRIVACY, "parent": new_parent}
            )
        else:
            edited = self.client.edit_team(
                existing.id,
                team.github,
                team.description,
                parent_gh.id if parent_gh else None,
                TEAM_PRIVACY,
            )
        self.state.add_team(edited)
        self.state.result.edited_teams.append(edited)
        console.print(
            f"[cyan]re-parented team[/cyan] {edited.name}: "
            f"{existing.parent_name or '(root)'} -> {new_parent.name if new_parent else '(root)'}{self._tag}"
        )
        return edited

    def remove_team(self, gh_team: GithubTeam) -> None:
        if not self.state.dry:
            try:
                self.client.delete_team(gh_team.id)
            except GithubApiError as exc:
                if self.delete_failure == "propagate":
                    raise
                console.print(f"[yellow]Ignoring failed delete of {gh_team.name}:[/yellow] {exc}")
        self.state.result.removed_teams.append(gh_team)
        self.state.forget_team(gh_team)

    def reset_root_teams(self) -> List[GithubTeam]:
        """
        Remove every chart root team that already exists in GitHub and then
        forget the whole snapshot, so every subtree gets recreated from the
        chart. This happens even when the root team is unchanged.
        """
        present = [self.state.teams[t.github] for t in self.chart.root_teams() if t.github in self.state.teams]
        for gh_team in present:
            self.remove_team(gh_team)
        if present:
            self.state.teams.clear()
            self._resolved.clear()
        return present
