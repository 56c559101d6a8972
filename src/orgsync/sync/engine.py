from __future__ import annotations

from rich.console import Console

from ..chart.types import OrgChart
from ..errors import OrgSyncError, SyncError
from ..github.client import GithubClient
from ..github.state import GithubState
from .diff import github_teams_not_in_chart, teams_not_in_github
from .hierarchy import DeleteFailurePolicy, HierarchyReconciler
from .membership import plan_memberships, sync_team_members
from .results import SyncResult

console = Console()


def sync_teams(
    chart: OrgChart,
    state: GithubState,
    client: GithubClient,
    *,
    delete_failure: DeleteFailurePolicy = "propagate",
    verbose: bool = False,
) -> SyncResult:
    """
    Make the GitHub teams match the chart:
      1. remove prefixed GitHub teams the chart does not know
      2. remove chart root teams still in GitHub and forget the snapshot
      3. create missing teams, parents first
      4. plan members/maintainers per team
      5. grant the planned memberships

    The first failure stops the run with a SyncError whose `result` holds
    the progress made so far.
    """
    state.result = SyncResult()
    reconciler = HierarchyReconciler(chart, state, client, delete_failure=delete_failure)

    step = "removing stale teams"
    try:
        for gh_team in github_teams_not_in_chart(chart, state):
            reconciler.remove_team(gh_team)

        step = "resetting root teams"
        reconciler.reset_root_teams()

        step = "creating teams"
        for team in teams_not_in_github(chart, state):
            reconciler.create_team_if_missing(team.id)

        step = "planning memberships"
        plan = plan_memberships(chart, state)

        step = "syncing memberships"
        for membership in plan.values():
            sync_team_members(
                state, client, membership.team, membership.members, membership.maintainers, verbose=verbose
            )
    except OrgSyncError as exc:
        raise SyncError(f"{step}: {exc}", state.result) from exc

    return state.result
