from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .sync.results import SyncResult


class OrgSyncError(Exception):
    pass


class ConfigError(OrgSyncError):
    pass


class ChartLoadError(OrgSyncError):
    pass


class ResolutionError(OrgSyncError):
    """An employee references a team that is not part of the chart."""

    def __init__(self, team_id: str, employee: str) -> None:
        super().__init__(f"could not find team {team_id} for member {employee}")
        self.team_id = team_id
        self.employee = employee


class NotFoundError(OrgSyncError):
    pass


class CyclicHierarchyError(OrgSyncError):
    def __init__(self, path: list[str]) -> None:
        super().__init__("team hierarchy contains a cycle: " + " -> ".join(path))
        self.path = path


class GithubApiError(OrgSyncError):
    def __init__(self, message: str, status_code: Optional[int] = None, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.path = path


class SyncError(OrgSyncError):
    """
    Raised when a sync run stops early. `result` holds whatever progress was
    made before the failure; nothing already applied is rolled back.
    """

    def __init__(self, message: str, result: "SyncResult") -> None:
        super().__init__(message)
        self.result = result
