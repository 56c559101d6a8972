from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..chart.types import Employee
from ..github.models import GithubTeam


@dataclass
class SyncResult:
    removed_teams: List[GithubTeam] = field(default_factory=list)
    unable_to_create_membership: List[Employee] = field(default_factory=list)
    unable_to_create_maintainer: List[Employee] = field(default_factory=list)
    created_teams: List[GithubTeam] = field(default_factory=list)
    edited_teams: List[GithubTeam] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        def _employee(e: Employee) -> Dict[str, Any]:
            return {"id": e.id, "name": e.name, "member_of": e.member_of}

        return {
            "removed_teams": [t.name for t in self.removed_teams],
            "created_teams": [t.name for t in self.created_teams],
            "edited_teams": [t.name for t in self.edited_teams],
            "unable_to_create_membership": [_employee(e) for e in self.unable_to_create_membership],
            "unable_to_create_maintainer": [_employee(e) for e in self.unable_to_create_maintainer],
        }
