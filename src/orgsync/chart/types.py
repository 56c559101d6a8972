from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..errors import NotFoundError, ResolutionError


def github_team_name(team_id: str, prefix: str) -> str:
    return f"{prefix}{team_id.replace('_', '-')}"


@dataclass
class Employee:
    id: str
    name: str
    member_of: str
    github: str = ""


@dataclass
class Team:
    id: str
    name: str
    parent_id: str = ""
    description: str = ""
    tech_lead_id: str = ""
    product_lead_id: str = ""
    github: str = ""

    @property
    def is_root(self) -> bool:
        return not self.parent_id


@dataclass
class OrgChart:
    teams: List[Team] = field(default_factory=list)
    employees: List[Employee] = field(default_factory=list)
    teams_by_id: Dict[str, Team] = field(default_factory=dict, repr=False)
    employees_by_id: Dict[str, Employee] = field(default_factory=dict, repr=False)

    def organise(self) -> None:
        """
        Build the id indices and check that every employee belongs to a
        known team. Must run once after loading, before the chart is used.
        """
        self.teams_by_id = {t.id: t for t in self.teams}
        self.employees_by_id = {}
        for employee in self.employees:
            self.employees_by_id[employee.id] = employee
            if employee.member_of not in self.teams_by_id:
                raise ResolutionError(employee.member_of, employee.name)

    def assign_github_names(self, prefix: str) -> None:
        for team in self.teams:
            team.github = github_team_name(team.id, prefix)

    def team_of(self, employee: Employee) -> Team:
        return self.team_by_id(employee.member_of)

    def team_by_id(self, team_id: str) -> Team:
        team = self.teams_by_id.get(team_id)
        if team is None:
            raise NotFoundError(f"could not find org team {team_id}")
        return team

    def employee_by_id(self, employee_id: str) -> Employee:
        employee = self.employees_by_id.get(employee_id)
        if employee is None:
            raise NotFoundError(f"could not find employee {employee_id}")
        return employee

    def root_teams(self) -> List[Team]:
        return [t for t in self.teams if t.is_root]

    def parent_of(self, team: Team) -> Optional[Team]:
        if team.is_root:
            return None
        return self.team_by_id(team.parent_id)
