from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from rich.console import Console

from ..errors import ChartLoadError
from .types import Employee, OrgChart, Team

console = Console()

CHART_DOCUMENT_ID = "chart"


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v


class EmployeeRecord(_Record):
    id: str
    name: str = ""
    github: str = ""
    member_of: str = Field("", alias="memberof")

    def to_employee(self) -> Employee:
        return Employee(id=self.id, name=self.name or self.id, member_of=self.member_of, github=self.github.strip())


class TeamRecord(_Record):
    id: str
    name: str = ""
    parent: str = ""
    description: str = ""
    tech_lead: str = Field("", alias="techlead")
    product_lead: str = Field("", alias="productlead")

    def to_team(self) -> Team:
        return Team(
            id=self.id,
            name=self.name or self.id,
            parent_id=self.parent,
            description=self.description,
            tech_lead_id=self.tech_lead,
            product_lead_id=self.product_lead,
        )


class ChartDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    employees: List[EmployeeRecord] = Field(default_factory=list)
    teams: List[TeamRecord] = Field(default_factory=list)


def _lower_keys(obj: Any) -> Any:
    # Chart documents are written by hand and by other tools; key casing varies.
    if isinstance(obj, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_lower_keys(v) for v in obj]
    return obj


def _fetch_couch_document(base_url: str, timeout_s: int = 30) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}/{CHART_DOCUMENT_ID}"
    try:
        resp = requests.get(url, headers={"Accept": "application/json"}, timeout=timeout_s)
        resp.raise_for_status()
        return resp.json()
    except requests.RequestException as exc:
        raise ChartLoadError(f"Failed to fetch org chart from {url}: {exc}") from exc
    except ValueError as exc:
        raise ChartLoadError(f"Org chart at {url} is not valid JSON: {exc}") from exc


def _read_chart_file(path: Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Org chart file not found: {p}")
    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in (".yml", ".yaml"):
            return yaml.safe_load(text) or {}
        return json.loads(text)
    except (yaml.YAMLError, ValueError) as exc:
        raise ChartLoadError(f"Failed to parse org chart at {p}: {exc}") from exc


def load_chart_data(location: str | Path, timeout_s: int = 30) -> Dict[str, Any]:
    """
    Return the raw chart document.
      - http(s) URLs point at a CouchDB database holding a "chart" document
      - anything else is a local JSON or YAML file
    """
    loc = str(location)
    if loc.startswith(("http://", "https://")):
        return _fetch_couch_document(loc, timeout_s=timeout_s)
    return _read_chart_file(Path(loc))


def build_chart(data: Dict[str, Any], team_prefix: str) -> OrgChart:
    if not isinstance(data, dict):
        raise ChartLoadError("Org chart document should be an object with 'teams' and 'employees'.")
    try:
        doc = ChartDocument.model_validate(_lower_keys(data))
    except ValidationError as exc:
        raise ChartLoadError(f"Invalid org chart document: {exc}") from exc
    chart = OrgChart(
        teams=[t.to_team() for t in doc.teams],
        employees=[e.to_employee() for e in doc.employees],
    )
    chart.assign_github_names(team_prefix)
    chart.organise()
    return chart


def load_chart(location: str | Path, team_prefix: str, timeout_s: Optional[int] = None) -> OrgChart:
    data = load_chart_data(location, timeout_s=timeout_s or 30)
    chart = build_chart(data, team_prefix)
    console.print(f"[bold]Org chart:[/bold] {len(chart.teams)} teams, {len(chart.employees)} employees")
    return chart
