from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from ..errors import GithubApiError
from .models import GithubTeam, GithubUser, TeamPrivacy, TeamRole

GITHUB_API_URL = "https://api.github.com"

M = TypeVar("M", bound=BaseModel)


@dataclass
class GithubClient:
    token: str
    base_url: str = GITHUB_API_URL
    page_size: int = 100
    timeout_s: int = 30

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
        }

    def _request(
        self,
        method: str,
        path_or_url: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        url = path_or_url if path_or_url.startswith("http") else f"{self.base_url.rstrip('/')}{path_or_url}"
        try:
            resp = requests.request(
                method,
                url,
                headers=self._headers(),
                params=params,
                json=json_body,
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            raise GithubApiError(f"{method} {path_or_url} failed: {exc}", path=path_or_url) from exc
        if resp.status_code >= 400:
            detail = ""
            try:
                payload = resp.json()
                detail = payload.get("message", "") if isinstance(payload, dict) else str(payload)[:200]
            except ValueError:
                detail = resp.text[:200]
            raise GithubApiError(
                f"{method} {path_or_url} returned {resp.status_code}: {detail}",
                status_code=resp.status_code,
                path=path_or_url,
            )
        return resp

    @staticmethod
    def _body(resp: requests.Response, method: str, path: str) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise GithubApiError(
                f"{method} {path} returned a body that is not JSON: {exc}",
                status_code=resp.status_code,
                path=path,
            ) from exc

    @staticmethod
    def _parse(model: Type[M], payload: Any, method: str, path: str) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise GithubApiError(f"{method} {path} returned an unexpected {model.__name__}: {exc}", path=path) from exc

    def _paginate(self, path: str) -> List[Dict[str, Any]]:
        """
        Collect every page of a list endpoint by following the Link
        header's rel="next" URL until it is gone.
        """
        items: List[Dict[str, Any]] = []
        next_url: Optional[str] = path
        params: Optional[Dict[str, Any]] = {"per_page": self.page_size}
        while next_url:
            resp = self._request("GET", next_url, params=params)
            page = self._body(resp, "GET", path) or []
            if not isinstance(page, list):
                raise GithubApiError(f"GET {path} returned a non-list page", status_code=resp.status_code, path=path)
            items.extend(page)
            next_url = (resp.links.get("next") or {}).get("url")
            # the next URL already carries per_page and page
            params = None
        return items

    # Read API

    def list_org_members(self, org: str) -> List[GithubUser]:
        path = f"/orgs/{org}/members"
        return [self._parse(GithubUser, u, "GET", path) for u in self._paginate(path)]

    def list_teams(self, org: str) -> List[GithubTeam]:
        path = f"/orgs/{org}/teams"
        return [self._parse(GithubTeam, t, "GET", path) for t in self._paginate(path)]

    # Write API

    def create_team(
        self,
        org: str,
        name: str,
        description: str,
        parent_id: Optional[int],
        privacy: TeamPrivacy = "closed",
    ) -> GithubTeam:
        body: Dict[str, Any] = {"name": name, "description": description, "privacy": privacy}
        if parent_id is not None:
            body["parent_team_id"] = parent_id
        path = f"/orgs/{org}/teams"
        resp = self._request("POST", path, json_body=body)
        return self._parse(GithubTeam, self._body(resp, "POST", path), "POST", path)

    def edit_team(
        self,
        team_id: int,
        name: str,
        description: str,
        parent_id: Optional[int],
        privacy: TeamPrivacy = "closed",
    ) -> GithubTeam:
        body = {"name": name, "description": description, "privacy": privacy, "parent_team_id": parent_id}
        path = f"/teams/{team_id}"
        resp = self._request("PATCH", path, json_body=body)
        return self._parse(GithubTeam, self._body(resp, "PATCH", path), "PATCH", path)

    def delete_team(self, team_id: int) -> None:
        self._request("DELETE", f"/teams/{team_id}")

    def add_team_membership(self, team_id: int, handle: str, role: TeamRole = "member") -> None:
        self._request("PUT", f"/teams/{team_id}/memberships/{handle}", json_body={"role": role})
