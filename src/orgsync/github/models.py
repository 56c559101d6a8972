from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

TeamPrivacy = Literal["secret", "closed"]
TeamRole = Literal["member", "maintainer"]


class TeamParent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str
    slug: Optional[str] = None


class GithubTeam(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # None for placeholder teams fabricated during a dry run
    id: Optional[int] = None
    name: str
    slug: Optional[str] = None
    description: Optional[str] = None
    privacy: Optional[str] = None
    parent: Optional[TeamParent] = None

    @property
    def parent_name(self) -> Optional[str]:
        return self.parent.name if self.parent else None

    def as_parent(self) -> TeamParent:
        return TeamParent(id=self.id, name=self.name, slug=self.slug)


class GithubUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    login: str
