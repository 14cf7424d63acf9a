from pydantic import Field
from typing import Annotated, Optional

from teamflow.models.project import DEFAULT_PROJECT_COLOR
from teamflow.schemas.common import CamelModel, InputModel, UpdateModel, UTCDateTime

HexColor = Annotated[str, Field(pattern=r"^#[0-9A-Fa-f]{6}$")]


class ProjectCreate(InputModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    team_id: int
    color: HexColor = DEFAULT_PROJECT_COLOR
    start_date: UTCDateTime
    due_date: Optional[UTCDateTime] = None


# A project stays with the team it was created in
class ProjectUpdate(UpdateModel):
    not_nullable = ("name", "color", "start_date")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    color: Optional[HexColor] = None
    start_date: Optional[UTCDateTime] = None
    due_date: Optional[UTCDateTime] = None


class Project(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    team_id: int
    color: str = DEFAULT_PROJECT_COLOR
    start_date: UTCDateTime
    due_date: Optional[UTCDateTime] = None
