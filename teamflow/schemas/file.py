from pydantic import Field
from typing import Optional

from teamflow.schemas.common import CamelModel, InputModel, UTCDateTime


class FileCreate(InputModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    size: int = Field(ge=0)
    type: str
    project_id: int
    task_id: Optional[int] = None


class File(CamelModel):
    id: int
    name: str
    url: str
    size: int
    type: str
    project_id: int
    task_id: Optional[int] = None
    uploaded_by: int
    uploaded_at: UTCDateTime
