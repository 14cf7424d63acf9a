from pydantic import Field

from teamflow.schemas.common import CamelModel, InputModel, UTCDateTime
from teamflow.schemas.user import User


class MessageCreate(InputModel):
    content: str = Field(min_length=1)


class Message(CamelModel):
    id: int
    content: str
    team_id: int
    user_id: int
    created_at: UTCDateTime


class MessageWithUser(Message):
    user: User
