from typing import Any, List

from fastapi import APIRouter, Depends, status

from teamflow.api.deps import get_current_user, get_storage
from teamflow.core.exceptions import NotFoundError
from teamflow.schemas.common import MessageResponse
from teamflow.schemas.message import MessageCreate, MessageWithUser
from teamflow.schemas.user import UserInDB
from teamflow.services.access import get_team_or_404, require_author_or_admin, require_membership
from teamflow.storage.base import Storage

router = APIRouter()


@router.get("/teams/{team_id}/messages", response_model=List[MessageWithUser])
async def read_team_messages(
    team_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    """
    Лента сообщений команды, новые первыми (клиент опрашивает её периодически)
    """
    await get_team_or_404(storage, team_id)
    await require_membership(storage, current_user, team_id, message="Not authorized to view messages of this team")
    return await storage.get_messages_by_team(team_id)


@router.post("/teams/{team_id}/messages", response_model=MessageWithUser, status_code=status.HTTP_201_CREATED)
async def create_team_message(
    *,
    team_id: int,
    message_in: MessageCreate,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    await get_team_or_404(storage, team_id)
    await require_membership(storage, current_user, team_id, message="Not authorized to post in this team")
    message = await storage.create_message(message_in, team_id, current_user.id)
    return MessageWithUser(**message.model_dump(), user=current_user.public())


@router.delete("/messages/{message_id}", response_model=MessageResponse)
async def delete_message(
    message_id: int,
    storage: Storage = Depends(get_storage),
    current_user: UserInDB = Depends(get_current_user),
) -> Any:
    message = await storage.get_message(message_id)
    if not message:
        raise NotFoundError("Message not found")
    await require_author_or_admin(
        storage, current_user, message.team_id, message.user_id, "Not authorized to delete this message"
    )
    await storage.delete_message(message_id)
    return {"message": "Message deleted successfully"}
