from typing import List

from fastapi import APIRouter, Depends, Query, status

from socialhub.routers.chat import get_chat_service
from socialhub.schemas.chat import ConversationCreate, ConversationPublic, MessagePublic, ReadResult
from socialhub.services.chat_service import ChatService
from socialhub.utils.dependencies import get_current_user


router = APIRouter(prefix="/api/conversations", tags=["chat"])


@router.get("", response_model=List[ConversationPublic])
async def list_conversations(limit: int = Query(50, ge=1, le=100), current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    return await service.list_conversations(current_user["_id"], limit=limit)


@router.post("", response_model=ConversationPublic)
async def create_conversation(body: ConversationCreate, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    if body.participant_id is not None:
        return await service.start_conversation(current_user["_id"], body.participant_id)
    return await service.create_group(current_user["_id"], body.participant_ids, body.name)


@router.get("/{conversation_id}/messages", response_model=List[MessagePublic])
async def list_messages(
    conversation_id: int,
    limit: int = Query(200, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    return await service.get_history(conversation_id, current_user["_id"], limit=limit, offset=offset)


@router.post("/{conversation_id}/read", response_model=ReadResult)
async def mark_read(conversation_id: int, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    count = await service.mark_read(conversation_id, current_user["_id"])
    return {"updated": count}


@router.post("/{conversation_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_conversation(conversation_id: int, current_user: dict = Depends(get_current_user), service: ChatService = Depends(get_chat_service)):
    await service.leave(conversation_id, current_user["_id"])
