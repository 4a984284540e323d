from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from ..auth import get_current_user, get_optional_user
from ..config import PAGE_SIZE, MAX_PAGE_SIZE
from ..schemas.conversations import OpenConversationIn, ConversationIdOut, ConversationOut, ConversationDetailOut
from ..schemas.messages import MessageIn, MessageOut
from ..schemas.users import ActionOkOut
from .. import service

router = APIRouter()


@router.post('/', response_model=ConversationIdOut)
async def open_conversation(payload: OpenConversationIn, current_user: int = Depends(get_current_user)):
    conversation_id = await service.open_conversation(current_user, payload.other_user_id)
    return {'conversation_id': conversation_id}


@router.get('/', response_model=List[ConversationOut])
async def list_conversations(current_user: Optional[int] = Depends(get_optional_user)):
    return await service.list_conversations(current_user)


@router.get('/{conversation_id}', response_model=Optional[ConversationDetailOut])
async def get_conversation(conversation_id: int, current_user: Optional[int] = Depends(get_optional_user)):
    return await service.get_conversation(current_user, conversation_id)


@router.delete('/{conversation_id}', response_model=ActionOkOut)
async def delete_conversation(conversation_id: int, current_user: int = Depends(get_current_user)):
    hidden = await service.delete_conversation(current_user, conversation_id)
    return ActionOkOut(message=None if hidden else 'already deleted')


@router.post('/{conversation_id}/read', response_model=ActionOkOut)
async def mark_read(conversation_id: int, current_user: Optional[int] = Depends(get_optional_user)):
    await service.mark_read(current_user, conversation_id)
    return ActionOkOut()


@router.get('/{conversation_id}/messages', response_model=List[MessageOut])
async def list_messages(
    conversation_id: int,
    page_size: int = Query(PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: Optional[int] = Depends(get_optional_user),
):
    return await service.list_messages(current_user, conversation_id, page_size)


@router.post('/{conversation_id}/messages', response_model=MessageOut)
async def send(conversation_id: int, payload: MessageIn, current_user: int = Depends(get_current_user)):
    return await service.send_message(current_user, conversation_id, payload.content, payload.parent_message_id)
