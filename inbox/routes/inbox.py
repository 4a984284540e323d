from typing import Optional
from fastapi import APIRouter, Depends
from ..auth import get_current_user, get_optional_user
from ..schemas.conversations import ClearInboxOut, UnreadOut
from ..schemas.users import InboxStateOut, ActionOkOut
from .. import service

router = APIRouter()


@router.post('/toggle', response_model=InboxStateOut)
async def toggle(current_user: int = Depends(get_current_user)):
    return {'inbox_enabled': await service.toggle_inbox(current_user)}


@router.get('/users/{user_id}/enabled', response_model=InboxStateOut)
async def enabled(user_id: int):
    return {'inbox_enabled': await service.get_inbox_enabled(user_id)}


@router.post('/clear', response_model=ClearInboxOut)
async def clear(current_user: int = Depends(get_current_user)):
    return {'deleted_count': await service.clear_inbox(current_user)}


@router.get('/unread', response_model=UnreadOut)
async def unread(current_user: Optional[int] = Depends(get_optional_user)):
    return {'has_unread': await service.has_unread_messages(current_user)}


@router.post('/read-all', response_model=ActionOkOut)
async def read_all(current_user: Optional[int] = Depends(get_optional_user)):
    await service.mark_all_read(current_user)
    return ActionOkOut()
