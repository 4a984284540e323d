from typing import List, Optional
from fastapi import APIRouter, Depends
from ..auth import get_current_user, get_optional_user
from ..schemas.messages import ReactionIn, ReactionGroupOut, ReactionIdOut
from ..schemas.users import ActionOkOut
from .. import service

router = APIRouter()


@router.delete('/{message_id}', response_model=ActionOkOut)
async def delete_message(message_id: int, current_user: int = Depends(get_current_user)):
    await service.delete_message(current_user, message_id)
    return ActionOkOut()


@router.put('/{message_id}/reactions', response_model=ReactionIdOut)
async def react(message_id: int, payload: ReactionIn, current_user: int = Depends(get_current_user)):
    return {'id': await service.react(current_user, message_id, payload.emoji)}


@router.delete('/{message_id}/reactions', response_model=ActionOkOut)
async def unreact(message_id: int, current_user: int = Depends(get_current_user)):
    await service.unreact(current_user, message_id)
    return ActionOkOut()


@router.get('/{message_id}/reactions', response_model=List[ReactionGroupOut])
async def reactions(message_id: int, current_user: Optional[int] = Depends(get_optional_user)):
    return await service.list_reactions(current_user, message_id)
