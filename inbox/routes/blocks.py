from typing import Optional
from fastapi import APIRouter, Depends
from ..auth import get_current_user, get_optional_user
from ..schemas.reports import BlockStateOut
from ..schemas.users import ActionOkOut
from .. import service

router = APIRouter()


@router.post('/{user_id}', response_model=ActionOkOut)
async def block(user_id: int, current_user: int = Depends(get_current_user)):
    await service.block_user(current_user, user_id)
    return ActionOkOut()


@router.delete('/{user_id}', response_model=ActionOkOut)
async def unblock(user_id: int, current_user: int = Depends(get_current_user)):
    await service.unblock_user(current_user, user_id)
    return ActionOkOut()


@router.get('/{user_id}', response_model=BlockStateOut)
async def is_blocked(user_id: int, current_user: Optional[int] = Depends(get_optional_user)):
    return {'blocked': await service.is_user_blocked(current_user, user_id)}
