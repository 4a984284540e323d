from fastapi import APIRouter
from .inbox import router as inbox_router
from .conversations import router as conversations_router
from .messages import router as messages_router
from .reports import router as reports_router
from .blocks import router as blocks_router

router = APIRouter()
router.include_router(inbox_router, prefix='/inbox', tags=['inbox'])
router.include_router(conversations_router, prefix='/conversations', tags=['conversations'])
router.include_router(messages_router, prefix='/messages', tags=['messages'])
router.include_router(reports_router, prefix='/reports', tags=['reports'])
router.include_router(blocks_router, prefix='/blocks', tags=['blocks'])
