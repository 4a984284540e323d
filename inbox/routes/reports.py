from fastapi import APIRouter, Depends
from ..auth import get_current_user
from ..schemas.reports import ReportIn, ReportOut
from .. import service

router = APIRouter()


@router.post('/', response_model=ReportOut)
async def create_report(payload: ReportIn, current_user: int = Depends(get_current_user)):
    report_id = await service.report(
        current_user,
        payload.reported_user_id,
        payload.conversation_id,
        payload.reason,
        message_id=payload.message_id,
    )
    return {'id': report_id, 'status': 'pending'}
