"""
Alerting and moderation side effects.

Both run after the owning transaction has committed. Alert delivery is
fire-and-forget: any failure is logged and counted, never raised, so a
message that was sent stays sent.
"""
import logging
from . import models
from .config import ALERTS_TOPIC, MODERATION_TOPIC
from .core import DM_ALERT_FAILURES
from .kafka_producer import publish, available
from .models.alerts import Alert

logger = logging.getLogger(__name__)


async def create_alert(recipient_id: int, actor_id: int, type: str = 'message'):
    try:
        async with models.AsyncSessionLocal() as session:
            async with session.begin():
                alert = Alert(recipient_user_id=recipient_id, actor_user_id=actor_id, type=type, is_read=False)
                session.add(alert)
                await session.flush()
                alert_id = alert.id
        if available():
            await publish(ALERTS_TOPIC, {
                'id': alert_id,
                'recipient_user_id': recipient_id,
                'actor_user_id': actor_id,
                'type': type,
            })
    except Exception as e:
        DM_ALERT_FAILURES.inc()
        logger.warning({'msg': 'dm_alert_failed', 'recipient_id': recipient_id, 'error': str(e)})


async def publish_report(report: dict):
    """Hand a stored report to the moderation pipeline when Kafka is up."""
    if not available():
        return
    try:
        await publish(MODERATION_TOPIC, report)
    except Exception as e:
        logger.warning({'msg': 'dm_report_publish_failed', 'report_id': report.get('id'), 'error': str(e)})
