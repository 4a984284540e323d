import asyncio
import logging
from prometheus_client import Counter, start_http_server
from .config import KAFKA_BOOTSTRAP_SERVERS, ALERTS_TOPIC, MODERATION_TOPIC, METRICS_PORT

logger = logging.getLogger(__name__)

KAFKA_PRODUCER = None

DM_MESSAGES_SENT = Counter('dm_messages_sent_total', 'Direct messages persisted')
DM_SEND_DENIED = Counter('dm_send_denied_total', 'Direct message sends rejected', ['reason'])
DM_ALERT_FAILURES = Counter('dm_alert_failures_total', 'Message alerts that could not be delivered')


def init_metrics(port: int = METRICS_PORT):
    """Initialize Prometheus metrics server"""
    try:
        start_http_server(port)
        logger.info(f"Prometheus metrics server started on port {port}")
    except Exception as e:
        logger.warning(f'Prometheus start failed: {e}')


async def kafka_startup():
    """Start Kafka producer, retrying a few times before giving up"""
    global KAFKA_PRODUCER

    from aiokafka import AIOKafkaProducer

    max_retries = 3
    retry_delay = 5  # seconds

    for attempt in range(max_retries):
        try:
            logger.info(f"Attempting to connect to Kafka brokers: {KAFKA_BOOTSTRAP_SERVERS} (attempt {attempt + 1}/{max_retries})")

            KAFKA_PRODUCER = AIOKafkaProducer(
                bootstrap_servers=KAFKA_BOOTSTRAP_SERVERS,
                retry_backoff_ms=500,
                request_timeout_ms=30000,
                linger_ms=100,
                compression_type='gzip',
                acks='all',
            )
            await KAFKA_PRODUCER.start()
            logger.info("Kafka producer connected successfully")
            break

        except Exception as e:
            logger.warning(f'Kafka startup attempt {attempt + 1} failed: {e}')
            if KAFKA_PRODUCER:
                try:
                    await KAFKA_PRODUCER.stop()
                except Exception:
                    logger.debug('Kafka producer stop failed', exc_info=True)
                KAFKA_PRODUCER = None

            if attempt < max_retries - 1:
                logger.info(f"Retrying Kafka connection in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
            else:
                logger.error("Failed to connect to Kafka after all retries")


async def create_kafka_topics():
    """Create the topics this service publishes to"""
    if not KAFKA_PRODUCER:
        logger.warning("Kafka producer not available, skipping topic creation")
        return

    from aiokafka.admin import AIOKafkaAdminClient, NewTopic

    topics = [ALERTS_TOPIC, MODERATION_TOPIC]
    admin = AIOKafkaAdminClient(bootstrap_servers=KAFKA_BOOTSTRAP_SERVERS)
    try:
        await admin.start()
        await admin.create_topics([
            NewTopic(
                name=topic,
                num_partitions=8,
                replication_factor=1,
                topic_configs={'retention.ms': str(7 * 24 * 60 * 60 * 1000)},
            )
            for topic in topics
        ])
        logger.info(f"Created Kafka topics: {topics}")
    except Exception as e:
        logger.warning(f"Failed to create Kafka topics: {e}")
    finally:
        await admin.close()


async def shutdown_connections():
    """Gracefully shutdown all connections"""
    global KAFKA_PRODUCER
    logger.info("Shutting down connections...")

    if KAFKA_PRODUCER:
        try:
            await KAFKA_PRODUCER.stop()
            logger.info("Kafka producer stopped")
        except Exception as e:
            logger.error(f"Error stopping Kafka producer: {e}")
        KAFKA_PRODUCER = None
