from . import core
import json


async def publish(topic: str, data: dict):
    if not core.KAFKA_PRODUCER:
        raise RuntimeError('Kafka producer not started')
    await core.KAFKA_PRODUCER.send_and_wait(topic, json.dumps(data).encode('utf-8'))


def available() -> bool:
    return core.KAFKA_PRODUCER is not None
