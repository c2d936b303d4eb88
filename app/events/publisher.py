import json
from typing import Optional
from aio_pika import connect_robust, Message, ExchangeType, DeliveryMode
from aio_pika.abc import AbstractRobustConnection, AbstractChannel, AbstractExchange
from app.core.config import settings
from app.core.logging import logger

_connection: Optional[AbstractRobustConnection] = None
_channel: Optional[AbstractChannel] = None
_exchange: Optional[AbstractExchange] = None


async def get_exchange() -> AbstractExchange:
    global _connection, _channel, _exchange
    if _connection is None or _connection.is_closed:
        _connection = await connect_robust(settings.RABBITMQ_URL)
        _channel = await _connection.channel()
        _exchange = None
    if _exchange is None:
        _exchange = await _channel.declare_exchange(settings.EVENTS_EXCHANGE, ExchangeType.TOPIC, durable=True)
    return _exchange


async def publish_event(routing_key: str, payload: dict):
    exchange = await get_exchange()
    body = json.dumps(payload, default=str).encode()
    message = Message(body, content_type="application/json", delivery_mode=DeliveryMode.PERSISTENT)
    await exchange.publish(message, routing_key=routing_key)
    logger.debug(f"Published {routing_key}")


async def close_connection():
    global _connection, _channel, _exchange
    if _connection is not None and not _connection.is_closed:
        await _connection.close()
    _connection = _channel = _exchange = None
