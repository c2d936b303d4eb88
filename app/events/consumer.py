import asyncio, json
from aio_pika import connect_robust, ExchangeType
from app.core.config import settings
from app.core.logging import logger
from app.websocket.manager import manager


async def handle_message(body: bytes):
    data = json.loads(body.decode())
    typ = data.get("type")
    if typ == "notification.created":
        payload = {
            "type": "notification",
            "notification_id": data.get("notification_id"),
            "notification": data.get("notification"),
        }
    elif typ == "message.created":
        payload = {"type": "new_message", "event_id": data.get("event_id"), "message": data.get("message")}
    elif typ == "message.seen":
        payload = {
            "type": "message_seen",
            "event_id": data.get("event_id"),
            "message_id": data.get("message_id"),
            "seen_by": data.get("seen_by", []),
        }
    else:
        logger.debug(f"Ignoring message of type {typ}")
        return
    for user_id in data.get("user_ids", []):
        await manager.send_personal_message(user_id, payload)


async def run_worker():
    """
    Relay bus notifications and chat traffic to the websockets held by this process.

    Every API instance binds its own exclusive queue, so each one sees every
    notification and delivers to whichever users are connected locally.
    """
    max_retries = 10
    delay = 5  # seconds
    for attempt in range(1, max_retries + 1):
        try:
            connection = await connect_robust(settings.RABBITMQ_URL)
            logger.info("Successfully connected to RabbitMQ")
            break
        except Exception as e:
            logger.error(f"RabbitMQ connection failed (attempt {attempt}/{max_retries}): {e}")
            if attempt == max_retries:
                raise
            await asyncio.sleep(delay)
    async with connection:
        channel = await connection.channel()
        exchange = await channel.declare_exchange(settings.EVENTS_EXCHANGE, ExchangeType.TOPIC, durable=True)
        queue = await channel.declare_queue("", exclusive=True, auto_delete=True)
        for routing_key in ("notification.*", "message.*"):
            await queue.bind(exchange, routing_key=routing_key)
        async with queue.iterator() as queue_iter:
            async for message in queue_iter:
                async with message.process():
                    try:
                        await handle_message(message.body)
                    except Exception as e:
                        logger.error(f"Error handling message: {e}", exc_info=True)
