# ===== booking/services/realtime/appointment_events.py =====
"""
Live appointment-change notifications over Redis pub/sub.

Subscribers only use these events to refetch; they carry no authority over
what is booked.
"""
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from booking.config.context import get_context
from booking.config.redis import get_redis, RedisKeys

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[Dict[str, Any]], Union[Awaitable[None], None]]


def channel_for(staff_id) -> str:
    return RedisKeys.APPOINTMENT_CHANGES.format(staff_id=staff_id)


class AppointmentEventPublisher:
    """Publishes appointment insert/update events per staff member"""

    def __init__(self, redis_factory: Callable = get_redis):
        self._redis_factory = redis_factory

    async def publish_change(self, appointment: Dict[str, Any], event: str = "INSERT") -> int:
        """
        Args:
            appointment: serialized appointment (Appointment.to_dict())
            event: INSERT, UPDATE or DELETE

        Returns:
            int: number of subscribers that received the message, 0 when
            realtime updates are disabled
        """
        if not get_context().settings.ENABLE_REALTIME:
            return 0

        channel = channel_for(appointment["staff_id"])
        payload = json.dumps({"event": event, "appointment": appointment})

        redis_client = await self._redis_factory()
        try:
            receivers = await redis_client.publish(channel, payload)
            logger.debug(f"Published {event} on {channel} to {receivers} subscriber(s)")
            return receivers
        finally:
            await redis_client.close()


async def listen_for_changes(
        staff_id,
        on_change: ChangeHandler,
        redis_factory: Callable = get_redis,
        max_messages: Optional[int] = None
) -> int:
    """
    Subscribe to a staff member's channel and call on_change for every event,
    typically to refetch the day's slots.

    Runs until cancelled, or until max_messages events were handled.
    Malformed messages are logged and skipped.

    Returns:
        int: number of events handed to on_change
    """
    channel = channel_for(staff_id)
    handled = 0

    redis_client = await redis_factory()
    pubsub = redis_client.pubsub()
    try:
        await pubsub.subscribe(channel)
        logger.info(f"Listening for appointment changes on {channel}")

        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue

            try:
                data = message["data"]
                if isinstance(data, bytes):
                    data = data.decode("utf-8")
                event = json.loads(data)
            except (ValueError, KeyError) as e:
                logger.warning(f"Ignoring malformed message on {channel}: {e}")
                continue

            result = on_change(event)
            if hasattr(result, "__await__"):
                await result

            handled += 1
            if max_messages is not None and handled >= max_messages:
                break
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.close()
        await redis_client.close()

    return handled
