import logging
import secrets
import time

import aiosqlite

from kidquiz.db.queries import get_local_value, set_local_value

logger = logging.getLogger(__name__)

DEVICE_ID_KEY = "device_user_id"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    digits = []
    while True:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
        if value == 0:
            return "".join(reversed(digits))


def new_device_id() -> str:
    """'user_' + 9 random base36 chars + current time in ms, base36."""
    random_part = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"user_{random_part}{_to_base36(time.time_ns() // 1_000_000)}"


async def get_or_create_device_id(client_key: int | str) -> str:
    """
    Return the persisted device id for a client, creating it on first use.

    If local storage is unavailable a fresh id is returned for this session only.
    """
    key = f"{DEVICE_ID_KEY}:{client_key}"
    try:
        device_id = await get_local_value(key)
        if device_id:
            return device_id
        device_id = new_device_id()
        await set_local_value(key, device_id)
        logger.info("Created device id for client %s", client_key)
        return device_id
    except (aiosqlite.Error, OSError) as e:
        logger.warning("Local storage unavailable, using a temporary device id: %s", e)
        return new_device_id()
