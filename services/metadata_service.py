"""
Participant metadata codec.

LiveKit metadata is an opaque string. This service writes a JSON object
like {"status": "focus", "roomLocked": false}; older clients write the bare
status string ("focus"), which is still understood on read.
"""
import json
from typing import Any, Dict, Optional

from models import UserStatus

STATUS_KEY = "status"
LOCK_KEY = "roomLocked"
STATUS_VALUES = {status.value for status in UserStatus}


def parse_metadata(raw: Optional[str]) -> Dict[str, Any]:
    """Decode metadata into a dict. Unreadable metadata decodes to {}."""
    if not raw:
        return {}

    try:
        value = json.loads(raw)
    except ValueError:
        value = raw

    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value in STATUS_VALUES:
        return {STATUS_KEY: value}
    return {}


def is_room_locked(raw: Optional[str]) -> bool:
    # Only a literal JSON true counts, "true" or 1 do not.
    return parse_metadata(raw).get(LOCK_KEY) is True


def get_status(raw: Optional[str]) -> UserStatus:
    value = parse_metadata(raw).get(STATUS_KEY)
    try:
        return UserStatus(value)
    except ValueError:
        return UserStatus.AVAILABLE


def merge_metadata(
    raw: Optional[str],
    status: Optional[UserStatus] = None,
    room_locked: Optional[bool] = None,
) -> str:
    """
    Return the encoded metadata after applying the given changes.

    Unknown keys already present are preserved so other clients' fields
    survive the write.
    """
    data = dict(parse_metadata(raw))
    if status is not None:
        data[STATUS_KEY] = UserStatus(status).value
    if room_locked is not None:
        data[LOCK_KEY] = bool(room_locked)
    return encode_metadata(data)


def encode_metadata(data: Dict[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"))
