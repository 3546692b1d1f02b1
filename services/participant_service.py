"""
Participant metadata writes.

Status and the room lock both live in the participant's own metadata.
Each write reads the current metadata first, merges the change and only
calls LiveKit when the encoded value actually differs.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from core.livekit_gateway import LiveKitGateway
from models import UserStatus
from services.metadata_service import get_status, is_room_locked, merge_metadata

logger = logging.getLogger(__name__)


@dataclass
class MetadataWrite:
    identity: str
    room: str
    metadata: str
    updated: bool

    @property
    def status(self) -> UserStatus:
        return get_status(self.metadata)

    @property
    def room_locked(self) -> bool:
        return is_room_locked(self.metadata)


async def write_metadata(
    gateway: LiveKitGateway,
    room: str,
    identity: str,
    status: Optional[UserStatus] = None,
    room_locked: Optional[bool] = None,
) -> MetadataWrite:
    """
    Merge a status and/or lock change into the participant's metadata.

    Raises ParticipantNotFound when the participant is not in the room.
    """
    current = await gateway.get_participant(room, identity)
    merged = merge_metadata(current.metadata, status=status, room_locked=room_locked)

    if merged == current.metadata:
        logger.debug(f"Metadata for {identity} in {room} unchanged, skipping write")
        return MetadataWrite(identity, room, merged, updated=False)

    await gateway.update_metadata(room, identity, merged)
    logger.info(f"Updated metadata for {identity} in {room}: {merged}")
    return MetadataWrite(identity, room, merged, updated=True)
