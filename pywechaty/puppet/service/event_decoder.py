"""
Decoding of puppet service event notifications.

Every event carries an integer ``type`` and a ``payload`` holding a JSON
object with camelCase keys. Events missing a required field are logged and
dropped.
"""

from typing import Any, Dict, Optional

from ...events import PuppetEvent, PuppetEventName
from ...schemas import (
    EventDirtyPayload,
    EventDongPayload,
    EventErrorPayload,
    EventFriendshipPayload,
    EventHeartbeatPayload,
    EventLoginPayload,
    EventLogoutPayload,
    EventMessagePayload,
    EventReadyPayload,
    EventResetPayload,
    EventRoomInvitePayload,
    EventRoomJoinPayload,
    EventRoomLeavePayload,
    EventRoomTopicPayload,
    EventScanPayload,
    PayloadType,
    ScanStatus,
)
from ...schemas.base import to_enum
from ...utils import get_logger, parse_json

logger = get_logger("EventDecoder")


class EventType:
    """Event type codes of the puppet service"""
    UNSPECIFIED = 0
    HEARTBEAT = 1
    MESSAGE = 2
    DONG = 3
    ERROR = 16
    FRIENDSHIP = 17
    ROOM_INVITE = 18
    ROOM_JOIN = 19
    ROOM_LEAVE = 20
    ROOM_TOPIC = 21
    SCAN = 22
    READY = 23
    RESET = 24
    LOGIN = 25
    LOGOUT = 26
    DIRTY = 27


def _has(data: Dict[str, Any], *keys: str) -> bool:
    return all(data.get(key) is not None for key in keys)


def _data_event(name: PuppetEventName, payload_cls: type, label: str, data: Dict[str, Any]) -> Optional[PuppetEvent]:
    if not _has(data, "data"):
        logger.error(f"{label} payload should have data")
        return None
    return PuppetEvent(name, payload_cls(data=str(data["data"])))


def decode_event(event_type: int, payload: Any) -> Optional[PuppetEvent]:
    """
    Convert an event notification to a ``PuppetEvent``.

    Args:
        event_type: Event type code
        payload: JSON string (or already decoded object) with the event data

    Returns:
        Optional[PuppetEvent]: The event, or None if it is ignored or invalid
    """
    data = payload if isinstance(payload, dict) else parse_json(payload or "")

    if event_type == EventType.UNSPECIFIED:
        return None

    if event_type == EventType.HEARTBEAT:
        return _data_event(PuppetEventName.HEARTBEAT, EventHeartbeatPayload, "Heartbeat", data)

    if event_type == EventType.MESSAGE:
        if not _has(data, "messageId"):
            logger.error("Message payload should have message id")
            return None
        return PuppetEvent(PuppetEventName.MESSAGE, EventMessagePayload(message_id=data["messageId"]))

    if event_type == EventType.DONG:
        return _data_event(PuppetEventName.DONG, EventDongPayload, "Dong", data)

    if event_type == EventType.ERROR:
        return _data_event(PuppetEventName.ERROR, EventErrorPayload, "Error", data)

    if event_type == EventType.FRIENDSHIP:
        if not _has(data, "friendshipId"):
            logger.error("Friendship payload should have friendship id")
            return None
        return PuppetEvent(PuppetEventName.FRIENDSHIP, EventFriendshipPayload(friendship_id=data["friendshipId"]))

    if event_type == EventType.ROOM_INVITE:
        if not _has(data, "roomInvitationId"):
            logger.error("Room invite payload should have room invitation id")
            return None
        return PuppetEvent(PuppetEventName.ROOM_INVITE,
                           EventRoomInvitePayload(room_invitation_id=data["roomInvitationId"]))

    if event_type == EventType.ROOM_JOIN:
        if not _has(data, "roomId", "inviterId", "inviteeIdList", "timestamp"):
            logger.error("Room join payload should have room id, inviter id, invitee id list and timestamp")
            return None
        return PuppetEvent(PuppetEventName.ROOM_JOIN, EventRoomJoinPayload(
            room_id=data["roomId"],
            inviter_id=data["inviterId"],
            invitee_id_list=list(data["inviteeIdList"]),
            timestamp=int(data["timestamp"]),
        ))

    if event_type == EventType.ROOM_LEAVE:
        if not _has(data, "roomId", "removerId", "removeeIdList", "timestamp"):
            logger.error("Room leave payload should have room id, remover id, removee id list and timestamp")
            return None
        return PuppetEvent(PuppetEventName.ROOM_LEAVE, EventRoomLeavePayload(
            room_id=data["roomId"],
            remover_id=data["removerId"],
            removee_id_list=list(data["removeeIdList"]),
            timestamp=int(data["timestamp"]),
        ))

    if event_type == EventType.ROOM_TOPIC:
        if not _has(data, "roomId", "changerId", "oldTopic", "newTopic", "timestamp"):
            logger.error("Room topic payload should have room id, changer id, old topic, new topic and timestamp")
            return None
        return PuppetEvent(PuppetEventName.ROOM_TOPIC, EventRoomTopicPayload(
            room_id=data["roomId"],
            changer_id=data["changerId"],
            old_topic=data["oldTopic"],
            new_topic=data["newTopic"],
            timestamp=int(data["timestamp"]),
        ))

    if event_type == EventType.SCAN:
        if not _has(data, "status"):
            logger.error("Scan payload should have scan status")
            return None
        return PuppetEvent(PuppetEventName.SCAN, EventScanPayload(
            status=to_enum(ScanStatus, data["status"]),
            qrcode=data.get("qrcode"),
            data=data.get("data"),
        ))

    if event_type == EventType.READY:
        return _data_event(PuppetEventName.READY, EventReadyPayload, "Ready", data)

    if event_type == EventType.RESET:
        return _data_event(PuppetEventName.RESET, EventResetPayload, "Reset", data)

    if event_type == EventType.LOGIN:
        if not _has(data, "contactId"):
            logger.error("Login payload should have contact id")
            return None
        return PuppetEvent(PuppetEventName.LOGIN, EventLoginPayload(contact_id=data["contactId"]))

    if event_type == EventType.LOGOUT:
        if not _has(data, "contactId", "data"):
            logger.error("Logout payload should have contact id and data")
            return None
        return PuppetEvent(PuppetEventName.LOGOUT,
                           EventLogoutPayload(contact_id=data["contactId"], data=str(data["data"])))

    if event_type == EventType.DIRTY:
        if not _has(data, "payloadType", "payloadId"):
            logger.error("Dirty payload should have payload type and payload id")
            return None
        return PuppetEvent(PuppetEventName.DIRTY, EventDirtyPayload(
            payload_type=to_enum(PayloadType, data["payloadType"]),
            payload_id=data["payloadId"],
        ))

    logger.error(f"Invalid event type: {event_type}")
    return None
