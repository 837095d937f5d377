"""
Tests for decoding puppet service events.
"""

import json

from pywechaty.events import PuppetEventName
from pywechaty.puppet.service.event_decoder import EventType, decode_event
from pywechaty.schemas import PayloadType, ScanStatus


class TestDecodeEvent:
    """Tests for the decode_event function."""

    def test_message(self):
        """Test a message event carries the message id."""
        # Test
        event = decode_event(EventType.MESSAGE, json.dumps({"messageId": "m1"}))

        # Verify
        assert event.name == PuppetEventName.MESSAGE
        assert event.payload.message_id == "m1"

    def test_room_join(self):
        """Test a room join event with every field."""
        # Setup
        payload = {"roomId": "r1", "inviterId": "alice", "inviteeIdList": ["bob"], "timestamp": 1600000000}

        # Test
        event = decode_event(EventType.ROOM_JOIN, json.dumps(payload))

        # Verify
        assert event.name == PuppetEventName.ROOM_JOIN
        assert event.payload.invitee_id_list == ["bob"]
        assert event.payload.timestamp == 1600000000

    def test_scan(self):
        """Test scan status and QR code."""
        # Test
        event = decode_event(EventType.SCAN, {"status": 2, "qrcode": "https://login.weixin.qq.com/l/x"})

        # Verify
        assert event.payload.status == ScanStatus.WAITING
        assert event.payload.qrcode == "https://login.weixin.qq.com/l/x"
        assert event.payload.data is None

    def test_dirty(self):
        """Test dirty events name the payload type."""
        # Test
        event = decode_event(EventType.DIRTY, json.dumps({"payloadType": 4, "payloadId": "r1"}))

        # Verify
        assert event.payload.payload_type == PayloadType.ROOM_MEMBER
        assert event.payload.payload_id == "r1"

    def test_missing_fields_are_dropped(self):
        """Test events without their required fields are ignored."""
        assert decode_event(EventType.HEARTBEAT, "{}") is None
        assert decode_event(EventType.LOGOUT, json.dumps({"contactId": "bot"})) is None
        assert decode_event(EventType.ROOM_TOPIC, json.dumps({"roomId": "r1"})) is None

    def test_unknown_and_unspecified(self):
        """Test unspecified and unknown types produce no event."""
        assert decode_event(EventType.UNSPECIFIED, "{}") is None
        assert decode_event(99, json.dumps({"data": "x"})) is None
        assert decode_event(EventType.DONG, "not json") is None
