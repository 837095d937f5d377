"""
Puppet implementation backed by a remote puppet service.
"""

from typing import Any, Dict, List, Optional, Union

from ...config import PuppetOptions
from ...events import ConnectionEventType
from ...exceptions import PuppetNetworkError
from ...filebox import FileBox
from ...schemas import (
    ContactPayload,
    FriendshipPayload,
    ImageType,
    MessagePayload,
    MiniProgramPayload,
    RoomInvitationPayload,
    RoomMemberPayload,
    RoomPayload,
    UrlLinkPayload,
)
from ...utils import json_stringify, parse_json
from ..base import PuppetImpl
from ..puppet import Puppet
from .connection import ServiceConnection
from .endpoint import resolve_endpoint
from .event_decoder import decode_event


def _json_object(value: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    return parse_json(value or "")


class PuppetService(PuppetImpl):
    """
    Puppet that forwards every operation to a puppet service over WebSocket.

    Use ``await PuppetService.create(options)`` to get a connected ``Puppet``.
    """

    def __init__(self, options: PuppetOptions, connection: ServiceConnection):
        super().__init__()
        self.options = options
        self.connection = connection
        self.connection.on_event = self._on_event
        self.connection.event_emitter.on(ConnectionEventType.RECONNECTED, self._on_reconnected)

    @classmethod
    async def create(cls, options: PuppetOptions) -> Puppet:
        """
        Resolve the endpoint, connect and subscribe to the event stream.

        Raises:
            InvalidTokenError: If no endpoint can be resolved from the options
            PuppetNetworkError: If the connection or the event stream fails
        """
        endpoint = await resolve_endpoint(options)
        connection = ServiceConnection(endpoint, token=options.token, timeout=options.request_timeout)
        service = cls(options, connection)
        puppet = Puppet(service)
        await service.connect()
        return puppet

    async def connect(self) -> None:
        await self.connection.connect()
        await self._start_stream()

    async def _start_stream(self) -> None:
        try:
            await self.connection.request("event", {})
        except PuppetNetworkError as e:
            raise PuppetNetworkError(f"Failed to establish event stream, reason: {e.reason}") from e
        self.logger.info("Subscribed to puppet service events")

    async def _on_reconnected(self, _data: Any) -> None:
        try:
            await self._start_stream()
        except PuppetNetworkError as e:
            self.logger.error(f"Failed to resubscribe after reconnecting: {e}")

    def _on_event(self, params: Dict[str, Any]) -> None:
        try:
            event_type = int(params.get("type", 0))
        except (TypeError, ValueError):
            self.logger.error(f"Invalid event type: {params.get('type')}")
            return
        event = decode_event(event_type, params.get("payload"))
        if event is not None:
            self.emit(event.name, event.payload)

    async def _call(self, method: str, params: Optional[Dict[str, Any]], failure: str) -> Any:
        """Send one request; a failure is raised as ``failure``."""
        try:
            return await self.connection.request(method, params or {})
        except PuppetNetworkError as e:
            self.logger.error(f"{failure}: {e.reason}")
            raise type(e)(failure) from e

    async def _call_result(self, method: str, params: Optional[Dict[str, Any]], failure: str) -> Dict[str, Any]:
        result = await self._call(method, params, failure)
        return result if isinstance(result, dict) else {}

    # Contact self

    async def contact_self_name_set(self, name: str) -> None:
        await self._call("contact_self_name", {"name": name}, f"Failed to set name to {name}")

    async def contact_self_qr_code(self) -> str:
        result = await self._call_result("contact_self_qr_code", {}, "Failed to get QR code")
        return result.get("qrcode", "")

    async def contact_self_signature_set(self, signature: str) -> None:
        await self._call("contact_self_signature", {"signature": signature},
                         f"Failed to set signature to {signature}")

    # Tag

    async def tag_contact_add(self, tag_id: str, contact_id: str) -> None:
        await self._call("tag_contact_add", {"id": tag_id, "contactId": contact_id},
                         f"Failed to add tag {tag_id} to contact {contact_id}")

    async def tag_contact_remove(self, tag_id: str, contact_id: str) -> None:
        await self._call("tag_contact_remove", {"id": tag_id, "contactId": contact_id},
                         f"Failed to remove tag {tag_id} from contact {contact_id}")

    async def tag_contact_delete(self, tag_id: str) -> None:
        await self._call("tag_contact_delete", {"id": tag_id}, f"Failed to delete tag {tag_id}")

    async def tag_contact_list(self, contact_id: Optional[str] = None) -> List[str]:
        params = {"contactId": contact_id} if contact_id is not None else {}
        failure = f"Failed to get tags of contact {contact_id}" if contact_id else "Failed to get tag list"
        result = await self._call_result("tag_contact_list", params, failure)
        return list(result.get("ids") or [])

    async def tag_list(self) -> List[str]:
        return await self.tag_contact_list(None)

    # Contact

    async def contact_alias(self, contact_id: str) -> str:
        result = await self._call_result("contact_alias", {"id": contact_id},
                                         f"Failed to get alias of contact {contact_id}")
        return result.get("alias") or ""

    async def contact_alias_set(self, contact_id: str, alias: str) -> None:
        await self._call("contact_alias", {"id": contact_id, "alias": alias},
                         f"Failed to set alias for contact {contact_id}")

    async def contact_avatar(self, contact_id: str) -> FileBox:
        result = await self._call_result("contact_avatar", {"id": contact_id},
                                         f"Failed to get avatar of contact {contact_id}")
        return FileBox.from_json(result.get("filebox") or {})

    async def contact_avatar_set(self, contact_id: str, file: FileBox) -> None:
        await self._call("contact_avatar", {"id": contact_id, "filebox": file.to_json()},
                         f"Failed to set avatar for contact {contact_id}")

    async def contact_phone_set(self, contact_id: str, phone_list: List[str]) -> None:
        await self._call("contact_phone", {"contactId": contact_id, "phoneList": list(phone_list)},
                         f"Failed to set phone for contact {contact_id}")

    async def contact_corporation_remark_set(self, contact_id: str, corporation_remark: Optional[str]) -> None:
        await self._call("contact_corporation_remark",
                         {"contactId": contact_id, "corporationRemark": corporation_remark},
                         f"Failed to set corporation remark for contact {contact_id}")

    async def contact_description_set(self, contact_id: str, description: Optional[str]) -> None:
        await self._call("contact_description", {"contactId": contact_id, "description": description},
                         f"Failed to set description for contact {contact_id}")

    async def contact_list(self) -> List[str]:
        result = await self._call_result("contact_list", {}, "Failed to get contact list")
        return list(result.get("ids") or [])

    async def contact_raw_payload(self, contact_id: str) -> ContactPayload:
        result = await self._call_result("contact_payload", {"id": contact_id},
                                         f"Failed to get payload of contact {contact_id}")
        return ContactPayload.from_dict({**result, "id": result.get("id") or contact_id})

    # Message

    async def message_contact(self, message_id: str) -> str:
        result = await self._call_result("message_contact", {"id": message_id},
                                         f"Failed to get contact of message {message_id}")
        return result.get("id") or ""

    async def message_file(self, message_id: str) -> FileBox:
        result = await self._call_result("message_file", {"id": message_id},
                                         f"Failed to get file of message {message_id}")
        return FileBox.from_json(result.get("filebox") or {})

    async def message_image(self, message_id: str, image_type: ImageType) -> FileBox:
        result = await self._call_result("message_image", {"id": message_id, "type": int(image_type)},
                                         f"Failed to get image of message {message_id}")
        return FileBox.from_json(result.get("filebox") or {})

    async def message_mini_program(self, message_id: str) -> MiniProgramPayload:
        result = await self._call_result("message_mini_program", {"id": message_id},
                                         f"Failed to get mini program of message {message_id}")
        return MiniProgramPayload.from_dict(_json_object(result.get("miniProgram")))

    async def message_url(self, message_id: str) -> UrlLinkPayload:
        result = await self._call_result("message_url", {"id": message_id},
                                         f"Failed to get url link of message {message_id}")
        return UrlLinkPayload.from_dict(_json_object(result.get("urlLink")))

    async def _send(self, method: str, params: Dict[str, Any], failure: str) -> Optional[str]:
        result = await self._call_result(method, params, failure)
        return result.get("id") or None

    async def message_send_contact(self, conversation_id: str, contact_id: str) -> Optional[str]:
        return await self._send("message_send_contact",
                                {"conversationId": conversation_id, "contactId": contact_id},
                                f"Failed to send contact {contact_id} to {conversation_id}")

    async def message_send_file(self, conversation_id: str, file: FileBox) -> Optional[str]:
        return await self._send("message_send_file",
                                {"conversationId": conversation_id, "filebox": file.to_json()},
                                f"Failed to send file to {conversation_id}")

    async def message_send_mini_program(self, conversation_id: str,
                                        mini_program_payload: MiniProgramPayload) -> Optional[str]:
        return await self._send("message_send_mini_program",
                                {"conversationId": conversation_id,
                                 "miniProgram": json_stringify(mini_program_payload.to_dict())},
                                f"Failed to send mini program to {conversation_id}")

    async def message_send_text(self, conversation_id: str, text: str,
                                mention_id_list: Optional[List[str]] = None) -> Optional[str]:
        return await self._send("message_send_text",
                                {"conversationId": conversation_id, "text": text,
                                 "mentionalIds": list(mention_id_list or [])},
                                f"Failed to send text to {conversation_id}")

    async def message_send_url(self, conversation_id: str, url_link_payload: UrlLinkPayload) -> Optional[str]:
        return await self._send("message_send_url",
                                {"conversationId": conversation_id,
                                 "urlLink": json_stringify(url_link_payload.to_dict())},
                                f"Failed to send url link to {conversation_id}")

    async def message_raw_payload(self, message_id: str) -> MessagePayload:
        result = await self._call_result("message_payload", {"id": message_id},
                                         f"Failed to get payload of message {message_id}")
        return MessagePayload.from_dict({**result, "id": result.get("id") or message_id})

    # Friendship

    async def friendship_accept(self, friendship_id: str) -> None:
        await self._call("friendship_accept", {"id": friendship_id},
                         f"Failed to accept friendship {friendship_id}")

    async def friendship_add(self, contact_id: str, hello: Optional[str] = None) -> None:
        await self._call("friendship_add", {"contactId": contact_id, "hello": hello or ""},
                         f"Failed to add friend {contact_id}")

    async def friendship_search_phone(self, phone: str) -> Optional[str]:
        result = await self._call_result("friendship_search_phone", {"phone": phone},
                                         f"Failed to search friend by phone {phone}")
        return result.get("contactId") or None

    async def friendship_search_weixin(self, weixin: str) -> Optional[str]:
        result = await self._call_result("friendship_search_weixin", {"weixin": weixin},
                                         f"Failed to search friend by weixin {weixin}")
        return result.get("contactId") or None

    async def friendship_raw_payload(self, friendship_id: str) -> FriendshipPayload:
        result = await self._call_result("friendship_payload", {"id": friendship_id},
                                         f"Failed to get payload of friendship {friendship_id}")
        return FriendshipPayload.from_dict({**result, "id": result.get("id") or friendship_id})

    # Room invitation

    async def room_invitation_accept(self, room_invitation_id: str) -> None:
        await self._call("room_invitation_accept", {"id": room_invitation_id},
                         f"Failed to accept room invitation {room_invitation_id}")

    async def room_invitation_raw_payload(self, room_invitation_id: str) -> RoomInvitationPayload:
        result = await self._call_result("room_invitation_payload", {"id": room_invitation_id},
                                         f"Failed to get payload of room invitation {room_invitation_id}")
        return RoomInvitationPayload.from_dict({**result, "id": result.get("id") or room_invitation_id})

    # Room

    async def room_add(self, room_id: str, contact_id: str) -> None:
        await self._call("room_add", {"id": room_id, "contactId": contact_id},
                         f"Failed to add contact {contact_id} to room {room_id}")

    async def room_avatar(self, room_id: str) -> FileBox:
        result = await self._call_result("room_avatar", {"id": room_id},
                                         f"Failed to get avatar of room {room_id}")
        return FileBox.from_json(result.get("filebox") or {})

    async def room_create(self, contact_id_list: List[str], topic: Optional[str] = None) -> str:
        result = await self._call_result("room_create",
                                         {"contactIds": list(contact_id_list), "topic": topic or ""},
                                         "Failed to create room")
        return result.get("id") or ""

    async def room_del(self, room_id: str, contact_id: str) -> None:
        await self._call("room_del", {"id": room_id, "contactId": contact_id},
                         f"Failed to remove contact {contact_id} from room {room_id}")

    async def room_qr_code(self, room_id: str) -> str:
        result = await self._call_result("room_qr_code", {"id": room_id},
                                         f"Failed to get QR code of room {room_id}")
        return result.get("qrcode") or ""

    async def room_quit(self, room_id: str) -> None:
        await self._call("room_quit", {"id": room_id}, f"Failed to quit room {room_id}")

    async def room_topic(self, room_id: str) -> str:
        result = await self._call_result("room_topic", {"id": room_id},
                                         f"Failed to get topic of room {room_id}")
        return result.get("topic") or ""

    async def room_topic_set(self, room_id: str, topic: str) -> None:
        await self._call("room_topic", {"id": room_id, "topic": topic},
                         f"Failed to set topic for room {room_id}")

    async def room_list(self) -> List[str]:
        result = await self._call_result("room_list", {}, "Failed to get room list")
        return list(result.get("ids") or [])

    async def room_raw_payload(self, room_id: str) -> RoomPayload:
        result = await self._call_result("room_payload", {"id": room_id},
                                         f"Failed to get payload of room {room_id}")
        return RoomPayload.from_dict({**result, "id": result.get("id") or room_id})

    async def room_announce(self, room_id: str) -> str:
        result = await self._call_result("room_announce", {"id": room_id},
                                         f"Failed to get announcement of room {room_id}")
        return result.get("text") or ""

    async def room_announce_set(self, room_id: str, text: str) -> None:
        await self._call("room_announce", {"id": room_id, "text": text},
                         f"Failed to set announcement for room {room_id}")

    async def room_member_list(self, room_id: str) -> List[str]:
        result = await self._call_result("room_member_list", {"id": room_id},
                                         f"Failed to get member list of room {room_id}")
        return list(result.get("memberIds") or [])

    async def room_member_raw_payload(self, room_id: str, contact_id: str) -> RoomMemberPayload:
        result = await self._call_result("room_member_payload", {"id": room_id, "memberId": contact_id},
                                         f"Failed to get payload of member {contact_id} in room {room_id}")
        return RoomMemberPayload.from_dict({**result, "id": result.get("id") or contact_id})

    # Lifecycle

    async def start(self) -> None:
        if not self.connection.is_connected:
            await self.connect()
        await self._call("start", {}, "Failed to start puppet service")

    async def stop(self) -> None:
        try:
            await self._call("stop", {}, "Failed to stop puppet service")
        finally:
            await self.connection.disconnect()

    async def ding(self, data: str) -> None:
        await self._call("ding", {"data": data}, "Failed to ding")

    async def version(self) -> str:
        result = await self._call_result("version", {}, "Failed to get version")
        return result.get("version") or ""

    async def logout(self) -> None:
        await self._call("logout", {}, "Failed to logout")
