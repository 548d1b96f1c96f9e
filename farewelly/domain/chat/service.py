"""Chat service - rooms and messages between families, directors and venues"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session, selectinload

from ...errors import ApiError
from ...models import CHAT_ROOM_TYPES, ChatMessage, ChatParticipant, ChatRoom, UserProfile
from ...security_utils import sanitize_text
from ...services.chat_rooms import get_or_create_room
from ...services.notification_service import notify_users
from ...shared.responses import Pagination, paginate
from .schemas import MessageCreate, RoomCreate

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def message_preview(content: str) -> str:
    if len(content) > PREVIEW_LENGTH:
        return f"{content[:PREVIEW_LENGTH]}..."
    return content


class ChatService:
    def __init__(self, db: Session):
        self.db = db

    def _get_room_for(self, room_id: str, user: UserProfile) -> ChatRoom:
        room = self.db.query(ChatRoom).filter(ChatRoom.id == room_id).first()
        if not room:
            raise ApiError("Chat room not found", 404)
        if user.id not in {p.user_id for p in room.participants}:
            raise ApiError("Access denied - not a participant in this room", 403)
        return room

    def list_rooms(self, user: UserProfile) -> list[dict]:
        """Rooms the user is in, most recently active first, with last message and unread count"""
        rooms = (
            self.db.query(ChatRoom)
            .options(selectinload(ChatRoom.participants))
            .join(ChatParticipant, ChatParticipant.room_id == ChatRoom.id)
            .filter(ChatParticipant.user_id == user.id, ChatRoom.is_active.is_(True))
            .order_by(ChatRoom.updated_at.desc())
            .all()
        )
        result = []
        for room in rooms:
            messages = room.messages
            unread = sum(1 for m in messages if user.id not in (m.read_by or []))
            result.append(
                {"room": room, "last_message": messages[-1] if messages else None, "unread_count": unread}
            )
        return result

    def create_room(self, data: RoomCreate, user: UserProfile) -> tuple[ChatRoom, bool]:
        if data.room_type not in CHAT_ROOM_TYPES:
            raise ApiError("Invalid chat room type", 400)

        participant_ids = [pid for pid in dict.fromkeys(data.participant_ids) if pid != user.id]
        if not participant_ids:
            raise ApiError("Invalid participants", 400)
        participants = self.db.query(UserProfile).filter(UserProfile.id.in_(participant_ids)).all()
        if len(participants) != len(participant_ids):
            raise ApiError("Invalid participants", 400)

        title = sanitize_text(data.title, max_length=255) if data.title else None
        return get_or_create_room(
            self.db, data.room_type, user, [user, *participants], title=title, booking_id=data.booking_id
        )

    def get_messages(
        self, room_id: str, user: UserProfile, pagination: Pagination
    ) -> tuple[list[ChatMessage], int]:
        """Messages oldest first; everything returned is marked read by the caller"""
        self._get_room_for(room_id, user)
        query = (
            self.db.query(ChatMessage)
            .filter(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.created_at.asc())
        )
        messages, total = paginate(query, pagination)

        marked = 0
        for message in messages:
            read_by = list(message.read_by or [])
            if user.id not in read_by:
                message.read_by = read_by + [user.id]
                marked += 1
        if marked:
            self.db.commit()
            logger.debug(f"Marked {marked} messages read for {user.id} in {room_id}")
        return messages, total

    def send_message(self, data: MessageCreate, user: UserProfile) -> ChatMessage:
        room = self._get_room_for(data.room_id, user)

        content = sanitize_text(data.content)
        if not content:
            raise ApiError("Message cannot be empty", 400)

        message = ChatMessage(
            room_id=room.id,
            sender_id=user.id,
            content=content,
            message_type=data.message_type,
            message_metadata=data.metadata or {},
            read_by=[user.id],
        )
        self.db.add(message)
        room.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(message)
        logger.info(f"✅ Message {message.id} sent to room {room.id}")

        notify_users(
            self.db,
            [p.user_id for p in room.participants],
            "message",
            "New Message",
            f"{user.name}: {message_preview(content)}",
            {"room_id": room.id, "message_id": message.id, "sender_id": user.id},
            exclude=user.id,
        )
        return message

