"""Chat room creation shared by bookings, director clients and the chat API"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models import ChatParticipant, ChatRoom, UserProfile

logger = logging.getLogger(__name__)

# room type -> the two roles it connects
ROOM_ROLES = {
    "family_director": ("family", "director"),
    "family_venue": ("family", "venue"),
    "director_venue": ("director", "venue"),
}


def generate_room_title(room_type: str, participants: list[UserProfile]) -> str:
    by_role = {p.user_type: p for p in participants}
    roles = ROOM_ROLES.get(room_type)
    if roles and all(role in by_role for role in roles):
        first, second = (by_role[role] for role in roles)
        return f"{first.display_name} & {second.display_name}"
    return f"Group Chat - {', '.join(p.display_name for p in participants)}"


def find_direct_room(db: Session, room_type: str, user_ids: list[str]) -> Optional[ChatRoom]:
    """Find an active room of ``room_type`` whose participants are exactly ``user_ids``"""
    wanted = set(user_ids)
    candidates = (
        db.query(ChatRoom)
        .join(ChatParticipant, ChatParticipant.room_id == ChatRoom.id)
        .filter(
            ChatRoom.room_type == room_type,
            ChatRoom.is_active.is_(True),
            ChatParticipant.user_id.in_(wanted),
        )
        .distinct()
        .all()
    )
    for room in candidates:
        if {p.user_id for p in room.participants} == wanted:
            return room
    return None


def get_or_create_room(
    db: Session,
    room_type: str,
    created_by: UserProfile,
    participants: list[UserProfile],
    title: Optional[str] = None,
    booking_id: Optional[str] = None,
) -> tuple[ChatRoom, bool]:
    """
    Return (room, created). Two-person non-group rooms are reused when one
    already exists for the same pair.
    """
    members = {p.id: p for p in participants}
    members.setdefault(created_by.id, created_by)
    member_list = list(members.values())

    if room_type != "group" and len(member_list) == 2:
        existing = find_direct_room(db, room_type, list(members))
        if existing:
            logger.info(f"🔍 Reusing chat room {existing.id} for {room_type}")
            return existing, False

    room = ChatRoom(
        room_type=room_type,
        title=title or generate_room_title(room_type, member_list),
        booking_id=booking_id,
        created_by=created_by.id,
    )
    db.add(room)
    db.flush()
    for member in member_list:
        db.add(ChatParticipant(room_id=room.id, user_id=member.id, user_type=member.user_type))
    db.commit()
    db.refresh(room)
    logger.info(f"✅ Chat room {room.id} created ({room_type}, {len(member_list)} participants)")
    return room, True


def ensure_room_best_effort(
    db: Session,
    room_type: str,
    created_by: UserProfile,
    participants: list[UserProfile],
    booking_id: Optional[str] = None,
) -> Optional[ChatRoom]:
    """Create (or reuse) a chat room without ever failing the caller"""
    try:
        room, _ = get_or_create_room(db, room_type, created_by, participants, booking_id=booking_id)
        return room
    except Exception as e:
        db.rollback()
        logger.warning(f"⚠️ Chat room creation failed for {room_type}: {e}")
        return None
