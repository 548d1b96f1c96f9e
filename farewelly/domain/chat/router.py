"""Chat router - rooms and messages"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import Pagination, pagination_params, success_response
from .schemas import MessageCreate, MessageResponse, RoomCreate, RoomResponse
from .service import ChatService

router = APIRouter(prefix="/api/chat", tags=["Chat"])


def get_chat_service(db: Session = Depends(get_db)) -> ChatService:
    return ChatService(db)


def room_summary(entry: dict) -> dict:
    data = RoomResponse.model_validate(entry["room"]).model_dump()
    last = entry["last_message"]
    data["last_message"] = MessageResponse.model_validate(last).model_dump() if last else None
    data["unread_count"] = entry["unread_count"]
    return data


# ============================================================================
# ROOMS
# ============================================================================


@router.get("/rooms")
async def list_rooms(
    current_user: UserProfile = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    rooms = service.list_rooms(current_user)
    return success_response([room_summary(r) for r in rooms], "Chat rooms retrieved successfully")


@router.post("/rooms", status_code=201)
async def create_room(
    data: RoomCreate,
    current_user: UserProfile = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    room, created = service.create_room(data, current_user)
    message = "Chat room created successfully" if created else "Chat room already exists"
    return success_response(RoomResponse.model_validate(room), message, created=created)


# ============================================================================
# MESSAGES
# ============================================================================


@router.get("")
async def get_messages(
    room_id: Optional[str] = Query(None),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    """Messages of one room, or the caller's room list when no room_id is given"""
    if not room_id:
        rooms = service.list_rooms(current_user)
        return success_response([room_summary(r) for r in rooms], "Chat rooms retrieved successfully")

    messages, total = service.get_messages(room_id, current_user, pagination)
    return success_response(
        [MessageResponse.model_validate(m) for m in messages],
        "Messages retrieved successfully",
        pagination.info(total),
    )


@router.post("", status_code=201)
async def send_message(
    data: MessageCreate,
    current_user: UserProfile = Depends(get_current_user),
    service: ChatService = Depends(get_chat_service),
):
    message = service.send_message(data, current_user)
    return success_response(MessageResponse.model_validate(message), "Message sent successfully")


__all__ = ["router"]
