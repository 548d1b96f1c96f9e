"""Director client service - a director's book of family clients"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...errors import ApiError
from ...models import BOOKING_STATUSES, Booking, DirectorClient, UserProfile
from ...security_utils import sanitize_text
from ...services.chat_rooms import ensure_room_best_effort
from ...services.notification_service import send_notification
from ...shared.responses import Pagination, paginate
from .repository import DirectorClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)

RECENT_BOOKINGS_LIMIT = 5

STATUS_MESSAGES = {
    "active": "Your relationship with the director has been activated",
    "inactive": "Your relationship with the director has been deactivated",
    "archived": "Your relationship with the director has been archived",
}


def empty_booking_stats() -> dict:
    return {"total": 0, **{status: 0 for status in BOOKING_STATUSES}}


class DirectorClientService:
    """Service layer for director client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DirectorClientRepository()

    def _booking_stats(self, director_id: str, family_ids: list[str]) -> dict:
        """family_id -> {total, pending, confirmed, completed, cancelled}"""
        stats = {family_id: empty_booking_stats() for family_id in family_ids}
        if not family_ids:
            return stats
        rows = (
            self.db.query(Booking.family_id, Booking.status, func.count(Booking.id))
            .filter(Booking.director_id == director_id, Booking.family_id.in_(family_ids))
            .group_by(Booking.family_id, Booking.status)
            .all()
        )
        for family_id, status, count in rows:
            entry = stats[family_id]
            entry[status] = entry.get(status, 0) + count
            entry["total"] += count
        return stats

    def list_clients(
        self,
        director: UserProfile,
        pagination: Pagination,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[tuple[DirectorClient, dict]], int]:
        query = self.repo.list_clients(self.db, director.id, status, search)
        clients, total = paginate(query, pagination)
        stats = self._booking_stats(director.id, [c.family_id for c in clients])
        return [(client, stats[client.family_id]) for client in clients], total

    def get_client(self, client_id: str, director: UserProfile) -> DirectorClient:
        client = self.repo.get(self.db, client_id, director.id)
        if not client:
            raise ApiError("Client not found", 404)
        return client

    def get_client_detail(self, client_id: str, director: UserProfile) -> tuple[DirectorClient, dict, list[Booking]]:
        client = self.get_client(client_id, director)
        bookings_query = self.repo.bookings_between(self.db, director.id, client.family_id)
        bookings = bookings_query.all()

        revenue = sum(b.price or 0 for b in bookings)
        stats = {
            "total_bookings": len(bookings),
            "completed_bookings": sum(1 for b in bookings if b.status == "completed"),
            "pending_bookings": sum(1 for b in bookings if b.status == "pending"),
            "cancelled_bookings": sum(1 for b in bookings if b.status == "cancelled"),
            "total_revenue": round(revenue, 2),
            "average_booking_value": round(revenue / len(bookings), 2) if bookings else 0,
        }
        return client, stats, bookings[:RECENT_BOOKINGS_LIMIT]

    def add_client(self, data: ClientCreate, director: UserProfile) -> tuple[DirectorClient, bool]:
        """Returns (client, reactivated)"""
        logger.info(f"📥 Director {director.id} adding family {data.family_id} as client")

        family = self.repo.get_family(self.db, data.family_id)
        if not family:
            raise ApiError("Family not found", 404)

        existing = self.repo.get_by_family(self.db, director.id, family.id)
        if existing and existing.status == "active":
            raise ApiError("Client relationship already exists", 400)

        notes = sanitize_text(data.notes)
        tags = list(data.tags or [])
        if existing:
            existing.status = "active"
            if data.notes is not None:
                existing.notes = notes
            if data.tags is not None:
                existing.tags = tags
            client, reactivated = existing, True
        else:
            client = DirectorClient(
                director_id=director.id, family_id=family.id, status="active", notes=notes, tags=tags
            )
            self.db.add(client)
            reactivated = False
        self.db.commit()
        self.db.refresh(client)
        logger.info(f"✅ Client {client.id} {'reactivated' if reactivated else 'created'}")

        send_notification(
            self.db,
            family.id,
            "system",
            "New Director Connection",
            f"{director.name} has added you as a client. You can now book services and communicate directly.",
            {"director_id": director.id, "client_id": client.id},
        )
        ensure_room_best_effort(self.db, "family_director", director, [family, director])
        return client, reactivated

    def update_client(self, client_id: str, data: ClientUpdate, director: UserProfile) -> DirectorClient:
        client = self.get_client(client_id, director)
        previous_status = client.status

        if data.status is not None:
            client.status = data.status
        if data.notes is not None:
            client.notes = sanitize_text(data.notes)
        if data.tags is not None:
            client.tags = list(data.tags)
        self.db.commit()
        self.db.refresh(client)

        if data.status and data.status != previous_status:
            send_notification(
                self.db,
                client.family_id,
                "system",
                "Relationship Status Updated",
                STATUS_MESSAGES[data.status],
                {"director_id": director.id, "client_id": client.id, "new_status": data.status},
            )
        return client

    def archive_client(self, client_id: str, director: UserProfile) -> DirectorClient:
        client = self.get_client(client_id, director)

        active = (
            self.repo.bookings_between(self.db, director.id, client.family_id)
            .filter(Booking.status.in_(("pending", "confirmed")))
            .count()
        )
        if active:
            raise ApiError("Cannot archive client with active bookings", 400)

        client.status = "archived"
        self.db.commit()
        self.db.refresh(client)
        logger.info(f"⚠️ Client {client.id} archived by director {director.id}")

        send_notification(
            self.db,
            client.family_id,
            "system",
            "Director Relationship Ended",
            f"{director.name} has ended the professional relationship. Your booking history is preserved.",
            {"director_id": director.id, "client_id": client.id},
        )
        return client
