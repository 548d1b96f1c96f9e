"""Director client router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_user_type
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import Pagination, pagination_params, success_response
from ..bookings.schemas import BookingResponse
from .schemas import ClientCreate, ClientResponse, ClientUpdate
from .service import DirectorClientService

router = APIRouter(prefix="/api/director/clients", tags=["Director Clients"])

director_only = require_user_type("director", message="Access denied. Director access required")


def get_director_client_service(db: Session = Depends(get_db)) -> DirectorClientService:
    """Dependency injection for DirectorClientService"""
    return DirectorClientService(db)


@router.get("")
async def list_clients(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(director_only),
    service: DirectorClientService = Depends(get_director_client_service),
):
    rows, total = service.list_clients(current_user, pagination, status, search)
    clients = []
    for client, booking_stats in rows:
        data = ClientResponse.model_validate(client).model_dump()
        data["booking_stats"] = booking_stats
        clients.append(data)
    return success_response(clients, "Clients retrieved successfully", pagination.info(total))


@router.post("", status_code=201)
async def add_client(
    data: ClientCreate,
    current_user: UserProfile = Depends(director_only),
    service: DirectorClientService = Depends(get_director_client_service),
):
    client, reactivated = service.add_client(data, current_user)
    message = "Client relationship reactivated" if reactivated else "Client added successfully"
    return success_response(ClientResponse.model_validate(client), message)


@router.get("/{client_id}")
async def get_client(
    client_id: str,
    current_user: UserProfile = Depends(director_only),
    service: DirectorClientService = Depends(get_director_client_service),
):
    """Client with booking statistics and recent activity"""
    client, stats, recent = service.get_client_detail(client_id, current_user)
    return success_response(
        {
            "client": ClientResponse.model_validate(client),
            "stats": stats,
            "recent_bookings": [BookingResponse.model_validate(b) for b in recent],
        }
    )


@router.put("/{client_id}")
async def update_client(
    client_id: str,
    data: ClientUpdate,
    current_user: UserProfile = Depends(director_only),
    service: DirectorClientService = Depends(get_director_client_service),
):
    client = service.update_client(client_id, data, current_user)
    return success_response(ClientResponse.model_validate(client), "Client updated successfully")


@router.delete("/{client_id}")
async def archive_client(
    client_id: str,
    current_user: UserProfile = Depends(director_only),
    service: DirectorClientService = Depends(get_director_client_service),
):
    client = service.archive_client(client_id, current_user)
    return success_response(
        ClientResponse.model_validate(client), "Client relationship archived successfully"
    )


__all__ = ["router"]
