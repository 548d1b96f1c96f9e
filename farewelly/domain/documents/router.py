"""Document router - uploads, access, sharing"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import UserProfile
from ...shared.responses import Pagination, pagination_params, success_response
from .schemas import DocumentResponse, DocumentUpdate, ShareRequest
from .service import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


def get_document_service(db: Session = Depends(get_db)) -> DocumentService:
    return DocumentService(db)


# ============================================================================
# SHARING (declared before /{document_id} routes)
# ============================================================================


@router.post("/share")
async def share_document(
    data: ShareRequest,
    current_user: UserProfile = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    result = service.share_document(data, current_user)
    if result["already_shared"]:
        return success_response(
            {"already_shared": True}, "All specified users already have access to this document"
        )
    return success_response(
        {
            "already_shared": False,
            "document": DocumentResponse.model_validate(result["document"]),
            "newly_shared_with": result["newly_shared_with"],
            "total_shares": result["total_shares"],
        },
        f"Document shared successfully with {len(result['newly_shared_with'])} new user(s)",
    )


@router.delete("/share")
async def revoke_share(
    document_id: str = Query(...),
    user_id: str = Query(...),
    current_user: UserProfile = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    document = service.revoke_share(document_id, user_id, current_user)
    return success_response(
        {"document": DocumentResponse.model_validate(document), "revoked_from": user_id},
        "Document access revoked",
    )


# ============================================================================
# DOCUMENTS
# ============================================================================


@router.post("", status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    title: str = Form(...),
    type: str = Form(...),
    encrypt: bool = Form(False),
    share_with: Optional[str] = Form(None),
    booking_id: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    current_user: UserProfile = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    contents = await file.read()
    document = service.upload_document(
        current_user,
        file.filename,
        file.content_type,
        contents,
        title,
        type,
        encrypt=encrypt,
        share_with=share_with,
        booking_id=booking_id,
        description=description,
    )
    return success_response(DocumentResponse.model_validate(document), "Document uploaded successfully")


@router.get("")
async def list_documents(
    type: Optional[str] = Query(None),
    booking_id: Optional[str] = Query(None),
    pagination: Pagination = Depends(pagination_params),
    current_user: UserProfile = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    documents, total, stats = service.list_documents(current_user, pagination, type, booking_id)
    return success_response(
        {"documents": [DocumentResponse.model_validate(d) for d in documents], "stats": stats},
        "Documents retrieved successfully",
        pagination.info(total),
    )


@router.get("/{document_id}")
async def get_document(
    document_id: str,
    download: bool = Query(False),
    view: bool = Query(False),
    current_user: UserProfile = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    document, access = service.get_document(document_id, current_user, download, view)
    data = DocumentResponse.model_validate(document).model_dump()
    if access:
        data["access_url"] = access["url"]
        data["expires_in"] = access["expires_in"]
    return success_response(data)


@router.get("/{document_id}/content")
async def get_document_content(
    document_id: str,
    current_user: UserProfile = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    document, body = service.get_content(document_id, current_user)
    return Response(
        content=body,
        media_type=document.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{document.file_name}"'},
    )


@router.put("/{document_id}")
async def update_document(
    document_id: str,
    data: DocumentUpdate,
    current_user: UserProfile = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    document = service.update_document(document_id, data, current_user)
    return success_response(DocumentResponse.model_validate(document), "Document updated successfully")


@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    current_user: UserProfile = Depends(get_current_user),
    service: DocumentService = Depends(get_document_service),
):
    service.delete_document(document_id, current_user)
    return success_response(None, "Document deleted successfully")


__all__ = ["router"]
