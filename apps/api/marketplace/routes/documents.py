from __future__ import annotations

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from marketplace.core.errors import NotFoundError
from marketplace.dependencies.auth import get_current_user
from marketplace.dependencies.services import get_document_service
from marketplace.models.user import User
from marketplace.schemas.document import DocumentOut
from marketplace.services.document_service import DocumentService

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/upload", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
async def upload_document(
    document: UploadFile = File(...),
    service: DocumentService = Depends(get_document_service),
    _: User = Depends(get_current_user),
):
    content = await document.read()
    return service.upload_document(document.filename, document.content_type, content)


@router.get("/{filename}")
def get_document(filename: str, service: DocumentService = Depends(get_document_service)):
    blob = service.get_document(filename)
    if blob is None:
        raise NotFoundError("Document not found")
    return Response(
        content=blob.data,
        media_type=blob.content_type,
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.delete("/{filename}", status_code=status.HTTP_204_NO_CONTENT)
def delete_document(
    filename: str,
    service: DocumentService = Depends(get_document_service),
    _: User = Depends(get_current_user),
):
    service.delete_document(filename)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
