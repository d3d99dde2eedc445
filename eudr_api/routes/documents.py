"""/api/documents -- Certificates, audits and other supplier evidence."""

import logging

from fastapi import APIRouter, HTTPException

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import Document, DocumentCreate
from eudr_api.routes.activities import record_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


@router.get("", response_model=list[Document], summary="List documents")
async def list_documents(storage: StorageDep, user: CurrentUser) -> list[Document]:
    return storage.list_documents()


@router.get("/{document_id}", response_model=Document, summary="Get a document")
async def get_document(document_id: int, storage: StorageDep, user: CurrentUser) -> Document:
    document = storage.get_document(document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.post(
    "",
    response_model=Document,
    status_code=201,
    summary="Register an uploaded document",
    description="uploadedBy is always the logged-in user, whatever the body says.",
)
async def create_document(body: DocumentCreate, storage: StorageDep, user: CurrentUser) -> Document:
    document = storage.create_document(body.model_copy(update={"uploaded_by": user.id}))
    logger.info("Document %d uploaded for supplier %d", document.id, document.supplier_id)

    record_activity(
        storage, user,
        type="document",
        description=f"Document {document.title} was uploaded",
        entity_type="document",
        entity_id=document.id,
    )
    return document
