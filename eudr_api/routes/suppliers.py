"""
/api/suppliers -- The supplier register.

Suppliers are never deleted. Updates are partial: only the fields sent are
changed, and last_updated moves forward. Each create/update also writes an
activity entry.

The per-supplier sub-resources (documents, declarations, SAQs) live here
too since the dashboard drills into them from the supplier page.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import (
    Declaration,
    Document,
    Saq,
    SaqStats,
    SaqStatus,
    Supplier,
    SupplierCreate,
    SupplierStats,
    SupplierUpdate,
)
from eudr_api.routes.activities import record_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/suppliers", tags=["Suppliers"])


@router.get("", response_model=list[Supplier], summary="List suppliers")
async def list_suppliers(storage: StorageDep, user: CurrentUser) -> list[Supplier]:
    return storage.list_suppliers()


@router.get(
    "/stats",
    response_model=SupplierStats,
    summary="Supplier risk breakdown",
    description="Counts per risk level and the average risk score, computed live.",
)
async def supplier_stats(storage: StorageDep, user: CurrentUser) -> SupplierStats:
    return storage.get_supplier_stats()


@router.get("/{supplier_id}", response_model=Supplier, summary="Get a supplier")
async def get_supplier(supplier_id: int, storage: StorageDep, user: CurrentUser) -> Supplier:
    supplier = storage.get_supplier(supplier_id)
    if supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return supplier


@router.post("", response_model=Supplier, status_code=201, summary="Add a supplier")
async def create_supplier(body: SupplierCreate, storage: StorageDep, user: CurrentUser) -> Supplier:
    supplier = storage.create_supplier(body)
    logger.info("Supplier %d (%s) created by user %d", supplier.id, supplier.name, user.id)

    record_activity(
        storage, user,
        type="supplier",
        description=f"New supplier {supplier.name} was added",
        entity_type="supplier",
        entity_id=supplier.id,
    )
    return supplier


@router.put("/{supplier_id}", response_model=Supplier, summary="Update a supplier")
async def update_supplier(
    supplier_id: int, body: SupplierUpdate, storage: StorageDep, user: CurrentUser,
) -> Supplier:
    supplier = storage.update_supplier(supplier_id, body)
    if supplier is None:
        raise HTTPException(status_code=404, detail="Supplier not found")
    logger.info(
        "Supplier %d updated by user %d: %s",
        supplier.id, user.id, sorted(body.model_fields_set),
    )

    record_activity(
        storage, user,
        type="supplier",
        description=f"Supplier {supplier.name} was updated",
        entity_type="supplier",
        entity_id=supplier.id,
    )
    return supplier


@router.get(
    "/{supplier_id}/documents",
    response_model=list[Document],
    summary="Documents uploaded for a supplier",
)
async def supplier_documents(
    supplier_id: int, storage: StorageDep, user: CurrentUser,
) -> list[Document]:
    return storage.list_documents_by_supplier(supplier_id)


@router.get(
    "/{supplier_id}/declarations",
    response_model=list[Declaration],
    summary="Declarations for a supplier",
    description="Newest first.",
)
async def supplier_declarations(
    supplier_id: int, storage: StorageDep, user: CurrentUser,
) -> list[Declaration]:
    return storage.list_declarations_by_supplier(supplier_id)


@router.get(
    "/{supplier_id}/saqs",
    response_model=list[Saq],
    summary="Questionnaires assigned to a supplier",
    description="Newest first, optionally filtered by status.",
)
async def supplier_saqs(
    supplier_id: int,
    storage: StorageDep,
    user: CurrentUser,
    status: SaqStatus | None = Query(default=None, description="Only SAQs in this status."),
) -> list[Saq]:
    return storage.list_saqs_by_supplier(supplier_id, status.value if status else None)


@router.get(
    "/{supplier_id}/saqs/stats",
    response_model=SaqStats,
    summary="Questionnaire progress for a supplier",
)
async def supplier_saq_stats(supplier_id: int, storage: StorageDep, user: CurrentUser) -> SaqStats:
    return storage.get_saq_stats(supplier_id)
