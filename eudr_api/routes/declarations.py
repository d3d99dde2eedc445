"""
/api/declarations -- Inbound and outbound due-diligence declarations.

Status and risk level drive the dashboard counters. Any status may follow
any other: reviewers can reopen a rejected declaration or approve one
straight from pending.
"""

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Query

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import (
    Declaration,
    DeclarationCreate,
    DeclarationStats,
    DeclarationUpdate,
)
from eudr_api.routes.activities import record_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/declarations", tags=["Declarations"])


@router.get(
    "",
    response_model=list[Declaration],
    summary="List declarations",
    description="Newest first. Pass type=inbound or type=outbound to filter.",
)
async def list_declarations(
    storage: StorageDep,
    user: CurrentUser,
    type: Literal["all", "inbound", "outbound"] = Query(default="all"),
) -> list[Declaration]:
    return storage.list_declarations(type)


@router.get(
    "/stats",
    response_model=DeclarationStats,
    summary="Declaration counters",
    description="Totals per type and per status, recomputed on every call.",
)
async def declaration_stats(storage: StorageDep, user: CurrentUser) -> DeclarationStats:
    return storage.get_declaration_stats()


@router.get("/{declaration_id}", response_model=Declaration, summary="Get a declaration")
async def get_declaration(declaration_id: int, storage: StorageDep, user: CurrentUser) -> Declaration:
    declaration = storage.get_declaration(declaration_id)
    if declaration is None:
        raise HTTPException(status_code=404, detail="Declaration not found")
    return declaration


@router.post("", response_model=Declaration, status_code=201, summary="File a declaration")
async def create_declaration(
    body: DeclarationCreate, storage: StorageDep, user: CurrentUser,
) -> Declaration:
    if body.created_by is None:
        body = body.model_copy(update={"created_by": user.id})

    declaration = storage.create_declaration(body)
    logger.info(
        "Declaration %d (%s, supplier %d) created by user %d",
        declaration.id, declaration.type, declaration.supplier_id, user.id,
    )

    record_activity(
        storage, user,
        type="declaration",
        description=f"New {declaration.type} declaration for {declaration.product_name} was created",
        entity_type="declaration",
        entity_id=declaration.id,
    )
    return declaration


@router.put("/{declaration_id}", response_model=Declaration, summary="Update a declaration")
async def update_declaration(
    declaration_id: int, body: DeclarationUpdate, storage: StorageDep, user: CurrentUser,
) -> Declaration:
    declaration = storage.update_declaration(declaration_id, body)
    if declaration is None:
        raise HTTPException(status_code=404, detail="Declaration not found")

    if "status" in body.model_fields_set:
        description = f"Declaration for {declaration.product_name} marked {declaration.status}"
    else:
        description = f"Declaration for {declaration.product_name} was updated"

    record_activity(
        storage, user,
        type="declaration",
        description=description,
        entity_type="declaration",
        entity_id=declaration.id,
    )
    return declaration
