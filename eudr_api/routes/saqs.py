"""
/api/saqs -- Self-assessment questionnaires.

A questionnaire is created when a customer assigns it to a supplier and
updated as the supplier answers. Marking it completed stamps completedAt
unless the caller supplies one.
"""

import logging

from fastapi import APIRouter, HTTPException

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import Saq, SaqCreate, SaqUpdate
from eudr_api.routes.activities import record_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/saqs", tags=["SAQs"])


@router.get("/{saq_id}", response_model=Saq, summary="Get a questionnaire")
async def get_saq(saq_id: int, storage: StorageDep, user: CurrentUser) -> Saq:
    saq = storage.get_saq(saq_id)
    if saq is None:
        raise HTTPException(status_code=404, detail="SAQ not found")
    return saq


@router.post("", response_model=Saq, status_code=201, summary="Assign a questionnaire")
async def create_saq(body: SaqCreate, storage: StorageDep, user: CurrentUser) -> Saq:
    saq = storage.create_saq(body)
    logger.info("SAQ %d assigned to supplier %d", saq.id, saq.supplier_id)

    record_activity(
        storage, user,
        type="saq",
        description=f'Questionnaire "{saq.title}" was assigned',
        entity_type="saq",
        entity_id=saq.id,
    )
    return saq


@router.put("/{saq_id}", response_model=Saq, summary="Update a questionnaire")
async def update_saq(saq_id: int, body: SaqUpdate, storage: StorageDep, user: CurrentUser) -> Saq:
    saq = storage.update_saq(saq_id, body)
    if saq is None:
        raise HTTPException(status_code=404, detail="SAQ not found")

    if body.status == "completed":
        description = f'Questionnaire "{saq.title}" was completed'
    else:
        description = f'Questionnaire "{saq.title}" was updated'

    record_activity(
        storage, user,
        type="saq",
        description=description,
        entity_type="saq",
        entity_id=saq.id,
    )
    return saq
