"""/api/customers -- Customers receiving outbound consignments."""

import logging

from fastapi import APIRouter, HTTPException

from eudr_api.deps import CurrentUser, StorageDep
from eudr_api.models.schemas import (
    Customer,
    CustomerCreate,
    CustomerStats,
    CustomerUpdate,
    Declaration,
    Saq,
)
from eudr_api.routes.activities import record_activity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["Customers"])


def _label(customer: Customer) -> str:
    return customer.display_name or customer.company_name or f"{customer.first_name} {customer.last_name}"


@router.get("", response_model=list[Customer], summary="List customers")
async def list_customers(storage: StorageDep, user: CurrentUser) -> list[Customer]:
    return storage.list_customers()


@router.get("/stats", response_model=CustomerStats, summary="Customer status and risk breakdown")
async def customer_stats(storage: StorageDep, user: CurrentUser) -> CustomerStats:
    return storage.get_customer_stats()


@router.get("/{customer_id}", response_model=Customer, summary="Get a customer")
async def get_customer(customer_id: int, storage: StorageDep, user: CurrentUser) -> Customer:
    customer = storage.get_customer(customer_id)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.post("", response_model=Customer, status_code=201, summary="Add a customer")
async def create_customer(body: CustomerCreate, storage: StorageDep, user: CurrentUser) -> Customer:
    customer = storage.create_customer(body)
    logger.info("Customer %d created by user %d", customer.id, user.id)

    record_activity(
        storage, user,
        type="customer",
        description=f"New customer {_label(customer)} was added",
        entity_type="customer",
        entity_id=customer.id,
    )
    return customer


@router.put("/{customer_id}", response_model=Customer, summary="Update a customer")
async def update_customer(
    customer_id: int, body: CustomerUpdate, storage: StorageDep, user: CurrentUser,
) -> Customer:
    customer = storage.update_customer(customer_id, body)
    if customer is None:
        raise HTTPException(status_code=404, detail="Customer not found")

    record_activity(
        storage, user,
        type="customer",
        description=f"Customer {_label(customer)} was updated",
        entity_type="customer",
        entity_id=customer.id,
    )
    return customer


@router.get("/{customer_id}/saqs", response_model=list[Saq], summary="Questionnaires for a customer")
async def customer_saqs(customer_id: int, storage: StorageDep, user: CurrentUser) -> list[Saq]:
    return storage.list_saqs_by_customer(customer_id)


@router.get(
    "/{customer_id}/declarations",
    response_model=list[Declaration],
    summary="Declarations shipped to a customer",
)
async def customer_declarations(
    customer_id: int, storage: StorageDep, user: CurrentUser,
) -> list[Declaration]:
    return storage.list_declarations_by_customer(customer_id)
