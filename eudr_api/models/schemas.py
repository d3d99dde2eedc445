"""
EUDR Compliance API -- Pydantic Data Models

Every entity the dashboard tracks is defined here three ways:

  - the stored record (what the store holds and the API returns)
  - a *Create model (the validation schema for new records)
  - an *Update model (every field optional, for partial updates)

Field names are snake_case in Python and camelCase on the wire, which is
what the dashboard front end sends and expects. Both spellings are
accepted on input.

Update models rely on Pydantic's ``model_fields_set`` to tell "not sent"
apart from "sent as null". The store merges only the fields the caller
actually set.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
)
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes from the client are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _lower(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class ApiModel(BaseModel):
    """Base for every model: camelCase aliases, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )


# ---------------------------------------------------------------------------
# Enums -- Constrained choices
# ---------------------------------------------------------------------------

class DeclarationType(str, Enum):
    """Direction of the consignment a declaration covers."""

    inbound = "inbound"      # Received from a supplier
    outbound = "outbound"    # Shipped to a customer


class DeclarationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    review = "review"
    rejected = "rejected"


class RiskLevel(str, Enum):
    """Coarse compliance risk attached to suppliers, customers and declarations."""

    low = "low"
    medium = "medium"
    high = "high"


class SaqStatus(str, Enum):
    pending = "pending"
    in_progress = "in-progress"
    completed = "completed"


# Case-insensitive on input: the seed data and older clients send "Low".
RiskLevelField = Annotated[RiskLevel, BeforeValidator(_lower)]


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserCreate(ApiModel):
    """Registration payload. The password is replaced by its hash before
    it reaches the store."""

    username: str = Field(min_length=1, examples=["jsmith"])
    password: str = Field(min_length=1, examples=["correct-horse"])
    email: str = Field(min_length=3, examples=["jane@example.com"])
    full_name: str | None = Field(default=None, examples=["Jane Smith"])


class User(UserCreate):
    id: int
    avatar: str | None = None
    role: str = "user"
    created_at: UtcDatetime


class UserPublic(ApiModel):
    """A user as the API shows it: everything except the password."""

    id: int
    username: str
    email: str
    full_name: str | None = None
    avatar: str | None = None
    role: str = "user"
    created_at: UtcDatetime


class LoginRequest(ApiModel):
    username: str
    password: str


# ---------------------------------------------------------------------------
# Suppliers
# ---------------------------------------------------------------------------

class SupplierCreate(ApiModel):
    """A supplier in the monitored supply chain."""

    name: str = Field(min_length=1, examples=["EcoFarm Industries"])
    products: str = Field(examples=["Coffee, Cocoa"])
    location: str = Field(default="", examples=["Huila"])
    country: str = Field(default="", examples=["Colombia"])
    category: str = Field(examples=["Tier 1"])
    status: str = Field(examples=["Compliant"])
    risk_level: RiskLevelField = Field(examples=["low"])
    risk_score: int = Field(ge=0, le=100, examples=[85])
    registration_number: str | None = Field(default=None, examples=["REGCOL1234567"])
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    compliance_score: int | None = Field(default=None, ge=0, le=100)


class Supplier(SupplierCreate):
    id: int
    last_updated: UtcDatetime


class SupplierUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1)
    products: str | None = None
    location: str | None = None
    country: str | None = None
    category: str | None = None
    status: str | None = None
    risk_level: RiskLevelField | None = None
    risk_score: int | None = Field(default=None, ge=0, le=100)
    registration_number: str | None = None
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    compliance_score: int | None = Field(default=None, ge=0, le=100)


class SupplierStats(ApiModel):
    total: int
    low_risk: int
    medium_risk: int
    high_risk: int
    average_risk_score: float = Field(
        description="Mean risk score across all suppliers, 0 when there are none.",
    )


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------

class CustomerCreate(ApiModel):
    """A customer receiving outbound consignments.

    Identity, billing and shipping blocks come straight from the customer
    form; the trailing fields carry the EUDR compliance view."""

    type: str = Field(examples=["business"])
    company_name: str | None = Field(default=None, examples=["Nordic Roasters AB"])
    first_name: str
    last_name: str
    display_name: str | None = None
    email: str
    work_phone: str | None = None
    mobile_phone: str | None = None

    billing_attention: str | None = None
    billing_country: str
    billing_address_line1: str
    billing_address_line2: str | None = None
    billing_city: str
    billing_state: str
    billing_postal_code: str

    same_as_billing: bool = True
    shipping_attention: str | None = None
    shipping_country: str | None = None
    shipping_address_line1: str | None = None
    shipping_address_line2: str | None = None
    shipping_city: str | None = None
    shipping_state: str | None = None
    shipping_postal_code: str | None = None

    gst_treatment: str | None = None
    place_of_supply: str | None = None
    pan: str | None = None
    tax_preference: str = "taxable"
    currency: str = "USD"
    payment_terms: str = "dueOnReceipt"
    enable_portal: bool = False
    portal_language: str = "english"

    registration_number: str | None = None
    compliance_score: int = Field(default=50, ge=0, le=100)
    risk_level: RiskLevelField = RiskLevel.medium
    status: str = Field(default="active", examples=["active", "inactive"])


class Customer(CustomerCreate):
    id: int
    created_at: UtcDatetime
    updated_at: UtcDatetime


class CustomerUpdate(ApiModel):
    type: str | None = None
    company_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    email: str | None = None
    work_phone: str | None = None
    mobile_phone: str | None = None

    billing_attention: str | None = None
    billing_country: str | None = None
    billing_address_line1: str | None = None
    billing_address_line2: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_postal_code: str | None = None

    same_as_billing: bool | None = None
    shipping_attention: str | None = None
    shipping_country: str | None = None
    shipping_address_line1: str | None = None
    shipping_address_line2: str | None = None
    shipping_city: str | None = None
    shipping_state: str | None = None
    shipping_postal_code: str | None = None

    gst_treatment: str | None = None
    place_of_supply: str | None = None
    pan: str | None = None
    tax_preference: str | None = None
    currency: str | None = None
    payment_terms: str | None = None
    enable_portal: bool | None = None
    portal_language: str | None = None

    registration_number: str | None = None
    compliance_score: int | None = Field(default=None, ge=0, le=100)
    risk_level: RiskLevelField | None = None
    status: str | None = None


class CustomerStats(ApiModel):
    total: int
    active: int
    inactive: int
    low_risk: int
    medium_risk: int
    high_risk: int
    average_compliance_score: float


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------

class DeclarationCreate(ApiModel):
    """An inbound or outbound consignment and its regulatory status.

    geojson_data holds the plot geolocation the EUDR due-diligence
    statement needs. It is stored as-is."""

    type: DeclarationType = Field(examples=["inbound"])
    supplier_id: int = Field(examples=[1])
    customer_id: int | None = Field(default=None, examples=[2])
    product_name: str = Field(min_length=1, examples=["Arabica Coffee Beans"])
    product_description: str | None = None
    hsn_code: str | None = Field(default=None, examples=["0901.21.00"])
    quantity: int | None = Field(default=None, ge=0, examples=[2500])
    unit: str | None = Field(default=None, examples=["kg"])
    status: DeclarationStatus = DeclarationStatus.pending
    risk_level: RiskLevelField = RiskLevel.medium
    geojson_data: dict[str, Any] | None = None
    start_date: UtcDatetime | None = None
    end_date: UtcDatetime | None = None
    created_by: int | None = Field(
        default=None,
        description="User id of the author. The API fills this from the session when omitted.",
    )
    industry: str | None = Field(default=None, examples=["Food & Beverage"])
    rm_id: str | None = None


class Declaration(DeclarationCreate):
    id: int
    created_by: int
    created_at: UtcDatetime
    last_updated: UtcDatetime


class DeclarationUpdate(ApiModel):
    type: DeclarationType | None = None
    supplier_id: int | None = None
    customer_id: int | None = None
    product_name: str | None = Field(default=None, min_length=1)
    product_description: str | None = None
    hsn_code: str | None = None
    quantity: int | None = Field(default=None, ge=0)
    unit: str | None = None
    status: DeclarationStatus | None = None
    risk_level: RiskLevelField | None = None
    geojson_data: dict[str, Any] | None = None
    start_date: UtcDatetime | None = None
    end_date: UtcDatetime | None = None
    industry: str | None = None
    rm_id: str | None = None


class DeclarationStats(ApiModel):
    total: int
    inbound: int
    outbound: int
    approved: int
    pending: int
    review: int
    rejected: int


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class DocumentCreate(ApiModel):
    title: str = Field(min_length=1, examples=["EcoFarm Certificate"])
    supplier_id: int
    status: str = Field(examples=["Valid", "Pending", "Expired"])
    uploaded_by: int | None = Field(
        default=None,
        description="Always overwritten with the session user by the API.",
    )
    document_type: str = Field(examples=["Certification"])
    file_path: str | None = None
    expires_at: UtcDatetime | None = None


class Document(DocumentCreate):
    id: int
    uploaded_by: int
    uploaded_at: UtcDatetime


# ---------------------------------------------------------------------------
# Activities -- the audit log
# ---------------------------------------------------------------------------

class ActivityCreate(ApiModel):
    """An audit log entry. Written by the route layer after each mutation.

    timestamp is only set by the fixture loader to backdate demo entries;
    live entries take the store's clock."""

    type: str = Field(examples=["supplier"])
    description: str = Field(examples=["New supplier Acme Farms was added"])
    user_id: int
    entity_type: str | None = Field(default=None, examples=["supplier"])
    entity_id: int | None = None
    metadata: dict[str, Any] | None = None
    timestamp: UtcDatetime | None = None


class Activity(ActivityCreate):
    id: int
    timestamp: UtcDatetime


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

class TaskCreate(ApiModel):
    title: str = Field(min_length=1)
    description: str | None = None
    assigned_to: int
    due_date: UtcDatetime | None = None
    status: str = Field(default="pending", examples=["pending", "overdue"])
    priority: str = Field(default="medium", examples=["low", "medium", "high"])


class Task(TaskCreate):
    id: int
    completed: bool = False
    created_at: UtcDatetime
    updated_at: UtcDatetime


class TaskUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    assigned_to: int | None = None
    due_date: UtcDatetime | None = None
    status: str | None = None
    priority: str | None = None
    completed: bool | None = None


# ---------------------------------------------------------------------------
# Risk categories and compliance metrics
# ---------------------------------------------------------------------------

class RiskCategoryCreate(ApiModel):
    name: str = Field(examples=["Deforestation"])
    score: int = Field(ge=0, le=100, examples=[76])
    color: str = Field(examples=["#009ef7"])


class RiskCategory(RiskCategoryCreate):
    id: int


class ComplianceMetricCreate(ApiModel):
    """One point of the compliance time series. date defaults to now."""

    date: UtcDatetime | None = None
    overall_compliance: int = Field(ge=0, le=100, examples=[78])
    document_status: int = Field(ge=0, le=100, examples=[84])
    supplier_compliance: int = Field(ge=0, le=100, examples=[86])
    risk_level: str = Field(examples=["Medium"])
    issues_detected: int = Field(ge=0, examples=[17])


class ComplianceMetric(ComplianceMetricCreate):
    id: int
    date: UtcDatetime


# ---------------------------------------------------------------------------
# Self-Assessment Questionnaires
# ---------------------------------------------------------------------------

class SaqCreate(ApiModel):
    """A questionnaire assigned to a supplier on behalf of a customer.

    answers is an opaque JSON object; the store never looks inside it."""

    title: str = Field(min_length=1, examples=["EUDR Compliance Self-Declaration"])
    description: str
    supplier_id: int
    customer_id: int
    status: SaqStatus = SaqStatus.pending
    completed_at: UtcDatetime | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    answers: dict[str, Any] | None = None


class Saq(SaqCreate):
    id: int
    created_at: UtcDatetime
    updated_at: UtcDatetime


class SaqUpdate(ApiModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    supplier_id: int | None = None
    customer_id: int | None = None
    status: SaqStatus | None = None
    completed_at: UtcDatetime | None = None
    score: int | None = Field(default=None, ge=0, le=100)
    answers: dict[str, Any] | None = None


class SaqStats(ApiModel):
    total: int
    pending: int
    in_progress: int
    completed: int


# ---------------------------------------------------------------------------
# Dashboard and system
# ---------------------------------------------------------------------------

class DashboardData(ApiModel):
    """Everything the dashboard landing page renders in one call."""

    metrics: ComplianceMetric | None = Field(
        description="Most recent compliance metric, or null before any exist.",
    )
    risk_categories: list[RiskCategory]
    recent_activities: list[Activity]
    upcoming_tasks: list[Task]
    suppliers: list[Supplier]
    declaration_stats: DeclarationStats


class HealthResponse(ApiModel):
    status: str = Field(examples=["healthy"])
    version: str = Field(examples=["0.1.0"])
    storage: str = Field(default="memory", examples=["memory"])
    records_stored: dict[str, int] = Field(
        description="Number of records held per collection.",
    )
