"""
Demo data.

seed_demo_data() fills an empty store with a small, fixed supply chain:
four suppliers (coffee, palm oil, timber, soy), their declarations,
documents and questionnaires, a handful of tasks and audit entries, and
six months of compliance history. All dates are relative to ``now`` so
the dashboard always looks current.

Nothing here runs on import. create_app() calls it only when
EUDR_SEED_DEMO_DATA is set; tests call it directly.
"""

import logging
import random
from datetime import datetime, timedelta

from eudr_api.models.schemas import (
    ActivityCreate,
    ComplianceMetricCreate,
    CustomerCreate,
    DeclarationCreate,
    DocumentCreate,
    RiskCategoryCreate,
    SaqCreate,
    SupplierCreate,
    TaskCreate,
    UserCreate,
)
from eudr_api.security import hash_password
from eudr_api.store import Storage, months_before

logger = logging.getLogger(__name__)

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "password123"

HISTORY_MONTHS = 6

RISK_CATEGORIES = [
    {"name": "Environmental", "score": 68, "color": "#ffc700"},
    {"name": "Social", "score": 82, "color": "#50cd89"},
    {"name": "Governance", "score": 59, "color": "#f1416c"},
    {"name": "Deforestation", "score": 76, "color": "#009ef7"},
]

SUPPLIERS = [
    {
        "name": "EcoFarm Industries",
        "products": "Coffee, Cocoa",
        "category": "Tier 1",
        "status": "Compliant",
        "risk_level": "Low",
        "risk_score": 85,
        "country": "Colombia",
        "location": "Huila",
        "registration_number": "REGCOL1234567",
        "contact_person": "Maria Rodriguez",
        "email": "maria@ecofarm.example",
        "phone": "+571234567890",
        "compliance_score": 92,
    },
    {
        "name": "Tropical Harvest Ltd",
        "products": "Palm Oil",
        "category": "Tier 1",
        "status": "Pending Review",
        "risk_level": "Medium",
        "risk_score": 65,
        "country": "Indonesia",
        "location": "Riau",
        "registration_number": "REGIDN7654321",
        "contact_person": "Budi Santoso",
        "email": "budi@tropical.example",
        "phone": "+62123456789",
        "compliance_score": 78,
    },
    {
        "name": "Global Forestry Co.",
        "products": "Timber, Rubber",
        "category": "Tier 2",
        "status": "Non-Compliant",
        "risk_level": "High",
        "risk_score": 30,
        "country": "Brazil",
        "location": "Pará",
        "registration_number": "REGBRA9876543",
        "contact_person": "Carlos Silva",
        "email": "carlos@globalforestry.example",
        "phone": "+5521987654321",
        "compliance_score": 45,
    },
    {
        "name": "Natural Nutrients Inc.",
        "products": "Soy, Corn",
        "category": "Tier 1",
        "status": "Compliant",
        "risk_level": "Low",
        "risk_score": 90,
        "country": "USA",
        "location": "Iowa",
        "registration_number": "REGUSA1122334",
        "contact_person": "Jennifer Adams",
        "email": "jennifer@nutrients.example",
        "phone": "+1234567890",
        "compliance_score": 95,
    },
]

CUSTOMERS = [
    {
        "type": "business",
        "company_name": "Nordic Roasters AB",
        "first_name": "Erik",
        "last_name": "Lindqvist",
        "email": "erik@nordicroasters.example",
        "billing_country": "Sweden",
        "billing_address_line1": "Kungsgatan 12",
        "billing_city": "Stockholm",
        "billing_state": "Stockholm",
        "billing_postal_code": "111 43",
        "currency": "EUR",
        "registration_number": "SE5566778899",
        "compliance_score": 88,
        "risk_level": "low",
    },
    {
        "type": "business",
        "company_name": "Chocolat Lumière SARL",
        "first_name": "Claire",
        "last_name": "Dubois",
        "email": "claire@lumiere.example",
        "billing_country": "France",
        "billing_address_line1": "8 Rue de Rivoli",
        "billing_city": "Paris",
        "billing_state": "Île-de-France",
        "billing_postal_code": "75004",
        "currency": "EUR",
        "registration_number": "FR40123456824",
        "compliance_score": 72,
        "risk_level": "medium",
    },
    {
        "type": "business",
        "company_name": "Hanse Möbelwerk GmbH",
        "first_name": "Jonas",
        "last_name": "Becker",
        "email": "jonas@hansemoebel.example",
        "billing_country": "Germany",
        "billing_address_line1": "Speicherstadt 3",
        "billing_city": "Hamburg",
        "billing_state": "Hamburg",
        "billing_postal_code": "20457",
        "currency": "EUR",
        "registration_number": "DE811907980",
        "compliance_score": 54,
        "risk_level": "high",
    },
    {
        "type": "individual",
        "first_name": "Sofia",
        "last_name": "Rossi",
        "email": "sofia.rossi@example.com",
        "billing_country": "Italy",
        "billing_address_line1": "Via Roma 21",
        "billing_city": "Milano",
        "billing_state": "Lombardia",
        "billing_postal_code": "20121",
        "currency": "EUR",
        "status": "inactive",
    },
]

DOCUMENTS = [
    {"title": "EcoFarm Certificate", "supplier_id": 1, "status": "Valid", "document_type": "Certification"},
    {"title": "Tropical Harvest Audit", "supplier_id": 2, "status": "Pending", "document_type": "Audit"},
    {"title": "Global Forestry Assessment", "supplier_id": 3, "status": "Expired", "document_type": "Assessment"},
    {"title": "Natural Nutrients Compliance", "supplier_id": 4, "status": "Valid", "document_type": "Compliance"},
]

# (activity, hours before now)
ACTIVITIES = [
    ({
        "type": "document",
        "description": "Supplier certification for EcoFarm Industries uploaded by Jane Smith",
        "entity_type": "document",
        "entity_id": 1,
    }, 3),
    ({
        "type": "risk",
        "description": "Risk level for Tropical Harvest Ltd changed from Low to Medium",
        "entity_type": "supplier",
        "entity_id": 2,
    }, 24),
    ({
        "type": "compliance",
        "description": "Natural Nutrients Inc. has passed all compliance requirements",
        "entity_type": "supplier",
        "entity_id": 4,
    }, 48),
    ({
        "type": "issue",
        "description": "Missing documentation for Global Forestry Co. - action required",
        "entity_type": "supplier",
        "entity_id": 3,
    }, 72),
]


def _declarations(now: datetime) -> list[dict]:
    one_month_ago = months_before(now, 1)
    two_months_ago = months_before(now, 2)
    three_months_ago = months_before(now, 3)

    return [
        {
            "type": "inbound",
            "supplier_id": 1,
            "product_name": "Arabica Coffee Beans",
            "product_description": "Shade-grown coffee beans from Guatemala highlands",
            "hsn_code": "0901.21.00",
            "quantity": 2500,
            "unit": "kg",
            "status": "approved",
            "risk_level": "low",
            "start_date": three_months_ago,
            "end_date": one_month_ago,
            "industry": "Food & Beverage",
        },
        {
            "type": "outbound",
            "supplier_id": 1,
            "customer_id": 1,
            "product_name": "Roasted Coffee Blend",
            "product_description": "Medium roast coffee blend for export",
            "hsn_code": "0901.22.00",
            "quantity": 1800,
            "unit": "kg",
            "status": "pending",
            "risk_level": "medium",
            "start_date": two_months_ago,
            "industry": "Food & Beverage",
        },
        {
            "type": "inbound",
            "supplier_id": 2,
            "product_name": "Crude Palm Oil",
            "product_description": "Unrefined palm oil from sustainable plantations",
            "hsn_code": "1511.10.00",
            "quantity": 15000,
            "unit": "liters",
            "status": "review",
            "risk_level": "medium",
            "start_date": one_month_ago,
            "industry": "Agriculture",
        },
        {
            "type": "inbound",
            "supplier_id": 3,
            "product_name": "Tropical Hardwood",
            "product_description": "FSC-certified mahogany timber",
            "hsn_code": "4407.21.00",
            "quantity": 85,
            "unit": "m³",
            "status": "rejected",
            "risk_level": "high",
            "start_date": two_months_ago,
            "industry": "Forestry",
            "geojson_data": {
                "type": "Polygon",
                "coordinates": [[
                    [-52.10, -3.20], [-52.05, -3.20], [-52.05, -3.15],
                    [-52.10, -3.15], [-52.10, -3.20],
                ]],
            },
        },
        {
            "type": "outbound",
            "supplier_id": 4,
            "customer_id": 3,
            "product_name": "Organic Soy Protein",
            "product_description": "Plant-based protein isolate",
            "hsn_code": "2106.10.00",
            "quantity": 5000,
            "unit": "kg",
            "status": "approved",
            "risk_level": "low",
            "start_date": three_months_ago,
            "industry": "Food & Beverage",
        },
    ]


def _tasks(now: datetime) -> list[dict]:
    return [
        {
            "title": "Review supplier documentation for Global Forestry Co.",
            "description": "Complete review of missing documentation",
            "due_date": now - timedelta(days=2),
            "status": "overdue",
            "priority": "high",
        },
        {
            "title": "Schedule risk assessment meeting with Tropical Harvest",
            "description": "Arrange meeting to discuss risk factors",
            "due_date": now,
            "status": "pending",
            "priority": "medium",
        },
        {
            "title": "Prepare quarterly compliance report for executive team",
            "description": "Create comprehensive report of compliance status",
            "due_date": now + timedelta(days=3),
            "status": "pending",
            "priority": "medium",
        },
        {
            "title": "Update supplier information for EcoFarm Industries",
            "description": "Verify and update all supplier details",
            "due_date": now + timedelta(days=5),
            "status": "pending",
            "priority": "low",
        },
    ]


def _saqs(now: datetime) -> list[dict]:
    return [
        {
            "title": "Annual Deforestation Risk Assessment",
            "description": "Annual self-assessment questionnaire for deforestation risk in your supply chain",
            "supplier_id": 1,
            "customer_id": 2,
            "status": "completed",
            "completed_at": now - timedelta(days=14),
            "score": 87,
            "answers": {
                "supplyChainMappingComplete": True,
                "documentationVerified": True,
                "riskAssessmentConducted": True,
                "mitigationMeasuresImplemented": True,
                "certificationStatus": "Certified",
                "traceabilityVerified": "Full",
                "productCategory": "Coffee",
                "geographicSource": "Guatemala, Colombia",
                "conversionMeasures": "No conversion of natural forests",
                "forestPreservationRating": 4,
                "thirdPartyAudits": "Verified by Rainforest Alliance",
            },
        },
        {
            "title": "EUDR Compliance Self-Declaration",
            "description": "Self-assessment of compliance with EU Deforestation Regulation requirements",
            "supplier_id": 1,
            "customer_id": 3,
            "status": "completed",
            "completed_at": months_before(now, 1),
            "score": 92,
            "answers": {
                "coordinateBasedMapping": True,
                "legalityVerification": True,
                "riskAnalysis": True,
                "geolocationData": "Available for 92% of production areas",
                "certifications": "Rainforest Alliance, Organic, Fair Trade",
                "indigenousConsultation": "Full FPIC process documented",
                "deforestationProtocols": "Zero deforestation commitment with satellite monitoring",
            },
        },
        {
            "title": "Supplier Sustainability Assessment",
            "description": "Annual assessment of overall sustainability practices",
            "supplier_id": 2,
            "customer_id": 1,
            "status": "in-progress",
            "answers": {
                "environmentalPolicy": True,
                "emissionsTracking": "Partial",
                "waterUsage": "Monitoring in place, 15% reduction target",
                "currentChallenges": "Transitioning to fully organic production",
            },
        },
        {
            "title": "Social Compliance Questionnaire",
            "description": "Assessment of labor practices and social responsibility",
            "supplier_id": 1,
            "customer_id": 4,
            "status": "pending",
        },
    ]


def _compliance_history(now: datetime, rng: random.Random) -> list[ComplianceMetricCreate]:
    """One entry per month going back HISTORY_MONTHS, wobbling around 75%."""
    history = []
    for i in range(HISTORY_MONTHS):
        wobble = rng.randint(-5, 4)
        overall = max(50, min(90, 75 + wobble))
        history.append(ComplianceMetricCreate(
            # Keep month 0 just behind "now" so the headline metric stays current.
            date=months_before(now, i) - timedelta(seconds=1),
            overall_compliance=overall,
            document_status=max(50, min(90, 80 + wobble)),
            supplier_compliance=max(50, min(90, 82 + wobble)),
            risk_level="Low" if overall > 75 else "Medium",
            issues_detected=20 - overall // 5,
        ))
    return history


def seed_demo_data(storage: Storage, now: datetime | None = None, seed: int = 42) -> None:
    """Load the demo fixtures into an empty store."""
    now = now or storage.now()
    rng = random.Random(seed)

    admin = storage.create_user(UserCreate(
        username=ADMIN_USERNAME,
        password=hash_password(ADMIN_PASSWORD),
        email="admin@example.com",
        full_name="Admin User",
    ))

    for category in RISK_CATEGORIES:
        storage.create_risk_category(RiskCategoryCreate(**category))

    for supplier in SUPPLIERS:
        storage.create_supplier(SupplierCreate(**supplier))

    for customer in CUSTOMERS:
        storage.create_customer(CustomerCreate(**customer))

    for declaration in _declarations(now):
        storage.create_declaration(DeclarationCreate(**declaration, created_by=admin.id))

    for document in DOCUMENTS:
        storage.create_document(DocumentCreate(**document, uploaded_by=admin.id))

    for task in _tasks(now):
        storage.create_task(TaskCreate(**task, assigned_to=admin.id))

    for activity, hours_ago in ACTIVITIES:
        storage.create_activity(ActivityCreate(
            **activity,
            user_id=admin.id,
            timestamp=now - timedelta(hours=hours_ago),
        ))

    storage.create_compliance_metrics(ComplianceMetricCreate(
        date=now,
        overall_compliance=78,
        document_status=84,
        supplier_compliance=86,
        risk_level="Medium",
        issues_detected=17,
    ))
    for metric in _compliance_history(now, rng):
        storage.create_compliance_metrics(metric)

    for saq in _saqs(now):
        storage.create_saq(SaqCreate(**saq))

    logger.info("Seeded demo data: %s", storage.counts())
