"""
In-memory data store.

One dict per entity type, keyed by an auto-incrementing integer id, plus
one counter per type. Everything lives in process memory and is lost on
restart -- there is no persistence layer behind this.

Storage is the contract the route layer codes against. MemStorage is the
only implementation. It is constructed explicitly (see main.create_app)
and reached through a FastAPI dependency, never imported as a global.

Contract, uniform across entity families:
  - get_*     -> the record, or None on a miss (never raises)
  - create_*  -> assigns id + timestamps, returns the stored record
  - update_*  -> merges only the fields the caller set, refreshes the
                 modification timestamp, returns None if the id is absent
  - list_*    -> a list, empty when nothing matches
  - *_stats   -> recomputed from the current records on every call

Every record handed out is a deep copy, so callers can never mutate
stored state by accident.
"""

import calendar
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol, TypeVar

from pydantic import BaseModel

from eudr_api.models.schemas import (
    Activity,
    ActivityCreate,
    ComplianceMetric,
    ComplianceMetricCreate,
    Customer,
    CustomerCreate,
    CustomerStats,
    CustomerUpdate,
    Declaration,
    DeclarationCreate,
    DeclarationStats,
    DeclarationUpdate,
    Document,
    DocumentCreate,
    RiskCategory,
    RiskCategoryCreate,
    Saq,
    SaqCreate,
    SaqStats,
    SaqUpdate,
    Supplier,
    SupplierCreate,
    SupplierStats,
    SupplierUpdate,
    Task,
    TaskCreate,
    TaskUpdate,
    User,
    UserCreate,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def months_before(moment: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping the day to the target
    month's length (31 March minus one month is 28/29 February)."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class Storage(Protocol):
    """Operations the route and auth layers rely on."""

    def now(self) -> datetime: ...

    # Users
    def get_user(self, user_id: int) -> User | None: ...
    def get_user_by_username(self, username: str) -> User | None: ...
    def get_user_by_email(self, email: str) -> User | None: ...
    def create_user(self, data: UserCreate) -> User: ...
    def list_users(self) -> list[User]: ...

    # Suppliers
    def get_supplier(self, supplier_id: int) -> Supplier | None: ...
    def create_supplier(self, data: SupplierCreate) -> Supplier: ...
    def update_supplier(self, supplier_id: int, patch: SupplierUpdate) -> Supplier | None: ...
    def list_suppliers(self) -> list[Supplier]: ...
    def get_supplier_stats(self) -> SupplierStats: ...

    # Customers
    def get_customer(self, customer_id: int) -> Customer | None: ...
    def create_customer(self, data: CustomerCreate) -> Customer: ...
    def update_customer(self, customer_id: int, patch: CustomerUpdate) -> Customer | None: ...
    def list_customers(self) -> list[Customer]: ...
    def get_customer_stats(self) -> CustomerStats: ...

    # Declarations
    def get_declaration(self, declaration_id: int) -> Declaration | None: ...
    def create_declaration(self, data: DeclarationCreate) -> Declaration: ...
    def update_declaration(
        self, declaration_id: int, patch: DeclarationUpdate
    ) -> Declaration | None: ...
    def list_declarations(self, type: str | None = None) -> list[Declaration]: ...
    def list_declarations_by_supplier(self, supplier_id: int) -> list[Declaration]: ...
    def list_declarations_by_customer(self, customer_id: int) -> list[Declaration]: ...
    def get_declaration_stats(self) -> DeclarationStats: ...

    # Documents
    def get_document(self, document_id: int) -> Document | None: ...
    def create_document(self, data: DocumentCreate) -> Document: ...
    def list_documents_by_supplier(self, supplier_id: int) -> list[Document]: ...
    def list_documents(self) -> list[Document]: ...

    # Activities
    def create_activity(self, data: ActivityCreate) -> Activity: ...
    def list_recent_activities(self, limit: int) -> list[Activity]: ...

    # Tasks
    def get_task(self, task_id: int) -> Task | None: ...
    def create_task(self, data: TaskCreate) -> Task: ...
    def update_task(self, task_id: int, patch: TaskUpdate) -> Task | None: ...
    def list_tasks_by_assignee(self, user_id: int) -> list[Task]: ...
    def list_upcoming_tasks(self, limit: int) -> list[Task]: ...

    # Risk categories
    def get_risk_category(self, category_id: int) -> RiskCategory | None: ...
    def create_risk_category(self, data: RiskCategoryCreate) -> RiskCategory: ...
    def list_risk_categories(self) -> list[RiskCategory]: ...

    # Compliance metrics
    def get_current_compliance_metrics(self) -> ComplianceMetric | None: ...
    def create_compliance_metrics(self, data: ComplianceMetricCreate) -> ComplianceMetric: ...
    def get_compliance_history(self, months: int) -> list[ComplianceMetric]: ...

    # Self-Assessment Questionnaires
    def get_saq(self, saq_id: int) -> Saq | None: ...
    def create_saq(self, data: SaqCreate) -> Saq: ...
    def update_saq(self, saq_id: int, patch: SaqUpdate) -> Saq | None: ...
    def list_saqs_by_supplier(self, supplier_id: int, status: str | None = None) -> list[Saq]: ...
    def list_saqs_by_customer(self, customer_id: int) -> list[Saq]: ...
    def get_saq_stats(self, supplier_id: int) -> SaqStats: ...

    def counts(self) -> dict[str, int]: ...


class MemStorage:
    """Dict-backed Storage. Linear scans and sorts, no indexes.

    clock is injectable so tests can pin "now"; it must return aware UTC
    datetimes. Construction leaves every collection empty -- demo data is
    loaded separately by eudr_api.seed.seed_demo_data."""

    def __init__(self, clock: Clock = utcnow):
        self._clock = clock

        self._users: dict[int, User] = {}
        self._suppliers: dict[int, Supplier] = {}
        self._customers: dict[int, Customer] = {}
        self._declarations: dict[int, Declaration] = {}
        self._documents: dict[int, Document] = {}
        self._activities: dict[int, Activity] = {}
        self._tasks: dict[int, Task] = {}
        self._risk_categories: dict[int, RiskCategory] = {}
        self._compliance_metrics: dict[int, ComplianceMetric] = {}
        self._saqs: dict[int, Saq] = {}

        # Next id to hand out, per collection. Never decremented.
        self._counters: dict[str, int] = {
            "users": 1,
            "suppliers": 1,
            "customers": 1,
            "declarations": 1,
            "documents": 1,
            "activities": 1,
            "tasks": 1,
            "risk_categories": 1,
            "compliance_metrics": 1,
            "saqs": 1,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def now(self) -> datetime:
        return self._clock()

    def _next_id(self, collection: str) -> int:
        next_id = self._counters[collection]
        self._counters[collection] = next_id + 1
        return next_id

    def _touch(self, previous: datetime) -> datetime:
        """Modification time for an update: the clock, nudged forward if
        needed so it is strictly after the previous value."""
        now = self._clock()
        if now <= previous:
            now = previous + timedelta(microseconds=1)
        return now

    @staticmethod
    def _copy(record: M | None) -> M | None:
        if record is None:
            return None
        return record.model_copy(deep=True)

    @staticmethod
    def _copies(records) -> list:
        return [r.model_copy(deep=True) for r in records]

    @staticmethod
    def _merge(model: type[M], current: M, patch: BaseModel, **stamps) -> M:
        """Shallow merge of the fields set on patch into current.

        The result is re-validated, so a patch that nulls a required field
        raises pydantic.ValidationError instead of corrupting the record."""
        changes = patch.model_dump(exclude_unset=True)
        return model.model_validate({**current.model_dump(), **changes, **stamps})

    @staticmethod
    def _newest_first(records):
        return sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        return self._copy(self._users.get(user_id))

    def get_user_by_username(self, username: str) -> User | None:
        for user in self._users.values():
            if user.username == username:
                return self._copy(user)
        return None

    def get_user_by_email(self, email: str) -> User | None:
        for user in self._users.values():
            if user.email == email:
                return self._copy(user)
        return None

    def create_user(self, data: UserCreate) -> User:
        user = User.model_validate({
            **data.model_dump(),
            "id": self._next_id("users"),
            "role": "user",
            "avatar": None,
            "created_at": self.now(),
        })
        self._users[user.id] = user
        logger.debug("Created user %d (%s)", user.id, user.username)
        return self._copy(user)

    def list_users(self) -> list[User]:
        return self._copies(self._users.values())

    # ------------------------------------------------------------------
    # Suppliers
    # ------------------------------------------------------------------

    def get_supplier(self, supplier_id: int) -> Supplier | None:
        return self._copy(self._suppliers.get(supplier_id))

    def create_supplier(self, data: SupplierCreate) -> Supplier:
        supplier = Supplier.model_validate({
            **data.model_dump(),
            "id": self._next_id("suppliers"),
            "last_updated": self.now(),
        })
        self._suppliers[supplier.id] = supplier
        return self._copy(supplier)

    def update_supplier(self, supplier_id: int, patch: SupplierUpdate) -> Supplier | None:
        current = self._suppliers.get(supplier_id)
        if current is None:
            return None
        updated = self._merge(
            Supplier, current, patch, last_updated=self._touch(current.last_updated),
        )
        self._suppliers[supplier_id] = updated
        return self._copy(updated)

    def list_suppliers(self) -> list[Supplier]:
        return self._copies(self._suppliers.values())

    def get_supplier_stats(self) -> SupplierStats:
        counts = {"low": 0, "medium": 0, "high": 0}
        score_total = 0
        for supplier in self._suppliers.values():
            counts[supplier.risk_level] += 1
            score_total += supplier.risk_score

        total = len(self._suppliers)
        return SupplierStats(
            total=total,
            low_risk=counts["low"],
            medium_risk=counts["medium"],
            high_risk=counts["high"],
            average_risk_score=round(score_total / total, 1) if total else 0.0,
        )

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def get_customer(self, customer_id: int) -> Customer | None:
        return self._copy(self._customers.get(customer_id))

    def create_customer(self, data: CustomerCreate) -> Customer:
        now = self.now()
        customer = Customer.model_validate({
            **data.model_dump(),
            "id": self._next_id("customers"),
            "created_at": now,
            "updated_at": now,
        })
        self._customers[customer.id] = customer
        return self._copy(customer)

    def update_customer(self, customer_id: int, patch: CustomerUpdate) -> Customer | None:
        current = self._customers.get(customer_id)
        if current is None:
            return None
        updated = self._merge(
            Customer, current, patch, updated_at=self._touch(current.updated_at),
        )
        self._customers[customer_id] = updated
        return self._copy(updated)

    def list_customers(self) -> list[Customer]:
        return self._copies(self._customers.values())

    def get_customer_stats(self) -> CustomerStats:
        risk = {"low": 0, "medium": 0, "high": 0}
        active = 0
        score_total = 0
        for customer in self._customers.values():
            risk[customer.risk_level] += 1
            if customer.status == "active":
                active += 1
            score_total += customer.compliance_score

        total = len(self._customers)
        return CustomerStats(
            total=total,
            active=active,
            inactive=total - active,
            low_risk=risk["low"],
            medium_risk=risk["medium"],
            high_risk=risk["high"],
            average_compliance_score=round(score_total / total, 1) if total else 0.0,
        )

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def get_declaration(self, declaration_id: int) -> Declaration | None:
        return self._copy(self._declarations.get(declaration_id))

    def create_declaration(self, data: DeclarationCreate) -> Declaration:
        now = self.now()
        declaration = Declaration.model_validate({
            **data.model_dump(),
            "id": self._next_id("declarations"),
            "created_at": now,
            "last_updated": now,
        })
        self._declarations[declaration.id] = declaration
        return self._copy(declaration)

    def update_declaration(
        self, declaration_id: int, patch: DeclarationUpdate
    ) -> Declaration | None:
        current = self._declarations.get(declaration_id)
        if current is None:
            return None
        updated = self._merge(
            Declaration, current, patch, last_updated=self._touch(current.last_updated),
        )
        self._declarations[declaration_id] = updated
        return self._copy(updated)

    def list_declarations(self, type: str | None = None) -> list[Declaration]:
        declarations = list(self._declarations.values())
        if type and type != "all":
            declarations = [d for d in declarations if d.type == type]
        return self._copies(self._newest_first(declarations))

    def list_declarations_by_supplier(self, supplier_id: int) -> list[Declaration]:
        matches = [d for d in self._declarations.values() if d.supplier_id == supplier_id]
        return self._copies(self._newest_first(matches))

    def list_declarations_by_customer(self, customer_id: int) -> list[Declaration]:
        matches = [d for d in self._declarations.values() if d.customer_id == customer_id]
        return self._copies(self._newest_first(matches))

    def get_declaration_stats(self) -> DeclarationStats:
        counts = {
            "inbound": 0, "outbound": 0,
            "approved": 0, "pending": 0, "review": 0, "rejected": 0,
        }
        for declaration in self._declarations.values():
            counts[declaration.type] += 1
            counts[declaration.status] += 1
        return DeclarationStats(total=len(self._declarations), **counts)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def get_document(self, document_id: int) -> Document | None:
        return self._copy(self._documents.get(document_id))

    def create_document(self, data: DocumentCreate) -> Document:
        document = Document.model_validate({
            **data.model_dump(),
            "id": self._next_id("documents"),
            "uploaded_at": self.now(),
        })
        self._documents[document.id] = document
        return self._copy(document)

    def list_documents_by_supplier(self, supplier_id: int) -> list[Document]:
        return self._copies(
            d for d in self._documents.values() if d.supplier_id == supplier_id
        )

    def list_documents(self) -> list[Document]:
        return self._copies(self._documents.values())

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------

    def create_activity(self, data: ActivityCreate) -> Activity:
        activity = Activity.model_validate({
            **data.model_dump(),
            "id": self._next_id("activities"),
            "timestamp": data.timestamp or self.now(),
        })
        self._activities[activity.id] = activity
        return self._copy(activity)

    def list_recent_activities(self, limit: int) -> list[Activity]:
        ordered = sorted(
            self._activities.values(), key=lambda a: (a.timestamp, a.id), reverse=True,
        )
        return self._copies(ordered[:max(limit, 0)])

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def get_task(self, task_id: int) -> Task | None:
        return self._copy(self._tasks.get(task_id))

    def create_task(self, data: TaskCreate) -> Task:
        now = self.now()
        task = Task.model_validate({
            **data.model_dump(),
            "id": self._next_id("tasks"),
            "completed": False,
            "created_at": now,
            "updated_at": now,
        })
        self._tasks[task.id] = task
        return self._copy(task)

    def update_task(self, task_id: int, patch: TaskUpdate) -> Task | None:
        current = self._tasks.get(task_id)
        if current is None:
            return None
        updated = self._merge(Task, current, patch, updated_at=self._touch(current.updated_at))
        self._tasks[task_id] = updated
        return self._copy(updated)

    def list_tasks_by_assignee(self, user_id: int) -> list[Task]:
        return self._copies(t for t in self._tasks.values() if t.assigned_to == user_id)

    def list_upcoming_tasks(self, limit: int) -> list[Task]:
        open_tasks = [t for t in self._tasks.values() if not t.completed]
        # Undated tasks sort after every dated one.
        open_tasks.sort(key=lambda t: (t.due_date is None, t.due_date or t.created_at))
        return self._copies(open_tasks[:max(limit, 0)])

    # ------------------------------------------------------------------
    # Risk categories
    # ------------------------------------------------------------------

    def get_risk_category(self, category_id: int) -> RiskCategory | None:
        return self._copy(self._risk_categories.get(category_id))

    def create_risk_category(self, data: RiskCategoryCreate) -> RiskCategory:
        category = RiskCategory(id=self._next_id("risk_categories"), **data.model_dump())
        self._risk_categories[category.id] = category
        return self._copy(category)

    def list_risk_categories(self) -> list[RiskCategory]:
        return self._copies(self._risk_categories.values())

    # ------------------------------------------------------------------
    # Compliance metrics
    # ------------------------------------------------------------------

    def get_current_compliance_metrics(self) -> ComplianceMetric | None:
        if not self._compliance_metrics:
            return None
        latest = max(self._compliance_metrics.values(), key=lambda m: (m.date, m.id))
        return self._copy(latest)

    def create_compliance_metrics(self, data: ComplianceMetricCreate) -> ComplianceMetric:
        metric = ComplianceMetric.model_validate({
            **data.model_dump(),
            "id": self._next_id("compliance_metrics"),
            "date": data.date or self.now(),
        })
        self._compliance_metrics[metric.id] = metric
        return self._copy(metric)

    def get_compliance_history(self, months: int) -> list[ComplianceMetric]:
        start = months_before(self.now(), months)
        history = [m for m in self._compliance_metrics.values() if m.date >= start]
        history.sort(key=lambda m: (m.date, m.id))
        return self._copies(history)

    # ------------------------------------------------------------------
    # Self-Assessment Questionnaires
    # ------------------------------------------------------------------

    def get_saq(self, saq_id: int) -> Saq | None:
        return self._copy(self._saqs.get(saq_id))

    def create_saq(self, data: SaqCreate) -> Saq:
        now = self.now()
        saq = Saq.model_validate({
            **data.model_dump(),
            "id": self._next_id("saqs"),
            "created_at": now,
            "updated_at": now,
        })
        self._saqs[saq.id] = saq
        return self._copy(saq)

    def update_saq(self, saq_id: int, patch: SaqUpdate) -> Saq | None:
        current = self._saqs.get(saq_id)
        if current is None:
            return None

        updated_at = self._touch(current.updated_at)
        stamps = {"updated_at": updated_at}
        completing = (
            patch.status == "completed"
            and "completed_at" not in patch.model_fields_set
            and current.completed_at is None
        )
        if completing:
            stamps["completed_at"] = updated_at

        updated = self._merge(Saq, current, patch, **stamps)
        self._saqs[saq_id] = updated
        return self._copy(updated)

    def list_saqs_by_supplier(self, supplier_id: int, status: str | None = None) -> list[Saq]:
        matches = [s for s in self._saqs.values() if s.supplier_id == supplier_id]
        if status:
            matches = [s for s in matches if s.status == status]
        return self._copies(self._newest_first(matches))

    def list_saqs_by_customer(self, customer_id: int) -> list[Saq]:
        matches = [s for s in self._saqs.values() if s.customer_id == customer_id]
        return self._copies(self._newest_first(matches))

    def get_saq_stats(self, supplier_id: int) -> SaqStats:
        counts = {"pending": 0, "in-progress": 0, "completed": 0}
        total = 0
        for saq in self._saqs.values():
            if saq.supplier_id != supplier_id:
                continue
            total += 1
            counts[saq.status] += 1
        return SaqStats(
            total=total,
            pending=counts["pending"],
            in_progress=counts["in-progress"],
            completed=counts["completed"],
        )

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def counts(self) -> dict[str, int]:
        """Number of records per collection, for the health endpoint."""
        return {
            "users": len(self._users),
            "suppliers": len(self._suppliers),
            "customers": len(self._customers),
            "declarations": len(self._declarations),
            "documents": len(self._documents),
            "activities": len(self._activities),
            "tasks": len(self._tasks),
            "risk_categories": len(self._risk_categories),
            "compliance_metrics": len(self._compliance_metrics),
            "saqs": len(self._saqs),
        }
