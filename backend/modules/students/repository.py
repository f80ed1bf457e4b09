"""
Student repository for database access.

Encapsulates all Supabase queries and data mapping for the student tables:
- students
- progress
- pending_enrollments
- payment_history

Column names follow the storage schema (stripe_customer_id, last_login, ...);
the mapping helpers translate them to model field names.
"""

from datetime import datetime, timezone
from typing import Any, Optional
import logging

from shared.exceptions import StoreUnavailableError
from shared.models import StudentTier, SubscriptionStatus
from shared.repository import BaseRepository
from .models import (
    ModuleProgress,
    PaymentRecord,
    PaymentStatus,
    PendingEnrollment,
    Student,
)


logger = logging.getLogger(__name__)

# Model field name -> students column name, where they differ
_STUDENT_COLUMNS = {
    "billing_customer_ref": "stripe_customer_id",
    "billing_subscription_ref": "stripe_subscription_id",
    "last_login_at": "last_login",
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_column_value(value: Any) -> Any:
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _ilike_contains(value: str) -> str:
    """
    Double-quoted PostgREST ilike operand matching value anywhere.

    Quoting keeps commas and parentheses in admin search text from being
    read as filter syntax.
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"%{escaped}%"'


class StudentRepository(BaseRepository[Student]):
    """
    Repository for student data access.

    All methods return Pydantic models with proper mapping from database rows.

    Note: This repository does NOT perform authorization checks.
    The service layer is responsible for verifying the caller.
    """

    # -------------------------------------------------------------------------
    # Students
    # -------------------------------------------------------------------------

    def get_student(self, student_id: str) -> Optional[Student]:
        result = self._execute(
            "get_student",
            self._db.table("students").select("*").eq("id", student_id),
        )
        if not result.data:
            return None
        return self._map_to_student(result.data[0])

    def get_student_by_email(self, email: str) -> Optional[Student]:
        result = self._execute(
            "get_student_by_email",
            self._db.table("students").select("*").eq("email", email.lower()),
        )
        if not result.data:
            return None
        return self._map_to_student(result.data[0])

    def get_student_by_customer_ref(self, customer_ref: str) -> Optional[Student]:
        result = self._execute(
            "get_student_by_customer_ref",
            self._db.table("students").select("*").eq("stripe_customer_id", customer_ref),
        )
        if not result.data:
            return None
        return self._map_to_student(result.data[0])

    def create_student(
        self,
        email: str,
        name: str,
        password_hash: str,
        tier: StudentTier,
        status: SubscriptionStatus,
        module_count: int,
        billing_customer_ref: Optional[str] = None,
        billing_subscription_ref: Optional[str] = None,
    ) -> Student:
        """
        Create a student and its full progress batch.

        The progress rows are written in a single insert. If that insert
        fails, the student row is deleted again before the error propagates,
        so a retry does not hit an email conflict on a student with no modules.
        """
        now = _now_iso()
        data = {
            "email": email.lower(),
            "name": name,
            "password_hash": password_hash,
            "tier": tier.value,
            "subscription_status": status.value,
            "stripe_customer_id": billing_customer_ref,
            "stripe_subscription_id": billing_subscription_ref,
            "created_at": now,
            "updated_at": now,
        }
        result = self._execute(
            "create_student",
            self._db.table("students").insert(data),
        )
        student = self._map_to_student(result.data[0])

        progress_rows = [
            {
                "student_id": student.id,
                "module_number": number,
                "completed": False,
                "time_spent_minutes": 0,
            }
            for number in range(1, module_count + 1)
        ]
        try:
            self._execute(
                "create_progress",
                self._db.table("progress").insert(progress_rows),
            )
        except StoreUnavailableError:
            self._discard_student(student.id)
            raise
        return student

    def _discard_student(self, student_id: str) -> None:
        """Remove a student whose progress batch could not be written."""
        try:
            self._execute(
                "discard_student",
                self._db.table("students").delete().eq("id", student_id),
            )
        except StoreUnavailableError:
            logger.error(f"Student {student_id} left without progress records")

    def update_student(self, student_id: str, fields: dict[str, Any]) -> Optional[Student]:
        data = {
            _STUDENT_COLUMNS.get(key, key): _to_column_value(value)
            for key, value in fields.items()
        }
        data["updated_at"] = _now_iso()
        result = self._execute(
            "update_student",
            self._db.table("students").update(data).eq("id", student_id),
        )
        if not result.data:
            return None
        return self._map_to_student(result.data[0])

    def touch_last_login(self, student_id: str) -> None:
        self._execute(
            "touch_last_login",
            self._db.table("students").update({"last_login": _now_iso()}).eq("id", student_id),
        )

    def list_students(
        self,
        search: Optional[str] = None,
        tier: Optional[StudentTier] = None,
        status: Optional[SubscriptionStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Student], int]:
        query = self._db.table("students").select("*", count="exact")
        if search:
            pattern = _ilike_contains(search)
            query = query.or_(f"email.ilike.{pattern},name.ilike.{pattern}")
        if tier:
            query = query.eq("tier", tier.value)
        if status:
            query = query.eq("subscription_status", status.value)
        query = query.order("created_at", desc=True).range(offset, offset + limit - 1)
        result = self._execute("list_students", query)
        return [self._map_to_student(row) for row in result.data], result.count or 0

    def count_students(
        self,
        tier: Optional[StudentTier] = None,
        status: Optional[SubscriptionStatus] = None,
        exclude_status: Optional[SubscriptionStatus] = None,
    ) -> int:
        query = self._db.table("students").select("id", count="exact")
        if tier:
            query = query.eq("tier", tier.value)
        if status:
            query = query.eq("subscription_status", status.value)
        if exclude_status:
            query = query.neq("subscription_status", exclude_status.value)
        result = self._execute("count_students", query)
        return result.count or 0

    def recent_students(self, limit: int = 5) -> list[Student]:
        result = self._execute(
            "recent_students",
            self._db.table("students").select("*").order("created_at", desc=True).limit(limit),
        )
        return [self._map_to_student(row) for row in result.data]

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def list_progress(self, student_id: str) -> list[ModuleProgress]:
        result = self._execute(
            "list_progress",
            self._db.table("progress").select("*").eq("student_id", student_id).order("module_number"),
        )
        return [ModuleProgress(**self._pick(row, ModuleProgress)) for row in result.data]

    def update_progress(
        self,
        student_id: str,
        module_number: int,
        fields: dict[str, Any],
    ) -> None:
        data = {key: _to_column_value(value) for key, value in fields.items()}
        self._execute(
            "update_progress",
            self._db.table("progress")
            .update(data)
            .eq("student_id", student_id)
            .eq("module_number", module_number),
        )

    def completed_module_counts(self, student_ids: list[str]) -> dict[str, int]:
        counts = {student_id: 0 for student_id in student_ids}
        if not student_ids:
            return counts
        result = self._execute(
            "completed_module_counts",
            self._db.table("progress")
            .select("student_id")
            .in_("student_id", student_ids)
            .eq("completed", True),
        )
        for row in result.data:
            counts[str(row["student_id"])] = counts.get(str(row["student_id"]), 0) + 1
        return counts

    # -------------------------------------------------------------------------
    # Pending enrollments
    # -------------------------------------------------------------------------

    def upsert_pending_enrollment(self, enrollment: PendingEnrollment) -> PendingEnrollment:
        data = {
            "email": enrollment.email.lower(),
            "name": enrollment.name,
            "tier": enrollment.tier.value,
            "stripe_customer_id": enrollment.billing_customer_ref,
            "stripe_subscription_id": enrollment.billing_subscription_ref,
            "stripe_checkout_session_id": enrollment.checkout_session_ref,
            "created_at": _now_iso(),
        }
        result = self._execute(
            "upsert_pending_enrollment",
            self._db.table("pending_enrollments").upsert(data, on_conflict="email"),
        )
        return self._map_to_pending(result.data[0])

    def get_pending_enrollment(self, email: str) -> Optional[PendingEnrollment]:
        result = self._execute(
            "get_pending_enrollment",
            self._db.table("pending_enrollments").select("*").eq("email", email.lower()),
        )
        if not result.data:
            return None
        return self._map_to_pending(result.data[0])

    def delete_pending_enrollment(self, email: str) -> None:
        self._execute(
            "delete_pending_enrollment",
            self._db.table("pending_enrollments").delete().eq("email", email.lower()),
        )

    # -------------------------------------------------------------------------
    # Payment records
    # -------------------------------------------------------------------------

    def list_payments(self, student_id: str) -> list[PaymentRecord]:
        result = self._execute(
            "list_payments",
            self._db.table("payment_history")
            .select("*")
            .eq("student_id", student_id)
            .order("created_at", desc=True),
        )
        return [self._map_to_payment(row) for row in result.data]

    def payment_exists(self, external_payment_ref: str, status: PaymentStatus) -> bool:
        result = self._execute(
            "payment_exists",
            self._db.table("payment_history")
            .select("id")
            .eq("stripe_payment_id", external_payment_ref)
            .eq("status", status.value),
        )
        return bool(result.data)

    def append_payment(self, record: PaymentRecord) -> PaymentRecord:
        data = {
            "student_id": record.student_id,
            "stripe_payment_id": record.external_payment_ref,
            "amount": float(record.amount),
            "status": record.status.value,
            "description": record.description,
            "created_at": _now_iso(),
        }
        result = self._execute(
            "append_payment",
            self._db.table("payment_history").insert(data),
        )
        return self._map_to_payment(result.data[0])

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _pick(row: dict[str, Any], model: type) -> dict[str, Any]:
        return {key: row[key] for key in model.model_fields if key in row}

    def _map_to_student(self, row: dict[str, Any]) -> Student:
        return Student(
            id=str(row["id"]),
            email=row["email"],
            name=row["name"],
            tier=StudentTier(row["tier"]),
            subscription_status=SubscriptionStatus(row["subscription_status"]),
            billing_customer_ref=row.get("stripe_customer_id"),
            billing_subscription_ref=row.get("stripe_subscription_id"),
            password_hash=row.get("password_hash"),
            created_at=row["created_at"],
            updated_at=row.get("updated_at") or row["created_at"],
            last_login_at=row.get("last_login"),
        )

    def _map_to_pending(self, row: dict[str, Any]) -> PendingEnrollment:
        return PendingEnrollment(
            email=row["email"],
            name=row["name"],
            tier=StudentTier(row["tier"]),
            billing_customer_ref=row.get("stripe_customer_id"),
            billing_subscription_ref=row.get("stripe_subscription_id"),
            checkout_session_ref=row.get("stripe_checkout_session_id"),
            created_at=row.get("created_at"),
        )

    def _map_to_payment(self, row: dict[str, Any]) -> PaymentRecord:
        return PaymentRecord(
            id=str(row["id"]) if row.get("id") is not None else None,
            student_id=str(row["student_id"]),
            external_payment_ref=row["stripe_payment_id"],
            amount=row["amount"],
            status=PaymentStatus(row["status"]),
            description=row.get("description") or "",
            created_at=row.get("created_at"),
        )
