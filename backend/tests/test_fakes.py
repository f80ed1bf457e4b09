"""Tests for tests/fakes.py."""

from decimal import Decimal

from shared.models import StudentTier, SubscriptionStatus
from modules.students.interfaces import IStudentRepository
from tests.fakes import InMemoryStudentRepository
from modules.students.models import PaymentRecord, PaymentStatus, PendingEnrollment


class TestInMemoryStudentRepository:
    def test_implements_interface(self, repo):
        assert isinstance(repo, IStudentRepository)

    def test_create_student_with_progress(self, make_student, repo):
        student = make_student(email="Grace@Example.com")
        assert student.email == "grace@example.com"
        modules = repo.list_progress(student.id)
        assert [m.module_number for m in modules] == list(range(1, 9))
        assert not any(m.completed for m in modules)

    def test_lookups(self, make_student, repo):
        student = make_student(billing_customer_ref="cus_look")
        assert repo.get_student_by_email("ADA@example.com").id == student.id
        assert repo.get_student_by_customer_ref("cus_look").id == student.id
        assert repo.get_student_by_customer_ref("cus_none") is None

    def test_update_student_bumps_updated_at(self, make_student, repo):
        student = make_student()
        updated = repo.update_student(student.id, {"name": "Ada L."})
        assert updated.name == "Ada L."
        assert updated.updated_at >= student.updated_at
        assert repo.update_student("missing", {"name": "x"}) is None

    def test_count_students(self, make_student, repo):
        make_student(email="a@example.com", tier=StudentTier.SELF_PACED)
        make_student(email="b@example.com", status=SubscriptionStatus.CANCELED)
        make_student(email="c@example.com", status=SubscriptionStatus.PAST_DUE)

        assert repo.count_students() == 3
        assert repo.count_students(status=SubscriptionStatus.PAST_DUE) == 1
        assert repo.count_students(
            tier=StudentTier.MENTORSHIP,
            exclude_status=SubscriptionStatus.CANCELED,
        ) == 1

    def test_pending_enrollment_upsert_replaces(self, repo):
        repo.upsert_pending_enrollment(
            PendingEnrollment(email="p@example.com", name="P", tier=StudentTier.MENTORSHIP)
        )
        repo.upsert_pending_enrollment(
            PendingEnrollment(email="P@example.com", name="P2", tier=StudentTier.SELF_PACED)
        )
        pending = repo.get_pending_enrollment("p@example.com")
        assert pending.name == "P2"
        repo.delete_pending_enrollment("p@example.com")
        assert repo.get_pending_enrollment("p@example.com") is None

    def test_payments_newest_first(self, make_student, repo):
        student = make_student()
        for ref in ("in_1", "in_2"):
            repo.append_payment(
                PaymentRecord(
                    student_id=student.id,
                    external_payment_ref=ref,
                    amount=Decimal("1.00"),
                    status=PaymentStatus.SUCCEEDED,
                    description="",
                )
            )
        assert [p.external_payment_ref for p in repo.list_payments(student.id)] == ["in_2", "in_1"]
        assert repo.payment_exists("in_1", PaymentStatus.SUCCEEDED)
        assert not repo.payment_exists("in_1", PaymentStatus.FAILED)


def test_fresh_repository_is_empty():
    repo = InMemoryStudentRepository()
    assert repo.count_students() == 0
    assert repo.recent_students() == []


class TestListStudents:
    def test_search_matches_email_or_name(self, make_student, repo):
        make_student(email="grace@example.com", name="Grace Hopper")
        make_student(email="alan@example.com", name="Alan Turing")

        students, total = repo.list_students(search="TURING")
        assert total == 1
        assert students[0].email == "alan@example.com"

        students, total = repo.list_students(search="grace@")
        assert [s.name for s in students] == ["Grace Hopper"]

    def test_offset_and_limit(self, make_student, repo):
        for i in range(3):
            make_student(email=f"s{i}@example.com")

        students, total = repo.list_students(offset=1, limit=1)
        assert total == 3
        assert [s.email for s in students] == ["s1@example.com"]

    def test_completed_module_counts(self, make_student, repo):
        first = make_student(email="a@example.com")
        second = make_student(email="b@example.com")
        repo.update_progress(first.id, 1, {"completed": True})
        repo.update_progress(first.id, 4, {"completed": True})

        counts = repo.completed_module_counts([first.id, second.id, "missing"])
        assert counts == {first.id: 2, second.id: 0, "missing": 0}
