"""Service layer tests."""

import pytest

from medibot.core.constants import PharmacyStatus
from medibot.services.medicine_service import MedicineService
from medibot.services.pharmacy_service import PharmacyService
from medibot.services.profile_service import ProfileService, default_profile_name
from medibot.utils.errors import InvalidStatusTransition, NotFoundError, PharmacyNotAssignedError

from conftest import make_pharmacy, make_user_with_session


def test_default_profile_name():
    assert default_profile_name("grace.uwimana@example.com") == "grace.uwimana"
    assert default_profile_name("@example.com") == "User"


def test_sign_up_creates_profile_named_from_email(db_session):
    _, user = make_user_with_session(db_session, role="healthcare_provider")
    profile = ProfileService.get_profile(user)
    assert profile.specialty == "General Practice"
    assert ProfileService.profile_name(user) == user.email.split("@")[0]


def test_unknown_role_has_no_profile(db_session):
    _, user = make_user_with_session(db_session)
    user.role = "nurse"
    assert ProfileService.get_profile(user) is None
    db_session.rollback()


def test_pending_is_the_only_decidable_status(db_session):
    _, admin = make_user_with_session(db_session, role="super_admin")
    pharmacy = make_pharmacy(db_session, status="pending")

    approved = PharmacyService.approve(db_session, admin, pharmacy.id)
    assert approved.status == PharmacyStatus.APPROVED.value
    assert approved.status_changed_by == admin.id
    assert approved.status_changed_at is not None

    with pytest.raises(InvalidStatusTransition):
        PharmacyService.reject(db_session, admin, pharmacy.id)
    with pytest.raises(InvalidStatusTransition):
        PharmacyService.set_status(db_session, admin, pharmacy.id, PharmacyStatus.PENDING)


def test_deleting_a_pharmacy_unassigns_its_admins(db_session):
    _, super_admin = make_user_with_session(db_session, role="super_admin")
    pharmacy = make_pharmacy(db_session, medicines=[("Zinc", 100.0, 4)])
    _, admin = make_user_with_session(db_session, role="pharmacy_admin", pharmacy_id=pharmacy.id)

    PharmacyService.delete(db_session, super_admin, pharmacy.id)

    db_session.refresh(admin)
    assert admin.pharmacy_admin_profile.pharmacy_id is None
    with pytest.raises(PharmacyNotAssignedError):
        PharmacyService.get_admin_pharmacy(db_session, admin)
    with pytest.raises(NotFoundError):
        PharmacyService.get(db_session, pharmacy.id)


def test_medicine_lookup_is_scoped_to_pharmacy(db_session):
    mine = make_pharmacy(db_session, medicines=[("Aspirin", 50.0, 10)])
    other = make_pharmacy(db_session)
    medicine_id = mine.medicines[0].id

    assert MedicineService.get(db_session, medicine_id, mine.id).name == "Aspirin"
    with pytest.raises(NotFoundError):
        MedicineService.get(db_session, medicine_id, other.id)


def test_set_stock_rejects_negative(db_session):
    pharmacy = make_pharmacy(db_session, medicines=[("Aspirin", 50.0, 10)])
    with pytest.raises(ValueError):
        MedicineService.set_stock(db_session, pharmacy.medicines[0].id, -1)
    assert MedicineService.set_stock(db_session, pharmacy.medicines[0].id, 0).stock == 0


def test_inventory_stats_for_empty_pharmacy(db_session):
    pharmacy = make_pharmacy(db_session)
    stats = MedicineService.inventory_stats(db_session, pharmacy.id)
    assert stats["total_medicines"] == 0
    assert stats["inventory_value"] == 0
    assert stats["stock_distribution"] == {"low": 0, "medium": 0, "high": 0}
