"""Unit tests for ClaimService: numbering, visibility, transitions and assignment."""

import pytest

import adjusterhub.dependencies as deps
from adjusterhub.database import utcnow
from adjusterhub.errors import AppError
from adjusterhub.models.earning import EarningModel
from adjusterhub.models.notification import NotificationModel
from adjusterhub.schemas.claim import ClaimCreate, ClaimUpdate
from adjusterhub.schemas.enums import ClaimStatus, ClaimType, ConnectionStatus, EarningStatus, Role


@pytest.fixture()
def service(container, db):
    return deps.get_claim_service(db=db, notifications=deps.get_notification_service(db))


@pytest.fixture()
def firm(make_firm):
    return make_firm("Gulf Coast Claims")


@pytest.fixture()
def firm_admin(make_user, firm):
    return make_user(role=Role.FIRM_ADMIN, firm_id=firm.id)


@pytest.fixture()
def adjuster(make_user):
    return make_user()


def _create(**fields) -> ClaimCreate:
    data = {"title": "Hail damage to roof", "type": ClaimType.PROPERTY_DAMAGE}
    data.update(fields)
    return ClaimCreate(**data)


class TestCreateClaim:
    def test_firm_admin_creates_available_claim(self, service, firm_admin, firm):
        claim = service.create_claim(firm_admin, _create(title="<i>Wind</i> loss", adjusterFee=450))

        year = utcnow().year
        assert claim.claim_number == f"CLM-{year}-0001"
        assert claim.status == ClaimStatus.AVAILABLE.value
        assert claim.firm_id == firm.id
        assert claim.title == "Wind loss"
        assert claim.adjuster_fee == 450

    def test_numbering_skips_taken_numbers(self, service, firm_admin, firm, make_claim):
        year = utcnow().year
        make_claim(firm, claim_number=f"CLM-{year}-0002")
        claim = service.create_claim(firm_admin, _create())
        assert claim.claim_number == f"CLM-{year}-0003"

    def test_adjuster_cannot_create(self, service, adjuster):
        with pytest.raises(AppError) as exc_info:
            service.create_claim(adjuster, _create())
        assert exc_info.value.status_code == 403

    def test_firm_admin_cannot_target_other_firm(self, service, firm_admin, make_firm):
        other = make_firm()
        with pytest.raises(AppError) as exc_info:
            service.create_claim(firm_admin, _create(firmId=other.id))
        assert exc_info.value.status_code == 403

    def test_admin_must_name_firm(self, service, make_user, firm):
        admin = make_user(role=Role.ADMIN)
        with pytest.raises(AppError) as exc_info:
            service.create_claim(admin, _create())
        assert exc_info.value.status_code == 400
        assert service.create_claim(admin, _create(firmId=firm.id)).firm_id == firm.id

    def test_unknown_firm(self, service, make_user):
        with pytest.raises(AppError) as exc_info:
            service.create_claim(make_user(role=Role.ADMIN), _create(firmId=999))
        assert exc_info.value.status_code == 404


class TestVisibility:
    def test_adjuster_sees_pool_and_own_claims(self, service, adjuster, make_user, firm, make_claim):
        other = make_user()
        pool = make_claim(firm)
        mine = make_claim(firm, status=ClaimStatus.ASSIGNED, adjuster=adjuster)
        make_claim(firm, status=ClaimStatus.ASSIGNED, adjuster=other)

        items, total = service.list_claims(adjuster)
        assert total == 2
        assert {c.id for c in items} == {pool.id, mine.id}

    def test_firm_admin_pinned_to_firm(self, service, firm_admin, firm, make_firm, make_claim):
        make_claim(firm)
        make_claim(make_firm())
        _, total = service.list_claims(firm_admin)
        assert total == 1
        assert service.list_claims(firm_admin, firm_id=firm.id + 1) == ([], 0)

    def test_firm_admin_without_firm_sees_nothing(self, service, make_user, firm, make_claim):
        make_claim(firm)
        unlinked = make_user(role=Role.FIRM_ADMIN, firm_id=None)
        assert service.list_claims(unlinked) == ([], 0)

    def test_get_foreign_assigned_claim_forbidden(self, service, adjuster, make_user, firm, make_claim):
        claim = make_claim(firm, status=ClaimStatus.ASSIGNED, adjuster=make_user())
        with pytest.raises(AppError) as exc_info:
            service.get_claim(adjuster, claim.id)
        assert exc_info.value.status_code == 403

    def test_missing_claim(self, service, adjuster):
        with pytest.raises(AppError) as exc_info:
            service.get_claim(adjuster, 12345)
        assert exc_info.value.status_code == 404


class TestAssignment:
    def test_self_assign_creates_pending_fee(self, service, adjuster, firm, make_claim, db):
        claim = make_claim(firm, adjuster_fee=300.0)
        assigned = service.assign_claim(adjuster, claim.id)

        assert assigned.status == ClaimStatus.ASSIGNED.value
        assert assigned.adjuster_id == adjuster.id
        earning = db.query(EarningModel).filter_by(claim_id=claim.id).one()
        assert earning.amount == 300.0
        assert earning.status == EarningStatus.PENDING.value
        assert db.query(NotificationModel).filter_by(user_id=adjuster.id).count() == 1

    def test_cannot_assign_taken_claim(self, service, adjuster, make_user, firm, make_claim):
        claim = make_claim(firm, status=ClaimStatus.ASSIGNED, adjuster=make_user())
        with pytest.raises(AppError) as exc_info:
            service.assign_claim(adjuster, claim.id)
        assert exc_info.value.user_message == "Claim is not available for assignment"

    def test_firm_admin_requires_approved_connection(self, service, firm_admin, adjuster, firm, make_claim, connect):
        claim = make_claim(firm)
        connect(adjuster, firm, status=ConnectionStatus.PENDING)
        with pytest.raises(AppError) as exc_info:
            service.assign_claim(firm_admin, claim.id, adjuster.id)
        assert exc_info.value.user_message == "Adjuster is not connected to this firm"

    def test_firm_admin_assigns_connected_adjuster(self, service, firm_admin, adjuster, firm, make_claim, connect):
        claim = make_claim(firm)
        connect(adjuster, firm)
        assert service.assign_claim(firm_admin, claim.id, adjuster.id).adjuster_id == adjuster.id

    def test_adjuster_cannot_assign_others(self, service, adjuster, make_user, firm, make_claim):
        claim = make_claim(firm)
        with pytest.raises(AppError) as exc_info:
            service.assign_claim(adjuster, claim.id, make_user().id)
        assert exc_info.value.status_code == 403

    def test_unassign_releases_pending_fee(self, service, adjuster, firm, make_claim, db):
        claim = make_claim(firm, adjuster_fee=200.0)
        service.assign_claim(adjuster, claim.id)

        released = service.unassign_claim(adjuster, claim.id)
        assert released.status == ClaimStatus.AVAILABLE.value
        assert released.adjuster_id is None
        assert db.query(EarningModel).filter_by(claim_id=claim.id).count() == 0

    def test_unassign_in_progress_refused(self, service, adjuster, firm, make_claim):
        claim = make_claim(firm, status=ClaimStatus.IN_PROGRESS, adjuster=adjuster)
        with pytest.raises(AppError) as exc_info:
            service.unassign_claim(adjuster, claim.id)
        assert exc_info.value.status_code == 400


class TestUpdateClaim:
    def test_adjuster_moves_claim_through_lifecycle(self, service, adjuster, firm, make_claim):
        claim = make_claim(firm, status=ClaimStatus.ASSIGNED, adjuster=adjuster)

        service.update_claim(adjuster, claim.id, ClaimUpdate(status=ClaimStatus.IN_PROGRESS))
        done = service.update_claim(adjuster, claim.id, ClaimUpdate(status=ClaimStatus.COMPLETED, finalValue=9800))

        assert done.status == ClaimStatus.COMPLETED.value
        assert done.completed_at is not None
        assert done.final_value == 9800

    def test_invalid_transition(self, service, adjuster, firm, make_claim):
        claim = make_claim(firm, status=ClaimStatus.ASSIGNED, adjuster=adjuster)
        with pytest.raises(AppError) as exc_info:
            service.update_claim(adjuster, claim.id, ClaimUpdate(status=ClaimStatus.COMPLETED))
        assert "Cannot change claim status" in exc_info.value.user_message

    def test_assigned_status_requires_assign_endpoint(self, service, firm_admin, firm, make_claim):
        claim = make_claim(firm)
        with pytest.raises(AppError) as exc_info:
            service.update_claim(firm_admin, claim.id, ClaimUpdate(status=ClaimStatus.ASSIGNED))
        assert exc_info.value.user_message == "Use the assign endpoint to assign a claim"

    def test_adjuster_limited_fields(self, service, adjuster, firm, make_claim):
        claim = make_claim(firm, status=ClaimStatus.ASSIGNED, adjuster=adjuster)
        with pytest.raises(AppError) as exc_info:
            service.update_claim(adjuster, claim.id, ClaimUpdate(adjusterFee=10_000))
        assert exc_info.value.status_code == 403

    def test_firm_admin_reprioritises(self, service, firm_admin, firm, make_claim):
        claim = make_claim(firm)
        updated = service.update_claim(firm_admin, claim.id, ClaimUpdate(priority="URGENT", title="Flooded basement"))
        assert updated.priority == "URGENT"
        assert updated.title == "Flooded basement"
        assert updated.priority_rank > 2

    def test_status_change_notifies_adjuster(self, service, firm_admin, adjuster, firm, make_claim, db):
        claim = make_claim(firm, status=ClaimStatus.ASSIGNED, adjuster=adjuster)
        service.update_claim(firm_admin, claim.id, ClaimUpdate(status=ClaimStatus.CANCELLED))
        note = db.query(NotificationModel).filter_by(user_id=adjuster.id).one()
        assert note.title == "Claim status updated"


class TestDeleteClaim:
    def test_firm_admin_deletes_available_claim(self, service, firm_admin, firm, make_claim):
        claim = make_claim(firm)
        service.delete_claim(firm_admin, claim.id)
        with pytest.raises(AppError):
            service.get_claim(firm_admin, claim.id)

    def test_in_progress_claim_locked(self, service, firm_admin, adjuster, firm, make_claim):
        claim = make_claim(firm, status=ClaimStatus.IN_PROGRESS, adjuster=adjuster)
        with pytest.raises(AppError) as exc_info:
            service.delete_claim(firm_admin, claim.id)
        assert exc_info.value.user_message == "Cannot delete active or completed claims"

    def test_adjuster_cannot_delete(self, service, adjuster, firm, make_claim):
        with pytest.raises(AppError) as exc_info:
            service.delete_claim(adjuster, make_claim(firm).id)
        assert exc_info.value.status_code == 403
