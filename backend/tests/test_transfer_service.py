"""
Internal transfer tests: stock conservation, destination merge/create,
source deletion, and precondition failures that must leave nothing behind.
"""

from decimal import Decimal

import pytest

from greenscore.errors import (
    InsufficientQuantityError,
    InvalidArgumentError,
    NotFoundError,
    SameProjectError,
)
from greenscore.models import (
    AcquisitionType,
    InternalTransfer,
    ListingType,
    Material,
    Notification,
    NotificationType,
    OrderRequest,
    TransactionHistory,
    TransactionType,
)
from greenscore.services import history_service, transfer_service


def _project_total(db_session, project_id, name="Wash Basin"):
    return sum(
        m.quantity for m in db_session.query(Material).filter_by(project_id=project_id, material=name)
    )


def test_partial_transfer_creates_acquired_destination(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=10, price_today=Decimal("100.00"))

    result = transfer_service.create_internal_transfer(
        seller.id, source.id, project_a.id, project_b.id, 4, notes="Needed on site B"
    )

    assert result.created_destination
    assert not result.source_deleted
    assert db_session.get(Material, source.id).quantity == 6

    destination = db_session.get(Material, result.destination_material_id)
    assert destination.project_id == project_b.id
    assert destination.quantity == 4
    assert destination.listing_type is ListingType.ACQUIRED
    assert destination.acquisition_type is AcquisitionType.ACQUIRED
    assert destination.inventory_value == Decimal("400.00")
    assert destination.brand == "Hindware"
    assert destination.listing_id and destination.listing_id != source.listing_id


def test_transfer_conserves_quantity(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=10)
    before = _project_total(db_session, project_a.id) + _project_total(db_session, project_b.id)

    transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 3)
    transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 2)

    db_session.expire_all()
    assert _project_total(db_session, project_a.id) == 5
    assert _project_total(db_session, project_b.id) == 5
    assert _project_total(db_session, project_a.id) + _project_total(db_session, project_b.id) == before


def test_transfer_merges_into_matching_destination(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=10)
    existing = make_material(quantity=2, project_id=project_b.id)

    result = transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 5)

    assert not result.created_destination
    assert result.destination_material_id == existing.id
    assert db_session.get(Material, existing.id).quantity == 7
    assert db_session.query(Material).filter_by(project_id=project_b.id).count() == 1


def test_different_condition_is_not_merged(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=10, condition="good")
    make_material(quantity=2, project_id=project_b.id, condition="damaged")

    result = transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 5)

    assert result.created_destination
    assert db_session.query(Material).filter_by(project_id=project_b.id).count() == 2


def test_full_transfer_deletes_source(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=5)
    source_id = source.id

    result = transfer_service.create_internal_transfer(seller.id, source_id, project_a.id, project_b.id, 5)

    assert result.source_deleted
    assert db_session.get(Material, source_id) is None
    transfer = db_session.get(InternalTransfer, result.transfer.id)
    assert transfer.material_id == source_id
    assert transfer.material_name == "Wash Basin"


def test_full_transfer_detaches_pending_requests(db_session, seller, project_a, project_b, make_material, make_request):
    source = make_material(quantity=5)
    request = make_request(source, 2)

    transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 5)

    assert db_session.get(OrderRequest, request.id).material_id is None


def test_history_failure_restores_fully_transferred_source(
    db_session, seller, project_a, project_b, make_material, monkeypatch
):
    source = make_material(quantity=5)
    source_id = source.id

    def failing_record(**kwargs):
        raise RuntimeError("history store unavailable")

    monkeypatch.setattr(history_service, "record", failing_record)

    with pytest.raises(RuntimeError):
        transfer_service.create_internal_transfer(seller.id, source_id, project_a.id, project_b.id, 5)

    db_session.expire_all()
    restored = db_session.get(Material, source_id)
    assert restored is not None
    assert restored.quantity == 5
    assert restored.project_id == project_a.id
    assert db_session.query(Material).filter_by(project_id=project_b.id).count() == 0
    assert db_session.query(Material).count() == 1
    assert db_session.query(InternalTransfer).count() == 0
    assert db_session.query(TransactionHistory).count() == 0


def test_transfer_writes_history_and_notification(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=10)

    result = transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 4)

    history = db_session.query(TransactionHistory).filter_by(
        transaction_type=TransactionType.INTERNAL_TRANSFER
    ).one()
    assert history.transfer_id == result.transfer.id
    assert history.from_project_id == project_a.id
    assert history.to_project_id == project_b.id
    assert history.quantity == 4

    notification = db_session.query(Notification).filter_by(
        user_id=seller.id, type=NotificationType.INTERNAL_TRANSFER
    ).one()
    assert notification.title == "Internal Transfer Completed"
    assert "from Tower A to Tower B" in notification.message


def test_same_project_rejected_before_any_read(db_session, seller, project_a):
    with pytest.raises(SameProjectError):
        transfer_service.create_internal_transfer(seller.id, "whatever", project_a.id, project_a.id, 1)


@pytest.mark.parametrize("quantity", [0, -3, "2.5", True, None])
def test_bad_quantity_rejected(db_session, seller, project_a, project_b, make_material, quantity):
    source = make_material(quantity=10)
    with pytest.raises(InvalidArgumentError):
        transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, quantity)


def test_insufficient_quantity_leaves_nothing_behind(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=3)

    with pytest.raises(InsufficientQuantityError) as exc:
        transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 4)

    assert exc.value.details == {"available": 3, "requested": 4}
    assert db_session.get(Material, source.id).quantity == 3
    assert db_session.query(InternalTransfer).count() == 0
    assert db_session.query(Material).filter_by(project_id=project_b.id).count() == 0


def test_other_sellers_material_not_found(db_session, other_seller, project_a, project_b, make_material):
    source = make_material(quantity=10)
    with pytest.raises(NotFoundError):
        transfer_service.create_internal_transfer(other_seller.id, source.id, project_a.id, project_b.id, 1)


def test_unknown_destination_project(db_session, seller, project_a, make_material):
    source = make_material(quantity=10)
    with pytest.raises(NotFoundError):
        transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, "no-such-project", 1)
    assert db_session.get(Material, source.id).quantity == 10


def test_source_must_be_in_from_project(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=10, project_id=project_b.id)
    with pytest.raises(InvalidArgumentError):
        transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 1)


def test_list_transfers_newest_first(db_session, seller, project_a, project_b, make_material):
    source = make_material(quantity=10)
    first = transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 1)
    second = transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, project_b.id, 1)

    transfers = transfer_service.list_transfers(seller.id)

    assert [t.id for t in transfers] == [second.transfer.id, first.transfer.id]
    assert transfers[0].to_dict()["to_project_name"] == "Tower B"
