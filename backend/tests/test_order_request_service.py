"""Order request submission and order status tests."""

from decimal import Decimal

import pytest

from greenscore.errors import InsufficientQuantityError, InvalidArgumentError, NotFoundError
from greenscore.models import (
    ListingType,
    AcquisitionType,
    Notification,
    NotificationType,
    Order,
    OrderStatus,
    RequestStatus,
)
from greenscore.services import allocation_service, order_request_service


CONTACT = {
    "company_name": "Beta Contractors",
    "contact_person": "Bea Buyer",
    "email": "bea@contractors.test",
    "phone": "+91 90000 00000",
    "delivery_address": "12 Site Road, Pune",
    "delivery_notes": "Gate 3",
}


def test_submit_snapshots_price_and_contact(db_session, buyer, seller, make_material):
    material = make_material(quantity=10, price_today=Decimal("250.00"))

    request = order_request_service.submit_order_request(buyer.id, material.id, 4, CONTACT)

    assert request.status is RequestStatus.PENDING
    assert request.unit_price == Decimal("250.00")
    assert request.total_amount == Decimal("1000.00")
    assert request.seller_id == seller.id
    assert request.buyer_company == "Beta Contractors"
    assert request.delivery_notes == "Gate 3"


def test_submit_notifies_seller(db_session, buyer, seller, make_material):
    material = make_material(quantity=10)

    request = order_request_service.submit_order_request(buyer.id, material.id, 2, CONTACT)

    notification = db_session.query(Notification).filter_by(user_id=seller.id).one()
    assert notification.title == "New Order Request!"
    assert notification.type is NotificationType.ORDER_REQUEST
    assert notification.related_id == request.id
    assert "Bea Buyer from Beta Contractors" in notification.message
    assert notification.data["quantity"] == 2


def test_submit_does_not_reserve_stock(db_session, buyer, buyer_b, make_material):
    material = make_material(quantity=7)

    order_request_service.submit_order_request(buyer.id, material.id, 5)
    order_request_service.submit_order_request(buyer_b.id, material.id, 5)

    assert len(order_request_service.list_pending_requests_for_material(material.id)) == 2


def test_submit_more_than_stock_rejected(db_session, buyer, make_material):
    material = make_material(quantity=3)
    with pytest.raises(InsufficientQuantityError):
        order_request_service.submit_order_request(buyer.id, material.id, 4)


def test_submit_own_material_rejected(db_session, seller, make_material):
    material = make_material(quantity=3)
    with pytest.raises(InvalidArgumentError):
        order_request_service.submit_order_request(seller.id, material.id, 1)


@pytest.mark.parametrize("overrides", [
    {"listing_type": ListingType.SOLD},
    {"listing_type": ListingType.ACQUIRED, "acquisition_type": AcquisitionType.ACQUIRED},
    {"listing_type": ListingType.INTERNAL_TRANSFER},
])
def test_submit_unlisted_material_rejected(db_session, buyer, make_material, overrides):
    material = make_material(quantity=3, **overrides)
    with pytest.raises(InvalidArgumentError):
        order_request_service.submit_order_request(buyer.id, material.id, 1)


def test_submit_unknown_material(db_session, buyer):
    with pytest.raises(NotFoundError):
        order_request_service.submit_order_request(buyer.id, "missing", 1)


def test_submit_unknown_buyer(db_session, make_material):
    material = make_material()
    with pytest.raises(NotFoundError):
        order_request_service.submit_order_request("ghost", material.id, 1)


@pytest.mark.parametrize("quantity", [0, -1, 1.5, "1e3", "abc"])
def test_submit_invalid_quantity(db_session, buyer, make_material, quantity):
    material = make_material()
    with pytest.raises(InvalidArgumentError):
        order_request_service.submit_order_request(buyer.id, material.id, quantity)


def test_pending_requests_for_seller_oldest_first(db_session, seller, make_material, make_request):
    material = make_material(quantity=10)
    newer = make_request(material, 1, minutes_ago=1)
    older = make_request(material, 1, minutes_ago=5)
    resolved = make_request(material, 1, minutes_ago=9)
    allocation_service.decline_request(resolved.id)

    pending = order_request_service.list_pending_requests_for_seller(seller.id)

    assert [r.id for r in pending] == [older.id, newer.id]


def test_order_status_progression(db_session, buyer, make_material, make_request):
    material = make_material(quantity=10)
    request = make_request(material, 2)
    result = allocation_service.approve_request(request.id)
    order_id = result.outcomes[0].order_id

    shipped = order_request_service.update_order_status(order_id, "shipped")
    assert shipped.status is OrderStatus.SHIPPED
    assert shipped.shipped_at is not None
    assert shipped.delivered_at is None

    delivered = order_request_service.update_order_status(order_id, OrderStatus.DELIVERED)
    assert delivered.delivered_at is not None

    titles = [n.title for n in db_session.query(Notification).filter_by(user_id=buyer.id)]
    assert titles.count("Order Status Updated") == 2


def test_order_status_invalid_value(db_session):
    with pytest.raises(InvalidArgumentError):
        order_request_service.update_order_status("any", "teleported")


def test_order_status_unknown_order(db_session):
    with pytest.raises(NotFoundError):
        order_request_service.update_order_status("missing", "shipped")


def test_list_orders_for_seller(db_session, seller, make_material, make_request):
    material = make_material(quantity=10)
    request = make_request(material, 2)
    allocation_service.approve_request(request.id)

    orders = order_request_service.list_orders_for_seller(seller.id)

    assert len(orders) == 1
    assert orders[0].order_request_id == request.id
    assert db_session.query(Order).count() == 1
