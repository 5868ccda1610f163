"""
Pytest fixtures for GreenScore marketplace backend tests.

Provides an in-memory database, a test client, and small factories for
users, projects, materials and order requests.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from greenscore import create_app
from greenscore.extensions import db
from greenscore.models import (
    ListingType,
    AcquisitionType,
    Material,
    OrderRequest,
    Project,
    RequestStatus,
    User,
    UserType,
)
from greenscore.services.identifier_service import generate_listing_id
from greenscore.time_utils import utcnow


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'EDIT_LOCK_TIMEOUT_MINUTES': 15,
        'PLATFORM_FEE_RATE': 0.05,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _user(db_session, email, name, company, user_type):
    user = User(email=email, name=name, company_name=company, user_type=user_type)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def seller(db_session):
    """Seller who owns both test projects."""
    return _user(db_session, "seller@builders.test", "Sam Seller", "Acme Builders", UserType.SELLER)


@pytest.fixture(scope='function')
def other_seller(db_session):
    return _user(db_session, "rival@builders.test", "Rita Rival", "Rival Infra", UserType.SELLER)


@pytest.fixture(scope='function')
def buyer(db_session):
    return _user(db_session, "buyer@contractors.test", "Bea Buyer", "Beta Contractors", UserType.BUYER)


@pytest.fixture(scope='function')
def buyer_b(db_session):
    return _user(db_session, "second@contractors.test", "Ben Buyer", "Gamma Works", UserType.BUYER)


@pytest.fixture(scope='function')
def project_a(db_session, seller):
    project = Project(seller_id=seller.id, name="Tower A", location="Pune")
    db_session.add(project)
    db_session.commit()
    return project


@pytest.fixture(scope='function')
def project_b(db_session, seller):
    project = Project(seller_id=seller.id, name="Tower B", location="Mumbai")
    db_session.add(project)
    db_session.commit()
    return project


@pytest.fixture(scope='function')
def make_material(db_session, seller, project_a):
    """Factory: a resale listing in project A unless overridden."""
    def _make(**overrides):
        fields = {
            "seller_id": seller.id,
            "project_id": project_a.id,
            "listing_id": generate_listing_id(),
            "material": "Wash Basin",
            "brand": "Hindware",
            "category": "Sanitary",
            "condition": "good",
            "unit": "pcs",
            "quantity": 10,
            "price_today": Decimal("100.00"),
            "inventory_value": Decimal("1000.00"),
            "listing_type": ListingType.RESALE,
            "acquisition_type": AcquisitionType.PURCHASED,
        }
        fields.update(overrides)
        material = Material(**fields)
        db_session.add(material)
        db_session.commit()
        return material
    return _make


@pytest.fixture(scope='function')
def make_request(db_session, buyer):
    """
    Factory: a pending order request placed minutes_ago minutes in the past.

    Bypasses submission checks so tests can build any demand queue.
    """
    base = utcnow()

    def _make(material, quantity, minutes_ago=0, buyer_id=None, unit_price=None):
        price = Decimal(unit_price) if unit_price is not None else Decimal(material.price_today)
        request = OrderRequest(
            material_id=material.id,
            buyer_id=buyer_id or buyer.id,
            seller_id=material.seller_id,
            quantity=quantity,
            unit_price=price,
            total_amount=price * quantity,
            status=RequestStatus.PENDING,
            buyer_company="Beta Contractors",
            buyer_contact_person="Bea Buyer",
            delivery_address="12 Site Road",
            created_at=base - timedelta(minutes=minutes_ago),
        )
        db_session.add(request)
        db_session.commit()
        return request
    return _make
