"""Seller project creation and listing."""

import pytest

from greenscore.errors import InvalidArgumentError, NotFoundError
from greenscore.models import Material, Project
from greenscore.services import project_service, transfer_service


def test_create_project(db_session, seller):
    project = project_service.create_project(seller.id, {
        "name": "  Tower C ",
        "location": "Nagpur",
        "description": "Phase 2 podium",
    })

    stored = db_session.get(Project, project.id)
    assert stored.seller_id == seller.id
    assert stored.name == "Tower C"
    assert stored.location == "Nagpur"
    assert stored.description == "Phase 2 podium"
    assert stored.status == "active"


def test_optional_fields_default_to_blank(db_session, seller):
    project = project_service.create_project(seller.id, {"name": "Depot"})
    assert project.location == ""
    assert project.description == ""


@pytest.mark.parametrize("name", [None, "", "   "])
def test_name_is_required(db_session, seller, name):
    with pytest.raises(InvalidArgumentError):
        project_service.create_project(seller.id, {"name": name})
    assert db_session.query(Project).count() == 0


def test_unknown_fields_rejected(db_session, seller):
    with pytest.raises(InvalidArgumentError) as exc:
        project_service.create_project(seller.id, {"name": "Depot", "status": "closed"})
    assert exc.value.details == {"fields": ["status"]}


def test_unknown_seller(db_session):
    with pytest.raises(NotFoundError):
        project_service.create_project("no-such-seller", {"name": "Depot"})
    assert db_session.query(Project).count() == 0


def test_list_projects_is_scoped_to_seller(db_session, seller, other_seller, project_a, project_b):
    project_service.create_project(other_seller.id, {"name": "Rival Site"})

    names = {p.name for p in project_service.list_projects(seller.id)}
    assert names == {"Tower A", "Tower B"}
    assert [p.name for p in project_service.list_projects(other_seller.id)] == ["Rival Site"]
    assert project_service.list_projects("nobody") == []


def test_new_project_accepts_transfers(db_session, seller, project_a, make_material):
    source = make_material(quantity=6)
    site = project_service.create_project(seller.id, {"name": "Tower C"})

    result = transfer_service.create_internal_transfer(seller.id, source.id, project_a.id, site.id, 2)

    assert db_session.get(Material, result.destination_material_id).project_id == site.id
    assert db_session.query(Material).filter_by(project_id=site.id).one().quantity == 2
