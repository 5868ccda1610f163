# Overview: Seller projects (construction sites); the containers materials and transfers move between.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..errors import InvalidArgumentError, NotFoundError
from ..models import Project, User
from ..validation import require_id
from .concurrency import atomic, run_with_retry

PROJECT_FIELDS = ("name", "location", "description")


def create_project(seller_id: str, fields: dict) -> Project:
    """
    Register a new project for a seller.

    name is required; location and description default to empty strings.
    Unknown keys are rejected.
    """
    seller_id = require_id(seller_id, "seller_id")
    unknown = sorted(set(fields) - set(PROJECT_FIELDS))
    if unknown:
        raise InvalidArgumentError(
            "Fields not writable: " + ", ".join(unknown),
            details={"fields": unknown},
        )
    name = str(fields.get("name") or "").strip()
    if not name:
        raise InvalidArgumentError("name is required")

    def _op():
        with atomic():
            if not db.session.get(User, seller_id):
                raise NotFoundError(f"Seller {seller_id} not found")
            project = Project(
                seller_id=seller_id,
                name=name,
                location=str(fields.get("location") or "").strip(),
                description=str(fields.get("description") or "").strip(),
            )
            db.session.add(project)
        return project

    project = run_with_retry(_op)
    current_app.logger.info("Project %s (%s) created for seller %s", project.id, name, seller_id)
    return project


def list_projects(seller_id: str) -> list[Project]:
    """A seller's projects, newest first."""
    return (
        db.session.query(Project)
        .filter_by(seller_id=seller_id)
        .order_by(Project.created_at.desc(), Project.id)
        .all()
    )
