# Overview: Flask CLI command groups for bootstrap and lock maintenance.

# backend/greenscore/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to greenscore (PowerShell: $env:FLASK_APP="greenscore").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-demo
#   Create a demo seller with two projects, a demo buyer, and a few listed materials.
#
# Edit lock maintenance:
# - python -m flask locks release-stale
#   Clear every edit lock older than EDIT_LOCK_TIMEOUT_MINUTES.

import click
from decimal import Decimal
from flask.cli import with_appcontext

from .extensions import db
from .models import User, UserType
from .services import edit_lock_service, material_service, project_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete")


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """
    Create demo data for local development.

    Creates:
    - Seller: seller@greenscore.local with projects "Tower A" and "Tower B"
    - Buyer: buyer@greenscore.local
    - Three resale listings on Tower A
    """
    click.echo("START Seeding demo data...")

    seller = db.session.query(User).filter_by(email="seller@greenscore.local").first()
    if seller:
        click.echo(f"SKIP Demo seller already exists (ID: {seller.id})")
        return

    seller = User(
        email="seller@greenscore.local",
        name="Demo Seller",
        company_name="Demo Builders",
        user_type=UserType.SELLER,
    )
    buyer = User(
        email="buyer@greenscore.local",
        name="Demo Buyer",
        company_name="Demo Contractors",
        user_type=UserType.BUYER,
    )
    db.session.add_all([seller, buyer])
    db.session.commit()
    click.echo(f"PASS Created seller {seller.id} and buyer {buyer.id}")

    tower_a = project_service.create_project(seller.id, {"name": "Tower A", "location": "Pune"})
    tower_b = project_service.create_project(seller.id, {"name": "Tower B", "location": "Mumbai"})
    click.echo(f"PASS Created projects {tower_a.name} and {tower_b.name}")

    demo_materials = [
        {"material": "Wash Basin", "brand": "Hindware", "category": "Sanitary",
         "unit": "pcs", "quantity": 12, "price_today": Decimal("1850.00")},
        {"material": "Vitrified Tiles 600x600", "brand": "Kajaria", "category": "Flooring",
         "unit": "box", "quantity": 40, "price_today": Decimal("720.00")},
        {"material": "TMT Bar 12mm", "brand": "Tata Tiscon", "category": "Steel",
         "unit": "kg", "quantity": 500, "price_today": Decimal("68.50")},
    ]
    for fields in demo_materials:
        material = material_service.create_material(seller.id, {**fields, "project_id": tower_a.id})
        click.echo(f"  + {material.listing_id} {material.material} x{material.quantity}")

    click.echo("PASS Demo data seeded")


@click.group('locks')
def locks_group():
    """Edit lock maintenance commands."""


@locks_group.command('release-stale')
@with_appcontext
def release_stale():
    """Clear edit locks that have outlived the timeout."""
    released = edit_lock_service.release_stale_locks()
    click.echo(f"PASS Released {released} stale edit lock(s)")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(locks_group)
