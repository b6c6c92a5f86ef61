# Overview: Flask CLI command groups for bootstrap and operator tasks.

# backend/bullion/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system seed-demo
#   Idempotent demo tenant with admin/manager/staff logins, masters, lots, an order and rates.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Tenant management (MULTI-TENANT):
# - python -m flask tenants list
# - python -m flask tenants create --name "Salem Gold Buyers" --code "SLM"
#
# User management:
# - python -m flask users list [--tenant-code TMG]
# - python -m flask users create --tenant-code TMG --username rh.salem --password "secret123" --role MANAGER

import click
from flask.cli import with_appcontext

from .errors import ValidationError
from .extensions import db
from .models import Tenant, User
from .models.auth import ALL_ROLES
from .services import seed_service, tenant_service
from .services.auth_service import create_user


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('seed-demo')
@click.option('--code', default=seed_service.DEMO_TENANT_CODE, help='Tenant code for the demo tenant')
@click.option('--name', default=seed_service.DEMO_TENANT_NAME, help='Tenant name for the demo tenant')
@with_appcontext
def seed_demo_cli(code, name):
    """
    Seed a demo tenant.

    Creates:
    - Tenant (default "True Money Gold HQ", code TMG)
    - Users: admin/admin123, manager/manager123, staff/staff123
    - One master record of each kind
    - Lots LOT-P-001 (Pending), LOT-T-002 (InTransit), LOT-M-003 (melted)
    - Sales order SO-1001 and gold/silver market rates

    SECURITY: Change passwords immediately outside local development!
    """
    result = seed_service.seed_demo(code=code.strip().upper(), name=name)
    if not result["created"]:
        click.echo(f"PASS Tenant {code} already exists (ID: {result['tenant_id']}), nothing to seed")
        return
    click.echo(f"PASS Seeded demo tenant {code} (ID: {result['tenant_id']})")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system seed-demo' to load demo data.")


@click.group('tenants')
def tenants_group():
    """Tenant management commands."""


@tenants_group.command('list')
@with_appcontext
def list_tenants():
    """List all tenants."""
    tenants = db.session.query(Tenant).order_by(Tenant.id).all()
    if not tenants:
        click.echo("No tenants found.")
        return

    click.echo(f"{'ID':<5} {'Code':<10} {'Active':<8} Name")
    for tenant in tenants:
        click.echo(f"{tenant.id:<5} {tenant.code or '-':<10} {str(tenant.is_active):<8} {tenant.name}")


@tenants_group.command('create')
@click.option('--name', required=True, help='Tenant name')
@click.option('--code', required=True, help='Short code (unique)')
@with_appcontext
def create_tenant_cli(name, code):
    """Create a new tenant."""
    try:
        tenant = tenant_service.create_tenant(name, code)
    except ValueError as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(f"PASS Created tenant: {tenant.name} (ID: {tenant.id}, Code: {tenant.code})")


@click.group('users')
def users_group():
    """User management commands."""


@users_group.command('list')
@click.option('--tenant-code', help='Filter by tenant code')
@with_appcontext
def list_users(tenant_code):
    """List users with their roles."""
    query = db.session.query(User)
    if tenant_code:
        tenant = tenant_service.get_tenant_by_code(tenant_code)
        if not tenant:
            click.echo(f"FAIL Tenant {tenant_code} not found")
            return
        query = query.filter_by(tenant_id=tenant.id)

    users = query.order_by(User.id).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo(f"{'ID':<5} {'Tenant':<8} {'Username':<20} {'Role':<10} Active")
    for user in users:
        click.echo(f"{user.id:<5} {user.tenant_id:<8} {user.username:<20} {user.role:<10} {user.is_active}")


@users_group.command('create')
@click.option('--tenant-code', required=True, help='Tenant code')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ALL_ROLES, case_sensitive=False), prompt=True, help='Role')
@with_appcontext
def create_user_cli(tenant_code, username, password, role):
    """
    Create a user within a tenant.

    MULTI-TENANT: the user can only ever act inside this tenant.
    """
    tenant = tenant_service.get_tenant_by_code(tenant_code)
    if not tenant:
        click.echo(f"FAIL Tenant {tenant_code} not found")
        return

    try:
        user = create_user(username=username, password=password, tenant_id=tenant.id, role=role.upper())
    except (ValidationError, ValueError) as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(f"PASS Created user {user.username} ({user.role}) in tenant {tenant.code}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(tenants_group)
    app.cli.add_command(users_group)
