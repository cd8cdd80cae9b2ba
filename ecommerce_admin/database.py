# ecommerce_admin/database.py
import click
from flask import current_app
from flask.cli import with_appcontext

from .constants import PERMISSION_GROUPS, ROLE_DEFINITIONS, SUPER_ADMIN_ROLE
from .models import db, Permission, Role, User


def seed_permissions_and_roles():
    """Create missing permissions and roles; existing rows are left untouched."""
    permissions = {perm.name: perm for perm in Permission.query.all()}
    created_permissions = 0
    for group, names in PERMISSION_GROUPS.items():
        for name in names:
            if name not in permissions:
                permissions[name] = Permission(name=name, description=f"{name.capitalize()} ({group})")
                db.session.add(permissions[name])
                created_permissions += 1

    created_roles = 0
    for role_name, permission_names in ROLE_DEFINITIONS.items():
        if Role.query.filter_by(name=role_name).first() is None:
            role = Role(name=role_name, description=f"{role_name} role")
            role.permissions = [permissions[name] for name in dict.fromkeys(permission_names)]
            db.session.add(role)
            created_roles += 1

    current_app.logger.info(f"Seeded {created_permissions} permission(s) and {created_roles} role(s).")
    return created_permissions, created_roles


def seed_admin_user():
    admin_email = current_app.config.get('INITIAL_ADMIN_EMAIL')
    admin_password = current_app.config.get('INITIAL_ADMIN_PASSWORD')

    if not (admin_email and admin_password):
        current_app.logger.warning(
            "INITIAL_ADMIN_EMAIL or INITIAL_ADMIN_PASSWORD not set in config. "
            "Initial admin user will not be created automatically."
        )
        return None

    admin = User.query.filter_by(email=admin_email.lower()).first()
    if admin is not None:
        current_app.logger.info(f"Admin user '{admin_email}' already exists.")
        return admin

    admin = User(username=current_app.config.get('INITIAL_ADMIN_USERNAME', 'admin'),
                 email=admin_email.lower(), is_admin=True)
    admin.set_password(admin_password)
    super_admin = Role.query.filter_by(name=SUPER_ADMIN_ROLE).first()
    if super_admin is not None:
        admin.roles = [super_admin]
    db.session.add(admin)
    current_app.logger.info(f"Admin user '{admin_email}' created.")
    return admin


def populate_initial_data():
    try:
        seed_permissions_and_roles()
        db.session.flush()
        seed_admin_user()
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error committing initial data: {e}", exc_info=True)
        raise


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create all tables for the current models."""
    db.create_all()
    click.echo('Database tables created.')


@click.command('seed-db')
@with_appcontext
def seed_db_command():
    """Seed permissions, roles and the initial admin user."""
    populate_initial_data()
    click.echo('Database seeded with initial data.')
