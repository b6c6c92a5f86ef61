# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service with Multi-Tenant Support

WHY: Every lot decision must be attributable. Uses bcrypt for password
hashing; no shared logins.

MULTI-TENANT: Users belong to exactly one tenant (tenant_id). Usernames are
the login handle and are unique across the deployment.
"""

import bcrypt

from ..errors import ValidationError
from ..extensions import db
from ..models import User, Tenant
from ..models.auth import ALL_ROLES
from bullion.time_utils import utcnow


MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    """Hash password using bcrypt with cost factor 12."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            field="password",
        )
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


def create_user(username: str, password: str, tenant_id: int, role: str) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises ValidationError for an unknown role, duplicate username or weak
    password; ValueError if the tenant does not exist or is inactive.
    """
    tenant = db.session.query(Tenant).filter_by(id=tenant_id).first()
    if not tenant:
        raise ValueError("Tenant not found")
    if not tenant.is_active:
        raise ValueError("Tenant is not active")

    role = (role or "").strip().upper()
    if role not in ALL_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ALL_ROLES)}", field="role")

    username = (username or "").strip()
    if not username:
        raise ValidationError("username is required", field="username")

    if db.session.query(User).filter_by(username=username).first():
        raise ValidationError("Username already exists", field="username")

    user = User(
        tenant_id=tenant_id,
        username=username,
        password_hash=hash_password(password),
        role=role,
    )

    db.session.add(user)
    db.session.commit()
    return user


def authenticate(username: str, password: str) -> User | None:
    """
    Authenticate user with username and password.

    Returns User if credentials valid and the tenant is active, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    user = db.session.query(User).filter(
        User.username == username,
        User.is_active.is_(True),
    ).first()

    if not user:
        return None

    tenant = db.session.query(Tenant).filter_by(id=user.tenant_id).first()
    if not tenant or not tenant.is_active:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None
