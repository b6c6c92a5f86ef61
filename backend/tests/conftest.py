"""
Pytest fixtures for bullion backend tests.

Provides an app bound to an ephemeral SQLite file (so a second connection
can observe and race committed writes), two tenants with one user per role,
login helpers for the Flask test client and lot lifecycle helpers.
"""

import pytest

from bullion import create_app
from bullion.extensions import db
from bullion.models import Tenant, User
from bullion.services import lot_service
from bullion.services.auth_service import hash_password
from bullion.services.tenant_service import Identity


PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    db_path = tmp_path_factory.mktemp("db") / "bullion-test.sqlite3"
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Fresh data for each test (schema kept)."""
    app.config.update({
        'REQUIRE_VERIFIED_KYC': False,
        'MELT_LOSS_THRESHOLD_PERCENT': 5.0,
    })
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


@pytest.fixture(scope='session')
def password_hash():
    """bcrypt is deliberately slow; hash the shared test password once."""
    return hash_password(PASSWORD)


def _tenant(name: str, code: str) -> Tenant:
    tenant = Tenant(name=name, code=code, is_active=True)
    db.session.add(tenant)
    db.session.commit()
    return tenant


def _user(tenant: Tenant, username: str, role: str, password_hash: str) -> User:
    user = User(tenant_id=tenant.id, username=username, role=role, password_hash=password_hash)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture(scope='function')
def tenant_a(db_session):
    """Tenant A (first tenant)."""
    return _tenant("True Money Gold HQ", "TMG")


@pytest.fixture(scope='function')
def tenant_b(db_session):
    """Tenant B (second tenant)."""
    return _tenant("Salem Bullion Traders", "SLM")


@pytest.fixture(scope='function')
def admin_a(tenant_a, password_hash):
    return _user(tenant_a, "admin.a", "ADMIN", password_hash)


@pytest.fixture(scope='function')
def manager_a(tenant_a, password_hash):
    return _user(tenant_a, "manager.a", "MANAGER", password_hash)


@pytest.fixture(scope='function')
def staff_a(tenant_a, password_hash):
    return _user(tenant_a, "staff.a", "STAFF", password_hash)


@pytest.fixture(scope='function')
def admin_b(tenant_b, password_hash):
    return _user(tenant_b, "admin.b", "ADMIN", password_hash)


def identity_for(user: User) -> Identity:
    return Identity(tenant_id=user.tenant_id, user_id=user.id, role=user.role)


@pytest.fixture(scope='function')
def admin_identity(admin_a):
    return identity_for(admin_a)


@pytest.fixture(scope='function')
def manager_identity(manager_a):
    return identity_for(manager_a)


@pytest.fixture(scope='function')
def staff_identity(staff_a):
    return identity_for(staff_a)


@pytest.fixture(scope='function')
def admin_b_identity(admin_b):
    return identity_for(admin_b)


def get_auth_token(client, username: str, password: str = PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def login(client):
    """login(user) -> Authorization headers for that user."""
    def _login(user: User) -> dict:
        token = get_auth_token(client, user.username)
        assert token, f"login failed for {user.username}"
        return auth_headers(token)
    return _login


# =============================================================================
# LOT HELPERS
# =============================================================================

def lot_payload(lot_no: str = "LOT-001", items=None, **fields) -> dict:
    """A valid submit payload: one 10 g chain, 2% waste, Rs 7200/g."""
    payload = {
        "lotNo": lot_no,
        "branch": "Erode",
        "refNo": "R-101",
        "date": "2025-02-24",
        "customerIdentity": "2341 2341 2346",
        "customerName": "Arjun Reddy",
        "items": items if items is not None else [
            {"product": "Chain", "piece": 1, "weight": 10, "purity": "916", "wastePercent": 2, "rate": 7200},
        ],
    }
    payload.update(fields)
    return payload


LIFECYCLE = (
    ("approve", lot_service.decide, {"decision": "Approved", "remarks": "Checked by RH"}),
    ("invoice", lot_service.invoice, {"remarks": "Final rates"}),
    ("verify", lot_service.accounts_verify, {}),
    ("disburse", lot_service.disburse, {"paymentMode": "bank", "referenceNo": "UTR-001", "amount": 72676.80}),
    ("transfer", lot_service.initiate_transfer, {"vehicleNo": "TN-33-A-1234", "driverName": "Suresh", "sealNumber": "SEAL-001"}),
    ("receive", lot_service.confirm_receipt, {"remarks": "Seal intact"}),
    ("melt", lot_service.melt, {"outputWeight": 9.85, "operator": "K. Balan", "temperature": 1064}),
)


@pytest.fixture(scope='function')
def make_lot(admin_identity):
    """make_lot(lot_no, through=None) -> Lot submitted and advanced through the named step."""
    def _make(lot_no: str = "LOT-001", through: str | None = None, identity=None, **fields):
        identity = identity or admin_identity
        lot = lot_service.submit_lot(identity, lot_payload(lot_no, **fields))
        if through is None:
            return lot
        for name, handler, payload in LIFECYCLE:
            lot = handler(identity, {"lotNo": lot_no, **payload})
            if name == through:
                return lot
        raise ValueError(f"unknown step {through}")
    return _make
