from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from findules.database import Base, get_db
from findules.main import app
from findules.models import Branch, BranchBalance, BranchBalanceTransaction, BalanceTransactionType, Cashier, Role, User
from findules.security import create_access_token, get_password_hash, login_limiter

PASSWORD = "secret123"

engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def password_hash():
    # bcrypt is slow on purpose; hash once for every test user
    return get_password_hash(PASSWORD)


@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_login_limiter():
    login_limiter.reset()
    yield
    login_limiter.reset()


@pytest.fixture()
def branch(db):
    branch = Branch(branch_code="LAG", branch_name="Lagos Branch", location="Lagos")
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return branch


@pytest.fixture()
def other_branch(db):
    branch = Branch(branch_code="ABJ", branch_name="Abuja Branch", location="Abuja")
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return branch


def make_user(db, password_hash, branch, role, email):
    user = User(name=email.split("@")[0].title(), email=email, password_hash=password_hash, role=role,
                branch_id=branch.id)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def manager(db, password_hash, branch):
    return make_user(db, password_hash, branch, Role.MANAGER, "manager@example.com")


@pytest.fixture()
def branch_admin(db, password_hash, branch):
    return make_user(db, password_hash, branch, Role.BRANCH_ADMIN, "admin@example.com")


@pytest.fixture()
def staff(db, password_hash, branch):
    return make_user(db, password_hash, branch, Role.STAFF, "staff@example.com")


@pytest.fixture()
def other_staff(db, password_hash, other_branch):
    return make_user(db, password_hash, other_branch, Role.STAFF, "remote@example.com")


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture()
def manager_headers(manager):
    return auth_headers(manager)


@pytest.fixture()
def staff_headers(staff):
    return auth_headers(staff)


@pytest.fixture()
def cashier(db, branch):
    cashier = Cashier(name="Ada Obi", branch_id=branch.id)
    db.add(cashier)
    db.commit()
    db.refresh(cashier)
    return cashier


@pytest.fixture()
def funded_branch(db, branch, manager):
    """Lagos branch with a 50,000.00 opening balance."""
    balance = BranchBalance(
        branch_id=branch.id,
        opening_balance=Decimal("50000.00"),
        current_balance=Decimal("50000.00"),
        total_issued=Decimal("0"),
        total_retired=Decimal("0"),
    )
    db.add(balance)
    db.flush()
    db.add(BranchBalanceTransaction(
        branch_balance_id=balance.id,
        transaction_type=BalanceTransactionType.OPENING_BALANCE,
        amount=Decimal("50000.00"),
        balance_before=Decimal("0"),
        balance_after=Decimal("50000.00"),
        performed_by=manager.id,
        notes="Initial opening balance",
    ))
    db.commit()
    return branch
