from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from accounts.models import User
from employees.models import Employee


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        username="admin",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def super_admin(db):
    return User.objects.create_user(
        email="root@test.com",
        password="testpass123",
        username="root",
        role=User.Role.SUPER_ADMIN,
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def super_client(super_admin):
    client = APIClient()
    client.force_authenticate(user=super_admin)
    return client


@pytest.fixture
def employee(db):
    return Employee.objects.create(
        emp_id="EMP-001",
        first_name="Asha",
        last_name="Verma",
        email="asha.verma@test.com",
        department="Sales",
        package_prices={"basic": 3000, "silver": 4000, "gold": 5000},
        incentive_percentages={"basic": 5, "silver": 8, "gold": 10},
        default_monthly_revenue_target=Decimal("10000.00"),
        default_bonus_rule={"type": "perRevenue", "amount_per_revenue": 0.1},
    )


def merchant_payload(merchant_id, package="gold", **extra):
    payload = {
        "merchant_id": merchant_id,
        "name": f"Merchant {merchant_id}",
        "email": f"{merchant_id.lower()}@shops.test",
        "package": package,
    }
    payload.update(extra)
    return payload


@pytest.fixture
def merchant():
    return merchant_payload
