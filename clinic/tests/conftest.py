import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.models import User
from clinic.tests.factories import make_doctor, make_hospital, make_user


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters and cached profiles/doctor lists live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def hospital(db):
    return make_hospital()


@pytest.fixture
def doctor(hospital):
    return make_doctor(hospital)


@pytest.fixture
def admin_user(hospital):
    return make_user(User.ROLE_ADMIN, hospital=hospital)


@pytest.fixture
def superadmin(db):
    return make_user(User.ROLE_SUPERADMIN)


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client
