"""
Pytest fixtures for TrustNest.

Every test gets a fresh app on in-memory SQLite, a fakeredis cache and a
blob store rooted in the test's tmp_path. The app context stays pushed for
the whole test so services and models can be used directly.
"""
import itertools

import fakeredis
import pytest

from trustnest.app import create_app
from trustnest.auth.jwt_handler import generate_token
from trustnest.config import TestingConfig
from trustnest.extensions import db
from trustnest.models.profile import UserProfile
from trustnest.models.user import User

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 256
MB = 1024 * 1024


@pytest.fixture
def redis_client():
    return fakeredis.FakeRedis()


@pytest.fixture
def app(tmp_path, redis_client):
    app = create_app(TestingConfig, redis_client=redis_client, blob_root=tmp_path / 'blobs')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions['services']


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make_user(role='user', user_type='tenant', **fields):
        n = next(counter)
        user = User(
            email=fields.pop('email', f'user{n}@example.com'),
            name=fields.pop('name', f'User {n}'),
            role=role,
            user_type=user_type,
            **fields
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def other_user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role='admin', email='admin@trustnest.eu')


@pytest.fixture
def make_profile(app):
    def _make_profile(user, **fields):
        profile = UserProfile(user_id=user.id, **fields)
        db.session.add(profile)
        db.session.commit()
        return profile

    return _make_profile


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        return {'Authorization': f'Bearer {generate_token(user.id)}'}

    return _auth_headers


@pytest.fixture
def complete_checks(services):
    """Record all four sub-checks true for a user"""
    def _complete_checks(user):
        for check in ('email', 'phone', 'id', 'selfie'):
            services.verification.record_sub_check(user.id, check, True)
        return services.verification.get_or_create_record(user.id)

    return _complete_checks
