"""Shared fixtures: the demo application, an in-memory database and a frozen clock"""
from datetime import datetime, timedelta

import pytest

from password_policy.demo import create_app
from password_policy.demo.extensions import db
from password_policy.demo.models import PasswordHistory, User
from password_policy.utils.security import hash_password

NOW = datetime(2024, 6, 1, 12, 0, 0)


class FrozenClock:
    """Clock returning a fixed naive UTC time that tests can move"""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class FakeHistoryEntry:
    """Plain history entry implementing the history contract"""

    def __init__(self, password=None, created_at=None, salt=None):
        self.password = password
        self.created_at = created_at
        self.salt = salt

    def __repr__(self):
        return f'<FakeHistoryEntry {self.password} {self.created_at}>'

    def get_password(self):
        return self.password

    def set_password(self, password):
        self.password = password

    def get_created_at(self):
        return self.created_at

    def set_created_at(self, created_at):
        self.created_at = created_at

    def get_salt(self):
        return self.salt

    def set_salt(self, salt):
        self.salt = salt


class FakeAccount:
    """Plain account implementing the account contract"""

    def __init__(self, id=1, password=None, changed_at=None, history=None, username=None):
        self.id = id
        self.password = password
        self.changed_at = changed_at
        self.history = list(history or [])
        self.username = username

    def get_id(self):
        return self.id

    def get_password(self):
        return self.password

    def set_password(self, password):
        self.password = password

    def get_password_changed_at(self):
        return self.changed_at

    def set_password_changed_at(self, changed_at):
        self.changed_at = changed_at

    def get_password_history(self):
        return self.history

    def add_password_history(self, entry):
        self.history.append(entry)

    def remove_password_history(self, entry):
        self.history.remove(entry)


class CountingCache:
    """Dictionary cache recording every call made to it"""

    def __init__(self):
        self.data = {}
        self.gets = 0
        self.sets = 0
        self.deleted = []

    def get(self, key):
        self.gets += 1
        return self.data.get(key)

    def set(self, key, value, timeout=None):
        self.sets += 1
        self.data[key] = value
        return True

    def delete(self, key):
        self.deleted.append(key)
        return self.data.pop(key, None) is not None


def fake_verify(password, hashed, salt=None):
    """Cheap stand-in for bcrypt: hashes are 'hash:<password>'"""
    return hashed == 'hash:' + password


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def app(clock):
    """Demo application with an in-memory database and the frozen clock"""
    app = create_app('testing', clock=clock)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app, clock):
    """Create and commit a user whose password was last changed ``age_days`` ago"""
    def factory(username='alice', password='Password1', age_days=0):
        user = User(username=username,
                    password_hash=hash_password(password, rounds=app.config['BCRYPT_ROUNDS']),
                    password_changed_at=clock.now - timedelta(days=age_days))
        db.session.add(user)
        db.session.commit()
        return user
    return factory


@pytest.fixture
def add_history(app):
    """Attach an archived password to ``user`` without going through a password change"""
    def factory(user, password, created_at):
        entry = PasswordHistory(user=user, created_at=created_at,
                                password_hash=hash_password(password,
                                                            rounds=app.config['BCRYPT_ROUNDS']))
        db.session.add(entry)
        db.session.commit()
        return entry
    return factory


def login(client, username='alice', password='Password1'):
    return client.post('/auth/login', data={'username': username, 'password': password})
