"""Test the expired password gate on locked routes"""
from datetime import timedelta

import pytest
from werkzeug.routing import BuildError

from conftest import FakeAccount, FrozenClock, login
from password_policy import PolicyConfig, signals
from password_policy.demo import create_app
from password_policy.demo.extensions import db
from password_policy.services.expiry_listener import PasswordExpiryListener
from password_policy.services.expiry_service import PasswordExpiryService
from password_policy.services.registry import PolicyRegistry
from password_policy.services.request_gate import GateDecision, evaluate
from password_policy.utils.log import PolicyLogger

LOCKED = frozenset({'dashboard.index', 'auth.reset'})
EXCLUDED = frozenset({'auth.reset'})


@pytest.mark.parametrize('expired', [True, False])
@pytest.mark.parametrize('redirect_on_expiry', [True, False])
def test_excluded_route_always_passes(expired, redirect_on_expiry):
    assert evaluate('auth.reset', LOCKED, EXCLUDED, expired, redirect_on_expiry) is GateDecision.PASS


@pytest.mark.parametrize('route,expired,redirect_on_expiry,decision', [
    (None, True, True, GateDecision.PASS),
    ('public.page', True, True, GateDecision.PASS),
    ('dashboard.index', False, True, GateDecision.PASS),
    ('dashboard.index', True, False, GateDecision.WARN),
    ('dashboard.index', True, True, GateDecision.WARN_AND_REDIRECT),
])
def test_gate_decisions(route, expired, redirect_on_expiry, decision):
    assert evaluate(route, LOCKED, EXCLUDED, expired, redirect_on_expiry) is decision


class RecordingExpiryService(PasswordExpiryService):
    def __init__(self, registry, clock):
        super().__init__(registry, clock=clock)
        self.checked = []

    def is_expired(self, account):
        self.checked.append(account)
        return super().is_expired(account)


@pytest.fixture
def gate_parts():
    clock = FrozenClock()
    account = FakeAccount(changed_at=clock.now - timedelta(days=100))
    registry = PolicyRegistry(principal_loader=lambda: account)
    registry.add_config(PolicyConfig(FakeAccount, 'auth.reset', locked_routes=LOCKED,
                                     excluded_routes=EXCLUDED))
    notices = []
    listener = PasswordExpiryListener(RecordingExpiryService(registry, clock),
                                      notifier=lambda message, category: notices.append(
                                          (message, category)),
                                      url_generator=lambda endpoint: '/' + endpoint)
    return account, listener, notices


def test_expired_locked_route_warns(gate_parts):
    account, listener, notices = gate_parts

    assert listener.check('dashboard.index') is None
    assert notices == [({'title': 'Password expired',
                         'message': 'Your password has expired. Please change it to continue.'},
                        'error')]


def test_excluded_route_still_evaluates_expiry(gate_parts):
    account, listener, notices = gate_parts

    assert listener.check('auth.reset') is None
    assert listener.expiry_service.checked == [account]
    assert notices == []


def test_unlocked_route_skips_expiry(gate_parts):
    account, listener, notices = gate_parts

    assert listener.check('public.page') is None
    assert listener.check(None) is None
    assert listener.expiry_service.checked == []


def test_redirect_and_literal_message(gate_parts):
    account, listener, notices = gate_parts
    listener.redirect_on_expiry = True
    listener.error_message = 'Change your password now'
    listener.error_message_type = 'warning'

    response = listener.check('dashboard.index')

    assert response.status_code == 302
    assert response.location == '/auth.reset'
    assert notices == [('Change your password now', 'warning')]


def test_unbuildable_reset_route_degrades_to_warning(gate_parts):
    account, listener, notices = gate_parts
    listener.redirect_on_expiry = True

    def url_generator(endpoint):
        raise BuildError(endpoint, {}, 'GET')

    listener.url_generator = url_generator

    assert listener.check('dashboard.index') is None
    assert len(notices) == 1


def test_failing_notifier_does_not_abort_request(gate_parts, caplog):
    account, listener, notices = gate_parts
    listener.redirect_on_expiry = True
    listener.policy_logger = PolicyLogger.default()

    def notifier(message, category):
        raise RuntimeError('session unavailable')

    listener.notifier = notifier

    with caplog.at_level('WARNING', logger='password_policy'):
        response = listener.check('dashboard.index')

    assert response.status_code == 302
    assert 'Password expiry notification failed' in caplog.text
    assert 'session unavailable' in caplog.text


def test_expired_user_redirected_to_change_password(client, make_user):
    make_user(age_days=100)
    login(client)
    events = []

    def on_expired(sender, event):
        events.append(event)

    with signals.password_expired.connected_to(on_expired):
        response = client.get('/dashboard/')

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/auth/change-password')
    assert len(events) == 1
    assert events[0].route == 'dashboard.index'
    assert events[0].will_redirect is True
    with client.session_transaction() as session:
        assert ('warning', {'title': 'Password expired',
                            'message': 'Your password has expired. Please change it to continue.'}
                ) in session['_flashes']


def test_change_password_page_reachable_when_expired(client, make_user):
    make_user(age_days=100)
    login(client)

    response = client.get('/auth/change-password')

    assert response.status_code == 200
    assert b'Password expired' not in response.data


def test_fresh_password_passes(client, make_user):
    make_user(age_days=10)
    login(client)

    response = client.get('/dashboard/')

    assert response.status_code == 200
    assert b'expires in 80 days' in response.data


def test_anonymous_request_passes(client):
    response = client.get('/dashboard/')

    assert response.status_code == 302
    assert response.headers['Location'].endswith('/auth/login')


@pytest.fixture
def warn_only_app(clock):
    listener = {'redirect_on_expiry': False, 'error_msg': {'type': 'warning'}}
    entities = {'password_policy.demo.models.User': {
        'password_field': 'password_hash',
        'reset_password_route_name': 'auth.missing',
        'notified_routes': ['dashboard.index'],
    }}
    app = create_app('testing', {'PASSWORD_POLICY_ENTITIES': entities,
                                 'PASSWORD_POLICY_EXPIRY_LISTENER': listener}, clock=clock)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


def test_warning_without_redirect(warn_only_app, clock):
    from password_policy.demo.models import User
    from password_policy.utils.security import hash_password

    db.session.add(User(username='alice', password_hash=hash_password('Password1', rounds=4),
                        password_changed_at=clock.now - timedelta(days=100)))
    db.session.commit()
    client = warn_only_app.test_client()
    login(client)

    response = client.get('/dashboard/')

    assert response.status_code == 200
    assert b'class="flash warning"' in response.data
    assert b'Password expired' in response.data
