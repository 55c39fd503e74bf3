# password_policy/demo/controllers.py
"""Account and dashboard views of the demo application

The dashboard endpoints are listed in ``notified_routes``: once a password is
older than ``expiry_days`` the policy flashes a warning there and redirects to
``auth.change_password``.
"""
from functools import wraps

from flask import (Blueprint, current_app, flash, redirect, render_template_string, request,
                   session, url_for)

from password_policy.demo.extensions import db, policy
from password_policy.demo.models import User
from password_policy.utils.clock import utcnow
from password_policy.utils.security import hash_password, verify_password

auth_bp = Blueprint('auth', __name__)
dashboard_bp = Blueprint('dashboard', __name__)

LAYOUT = """
{% with messages = get_flashed_messages(with_categories=true) %}
  {% for category, message in messages %}
    <div class="flash {{ category }}">
      {% if message is mapping %}<strong>{{ message.title }}</strong> {{ message.message }}
      {% else %}{{ message }}{% endif %}
    </div>
  {% endfor %}
{% endwith %}
"""

LOGIN_TEMPLATE = LAYOUT + """
<form method="post">
  <input name="username"><input name="password" type="password">
  <button type="submit">Log in</button>
</form>
"""

REGISTER_TEMPLATE = LAYOUT + """
<form method="post">
  <input name="username"><input name="password" type="password">
  <button type="submit">Register (min {{ min_length }} characters)</button>
</form>
"""

CHANGE_PASSWORD_TEMPLATE = LAYOUT + """
<p>Your last {{ history_count }} passwords cannot be reused.</p>
<form method="post">
  <input name="current_password" type="password">
  <input name="new_password" type="password">
  <input name="confirm_password" type="password">
  <button type="submit">Change password</button>
</form>
"""

DASHBOARD_TEMPLATE = LAYOUT + """
<h1>Welcome {{ user.username }}</h1>
{% if days_left is not none %}<p>Your password expires in {{ days_left }} days.</p>{% endif %}
"""


def load_current_user():
    """Principal loader handed to the policy: the user stored in the session"""
    user_id = session.get('user_id')
    if user_id is None:
        return None
    user = db.session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def login_required(f):
    """Decorator to ensure user is authenticated before accessing route"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = load_current_user()
        if user is None:
            session.clear()
            flash('Please log in to access this page.', 'warning')
            return redirect(url_for('auth.login'))
        request.current_user = user
        return f(*args, **kwargs)
    return decorated_function


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    min_length = current_app.config['MIN_PASSWORD_LENGTH']
    if request.method == 'POST':
        username = request.form.get('username', '').strip()
        password = request.form.get('password', '')

        if not username or len(password) < min_length:
            flash(f'Username and a password of at least {min_length} characters are required',
                  'error')
            return render_template_string(REGISTER_TEMPLATE, min_length=min_length), 400

        if User.query.filter_by(username=username).first():
            flash('Username already exists', 'error')
            return render_template_string(REGISTER_TEMPLATE, min_length=min_length), 400

        user = User(
            username=username,
            password_hash=hash_password(password, rounds=current_app.config['BCRYPT_ROUNDS']),
            password_changed_at=utcnow(),
        )
        db.session.add(user)
        db.session.commit()

        flash('Registration successful! Please log in.', 'success')
        return redirect(url_for('auth.login'))

    return render_template_string(REGISTER_TEMPLATE, min_length=min_length)


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'POST':
        username = request.form.get('username', '').strip()
        password = request.form.get('password', '')

        user = User.query.filter_by(username=username).first()
        if not user or not user.is_active or not verify_password(password, user.password_hash):
            flash('Invalid credentials', 'error')
            return render_template_string(LOGIN_TEMPLATE), 401

        session['user_id'] = user.id
        return redirect(url_for('dashboard.index'))

    return render_template_string(LOGIN_TEMPLATE)


@auth_bp.route('/logout')
def logout():
    session.clear()
    flash('You have been logged out', 'info')
    return redirect(url_for('auth.login'))


@auth_bp.route('/change-password', methods=['GET', 'POST'])
@login_required
def change_password():
    """Password rotation; the policy archives the old hash on commit"""
    user = request.current_user
    min_length = current_app.config['MIN_PASSWORD_LENGTH']
    history_count = policy.state.registry.resolve(user).history_limit

    def form(status=200):
        return render_template_string(CHANGE_PASSWORD_TEMPLATE,
                                      history_count=history_count), status

    if request.method == 'POST':
        current_password = request.form.get('current_password', '')
        new_password = request.form.get('new_password', '')
        confirm_password = request.form.get('confirm_password', '')

        if not verify_password(current_password, user.password_hash):
            flash('Current password is incorrect', 'error')
            return form(400)

        if len(new_password) < min_length:
            flash(f'Password must be at least {min_length} characters', 'error')
            return form(400)

        if new_password != confirm_password:
            flash('Passwords do not match', 'error')
            return form(400)

        if verify_password(new_password, user.password_hash):
            flash('New password cannot be the same as current password', 'error')
            return form(400)

        violation = policy.validate_password(new_password, user)
        if violation is not None:
            flash(violation.message, 'error')
            return form(400)

        user.password_hash = hash_password(new_password, rounds=current_app.config['BCRYPT_ROUNDS'])
        db.session.commit()

        flash('Password updated successfully', 'success')
        return redirect(url_for('dashboard.index'))

    return form()


@dashboard_bp.route('/')
@login_required
def index():
    user = request.current_user
    return render_template_string(DASHBOARD_TEMPLATE, user=user,
                                  days_left=policy.days_until_expiry(user))


@dashboard_bp.route('/profile')
@login_required
def profile():
    user = request.current_user
    return {'username': user.username,
            'password_expired': policy.is_password_expired(user),
            'history_size': len(user.password_history)}
