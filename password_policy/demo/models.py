# password_policy/demo/models.py
"""Database models for the demo application"""
from password_policy.demo.extensions import db
from password_policy.models import PasswordHistoryMixin, PasswordPolicyMixin
from password_policy.utils.clock import utcnow


class User(db.Model, PasswordPolicyMixin):
    """User whose password is managed by the policy"""
    __tablename__ = 'users'
    __password_field__ = 'password_hash'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    is_active = db.Column(db.Boolean, default=True)

    password_history = db.relationship('PasswordHistory', back_populates='user',
                                       cascade='all, delete-orphan',
                                       order_by='PasswordHistory.created_at')

    def __repr__(self):
        return f'<User {self.username}>'


class PasswordHistory(db.Model, PasswordHistoryMixin):
    """Previously used password of a user"""
    __tablename__ = 'password_history'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    user = db.relationship('User', back_populates='password_history')

    def __repr__(self):
        return f'<PasswordHistory user_id={self.user_id} created_at={self.created_at}>'
