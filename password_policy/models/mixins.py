# password_policy/models/mixins.py
"""SQLAlchemy declarative mixins implementing the account and history contracts

Usage with Flask-SQLAlchemy::

    class User(db.Model, PasswordPolicyMixin):
        __password_field__ = 'password_hash'
        password_hash = db.Column(db.String(256), nullable=False)
        password_history = db.relationship('PasswordHistory', back_populates='user',
                                           cascade='all, delete-orphan',
                                           order_by='PasswordHistory.created_at')

    class PasswordHistory(db.Model, PasswordHistoryMixin):
        user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
        user = db.relationship('User', back_populates='password_history')
"""
from sqlalchemy import Column, DateTime, String

from password_policy.models.policy_config import DEFAULT_HISTORY_FIELD, DEFAULT_PASSWORD_FIELD
from password_policy.utils.clock import utcnow


class PasswordPolicyMixin:
    """Account side: password change timestamp plus the contract methods"""

    __password_field__ = DEFAULT_PASSWORD_FIELD
    __password_history_field__ = DEFAULT_HISTORY_FIELD

    password_changed_at = Column(DateTime, nullable=True)

    def get_id(self):
        return getattr(self, 'id', None)

    def get_password(self):
        return getattr(self, self.__password_field__)

    def set_password(self, password):
        setattr(self, self.__password_field__, password)

    def get_password_changed_at(self):
        return self.password_changed_at

    def set_password_changed_at(self, changed_at):
        self.password_changed_at = changed_at

    def get_password_history(self):
        return getattr(self, self.__password_history_field__)

    def add_password_history(self, entry):
        # Setting the entry's back reference may already have appended it
        history = self.get_password_history()
        if entry not in history:
            history.append(entry)

    def remove_password_history(self, entry):
        history = self.get_password_history()
        if entry in history:
            history.remove(entry)


class PasswordHistoryMixin:
    """History side: one archived hash with its optional legacy salt"""

    password_hash = Column(String(256), nullable=False)
    salt = Column(String(256), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<{type(self).__name__} created_at={self.created_at}>'

    def get_password(self):
        return self.password_hash

    def set_password(self, password):
        self.password_hash = password

    def get_created_at(self):
        return self.created_at

    def set_created_at(self, created_at):
        self.created_at = created_at

    def get_salt(self):
        return self.salt

    def set_salt(self, salt):
        self.salt = salt
