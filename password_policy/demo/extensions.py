# password_policy/demo/extensions.py
"""Flask extensions initialization"""
from flask_sqlalchemy import SQLAlchemy

from password_policy import PasswordPolicy

db = SQLAlchemy()
policy = PasswordPolicy()
