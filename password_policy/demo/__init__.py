# password_policy/demo/__init__.py
"""Small host application exercising the password policy end to end"""
from flask import Flask, redirect, url_for

from password_policy.demo.config import config
from password_policy.demo.extensions import db, policy


def create_app(config_name='default', config_overrides=None, **policy_options):
    """Create and configure Flask application"""
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    if config_overrides:
        app.config.update(config_overrides)

    from password_policy.demo.controllers import auth_bp, dashboard_bp, load_current_user

    # Initialize extensions
    db.init_app(app)
    policy_options.setdefault('principal_loader', load_current_user)
    policy.init_app(app, db, **policy_options)

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')

    @app.route('/')
    def index():
        return redirect(url_for('dashboard.index'))

    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        db.create_all()

    return app


def register_error_handlers(app):
    """Register error handlers"""
    @app.errorhandler(404)
    def not_found(error):
        return "Page not found", 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return "Internal server error", 500
