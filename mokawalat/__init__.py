"""
mokawalat/__init__.py

Flask application factory for Mokawalat ERP.

Architecture:
- One Blueprint per business area, JSON in / JSON out.
- SQLite for development, any SQLAlchemy URL through DATABASE_URL.
- UI is never trusted; server-side access control is enforced in every route.

Navigation:
- Sidebar sections live in navigation.py and are exposed at /navigation,
  filtered for the signed-in user and translated to their locale.
"""

from __future__ import annotations

import logging

import click
from flask import Flask, jsonify, redirect, send_from_directory, url_for
from flask_login import current_user, login_required
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException

from .errors import ERPError
from .extensions import csrf, db, login_manager, migrate
from .models import User, ROLE_ADMIN

# Blueprint imports kept inside create_app() to reduce import side effects.


def _configure_logging(app: Flask) -> None:
    """Single stream handler on the package logger; level from LOG_LEVEL."""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    package_logger = logging.getLogger(__name__)
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        package_logger.addHandler(handler)

    app.logger.setLevel(level)


def create_app(config_object: str | object = "config.Config") -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    if not app.config.get("MAX_CONTENT_LENGTH"):
        # Headroom over MAX_UPLOAD_BYTES so oversized files surface as field errors.
        app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_UPLOAD_BYTES"] + 1024 * 1024

    _configure_logging(app)

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)

    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        """Load user for Flask-Login."""
        if not str(user_id).isdigit():
            return None
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"success": False, "message": "Authentication required."}), 401

    # ----------------------------------------------------------------------
    # Error handlers (JSON everywhere)
    # ----------------------------------------------------------------------
    @app.errorhandler(ERPError)
    def handle_erp_error(exc: ERPError):
        return jsonify({"success": False, "message": exc.message}), exc.status_code

    @app.errorhandler(CSRFError)
    def handle_csrf_error(exc: CSRFError):
        return jsonify({"success": False, "message": exc.description}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"success": False, "message": exc.description}), exc.code

    # ----------------------------------------------------------------------
    # Blueprints
    # ----------------------------------------------------------------------
    from .blueprints.auth import auth_bp
    from .blueprints.dashboard import dashboard_bp
    from .blueprints.projects import projects_bp
    from .blueprints.material_requests import material_requests_bp
    from .blueprints.employees import employees_bp
    from .blueprints.clients import clients_bp
    from .blueprints.suppliers import suppliers_bp
    from .blueprints.inventory import inventory_bp
    from .blueprints.procurement import procurement_bp
    from .blueprints.invoices import invoices_bp
    from .blueprints.financials import financials_bp
    from .blueprints.hr import hr_bp
    from .blueprints.settings import settings_bp
    from .blueprints.compliance import compliance_bp
    from .blueprints.assets import assets_bp

    for blueprint in (
        auth_bp,
        dashboard_bp,
        projects_bp,
        material_requests_bp,
        employees_bp,
        clients_bp,
        suppliers_bp,
        inventory_bp,
        procurement_bp,
        invoices_bp,
        financials_bp,
        hr_bp,
        settings_bp,
        compliance_bp,
        assets_bp,
    ):
        app.register_blueprint(blueprint)

    # ----------------------------------------------------------------------
    # Uploaded files
    # ----------------------------------------------------------------------
    @app.route("/uploads/<path:path>")
    @login_required
    def uploaded_file(path: str):
        from .storage import upload_root

        return send_from_directory(upload_root(), path)

    # ----------------------------------------------------------------------
    # CLI
    # ----------------------------------------------------------------------
    @app.cli.command("init-db")
    def init_db_command():
        """Create all tables (development; use `flask db upgrade` with migrations)."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("seed-data")
    def seed_data_command():
        """Seed company profile, a default account and sample records."""
        from .seed import seed_sample_data

        created = seed_sample_data()
        click.echo(f"Sample data seeded ({created} records created).")

    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("password")
    def create_admin_command(email: str, password: str):
        """Create an admin profile, or promote an existing one."""
        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()
        if user is None:
            user = User(email=email, display_name=email.split("@")[0])
            db.session.add(user)
        user.role = ROLE_ADMIN
        user.is_active = True
        user.set_password(password)
        db.session.commit()
        click.echo(f"Admin ready: {email}")

    # ----------------------------------------------------------------------
    # Home
    # ----------------------------------------------------------------------
    @app.route("/")
    def index():
        """Home: dashboard when signed in."""
        if current_user.is_authenticated:
            return redirect(url_for("dashboard.dashboard"))
        return jsonify({"app": app.config["APP_NAME"], "authenticated": False})

    return app
