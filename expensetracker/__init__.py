from flask import Flask, jsonify, redirect, request, url_for
from .extensions import db, migrate, login_manager
from .config import Config
from .logs import configure_logging
from .errors import register_error_handlers
from .repository import EXTENSION_KEY, ExpenseRepository

from .blueprints.api.routes import api_bp
from .blueprints.auth.routes import auth_bp
from .blueprints.dashboard.routes import dashboard_bp
from .blueprints.expenses.routes import expenses_bp
from .blueprints.reports.routes import reports_bp


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app.config["LOG_LEVEL"], app.config["LOG_JSON"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Ensure tables exist for a smooth first run
    with app.app_context():
        db.create_all()

    app.extensions[EXTENSION_KEY] = ExpenseRepository(db.session)

    @login_manager.unauthorized_handler
    def unauthorized():
        if request.path.startswith("/api/"):
            return jsonify({"message": "Unauthorized"}), 401
        return redirect(url_for("auth.login", next=request.full_path))

    register_error_handlers(app)

    # Register blueprints
    app.register_blueprint(api_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(reports_bp)

    @app.route("/")
    def root():
        return redirect(url_for("dashboard.index"))

    return app
