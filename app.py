# app.py
from __future__ import annotations

import logging
import os

import click
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix
from flask_cors import CORS

from config import Config
from db import db, migrate
from realtime import socketio
from services.errors import EngineError

# Ensure models are imported so Flask-Migrate sees them
from models.bin import Bin
from models.collector import Collector
from models.truck import Truck

# Blueprints
from routes.bins import bins_bp
from routes.collectors import collectors_bp
from routes.trucks import trucks_bp

# Maintenance / CLI
from tasks.reconcile import reconcile_worklists
from seed import seed_demo


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__)

    # Respect reverse proxy headers (scheme / host) for correct URL generation
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)  # type: ignore[arg-type]

    # Load config + init extensions
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")), logging.INFO))

    origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/*": {"origins": origins}})

    db.init_app(app)
    migrate.init_app(app, db)
    socketio.init_app(app, cors_allowed_origins=origins)

    with app.app_context():
        # Touch models so Alembic/Flask-Migrate registers them
        _ = (Bin, Collector, Truck)
        if app.config.get("AUTO_CREATE_TABLES"):
            db.create_all()

    # Health check
    @app.route("/")
    def health_check():
        return jsonify(status="ok"), 200

    @app.errorhandler(EngineError)
    def handle_engine_error(e: EngineError):
        if e.status_code >= 500:
            app.logger.error("[api] %s %s -> %s: %s", request.method, request.path, e.kind, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def handle_404(e):
        return jsonify(success=False, error="NotFound", message="Not Found", path=request.path), 404

    # Global error handler
    @app.errorhandler(Exception)
    def handle_any_error(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify(success=False, error=e.name, message=e.description), e.code
        app.logger.exception("[api] unhandled error on %s %s", request.method, request.path)
        return jsonify(success=False, error="ServerError", message=str(e)), 500

    # --- Debug: list routes ---
    @app.route("/__routes")
    def __routes():
        from flask import Response
        lines = []
        for rule in app.url_map.iter_rules():
            methods = ",".join(sorted(m for m in rule.methods if m not in {"HEAD", "OPTIONS"}))
            lines.append(f"{methods:10s} {rule.rule}")
        lines.sort()
        return Response("\n".join(lines), mimetype="text/plain")

    # Register blueprints
    app.register_blueprint(bins_bp)
    app.register_blueprint(collectors_bp)
    app.register_blueprint(trucks_bp)

    # CLI: repair worklists and truck links left inconsistent by older writes
    @app.cli.command("reconcile")
    @click.option("--dry-run", is_flag=True, help="Report what would change without writing.")
    def reconcile_cmd(dry_run):
        stats = reconcile_worklists(dry_run=dry_run)
        print(f"Reconcile complete{' (dry run)' if dry_run else ''}: {stats}")

    @app.cli.command("seed")
    def seed_cmd():
        print(f"Seeded: {seed_demo()}")

    return app


# Optional local entrypoint (useful for quick dev runs)
if __name__ == "__main__":
    app = create_app()
    # Socket.IO server (falls back to Werkzeug in dev)
    socketio.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
        allow_unsafe_werkzeug=True,  # dev convenience
        debug=bool(os.environ.get("FLASK_DEBUG", "")),
    )
