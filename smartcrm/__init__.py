"""
Flask application factory.

Creates and configures the Flask app, registers all blueprints.
"""
from flask import Flask, jsonify


def create_app():
    """Create and configure the Flask application."""
    from smartcrm.logging_config import configure_logging
    from smartcrm.config import CORS_HEADERS

    app = Flask(__name__)

    configure_logging(app)

    # ── CORS (every response, including preflight and errors) ───────────
    @app.after_request
    def add_cors_headers(response):
        for header, value in CORS_HEADERS.items():
            response.headers[header] = value
        return response

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({'error': 'Method not allowed'}), 405

    # Register blueprints
    from smartcrm.routes.sdr import bp as sdr_bp
    from smartcrm.routes.ae import bp as ae_bp
    from smartcrm.routes.coaching import bp as coaching_bp
    from smartcrm.routes.content import bp as content_bp
    from smartcrm.routes.research import bp as research_bp
    from smartcrm.routes.automation import bp as automation_bp
    from smartcrm.routes.engagement import bp as engagement_bp
    from smartcrm.routes.webhook import bp as webhook_bp
    from smartcrm.routes.zapier import bp as zapier_bp
    from smartcrm.routes.health import bp as health_bp

    app.register_blueprint(sdr_bp)
    app.register_blueprint(ae_bp)
    app.register_blueprint(coaching_bp)
    app.register_blueprint(content_bp)
    app.register_blueprint(research_bp)
    app.register_blueprint(automation_bp)
    app.register_blueprint(engagement_bp)
    app.register_blueprint(webhook_bp)
    app.register_blueprint(zapier_bp)
    app.register_blueprint(health_bp)

    # Import models so Base.metadata knows about them (relationships resolve by name).
    # Schema is owned by Supabase migrations; no create_all() here.
    import importlib
    for module in ('contact', 'deal', 'activity', 'agent', 'engagement', 'video', 'events'):
        importlib.import_module(f'smartcrm.models.{module}')

    return app
