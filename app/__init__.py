from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import logging
import os

db = SQLAlchemy()

logger = logging.getLogger(__name__)


class RequestIdFilter(logging.Filter):
    """Attach the current request id (or '-') to every log record"""

    def filter(self, record):
        from app.middleware.request_id import current_request_id

        record.request_id = current_request_id()
        return True


def configure_logging(app):
    """Configure root logging once, honouring LOG_LEVEL"""
    root = logging.getLogger()
    if not any(getattr(h, '_haulbase', False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler._haulbase = True
        handler.addFilter(RequestIdFilter())
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s'
        ))
        root.addHandler(handler)
    root.setLevel(app.config['LOG_LEVEL'])


def _apply_statement_timeout(app):
    """Bound every PostgreSQL statement by STATEMENT_TIMEOUT_MS"""
    timeout_ms = app.config.get('STATEMENT_TIMEOUT_MS') or 0
    if not timeout_ms or not app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgresql'):
        return

    options = dict(app.config.get('SQLALCHEMY_ENGINE_OPTIONS') or {})
    connect_args = dict(options.get('connect_args') or {})
    connect_args['options'] = f'-c statement_timeout={int(timeout_ms)}'
    options['connect_args'] = connect_args
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = options


def create_app(config_name=None):
    """Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    from config import config
    app.config.from_object(config[config_name])

    configure_logging(app)
    _apply_statement_timeout(app)

    # Initialize extensions
    db.init_app(app)
    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)

    from app.middleware.request_id import init_request_id
    init_request_id(app)

    from app.errors import ServiceError

    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        if error.status_code >= 500:
            logger.error('Service failure: %s', error.message)
        return jsonify(error.to_dict()), error.status_code

    # Register blueprints
    from app.routes.users import users_bp
    from app.routes.drivers import drivers_bp
    from app.routes.loads import loads_bp
    from app.routes.payments import invoices_bp, payments_bp
    from app.routes.notifications import notifications_bp
    from app.routes.conversations import conversations_bp
    from app.routes.reports import reports_bp

    api_prefix = app.config['API_PREFIX']
    app.register_blueprint(users_bp, url_prefix=f'{api_prefix}/users')
    app.register_blueprint(drivers_bp, url_prefix=f'{api_prefix}/drivers')
    app.register_blueprint(loads_bp, url_prefix=f'{api_prefix}/loads')
    app.register_blueprint(invoices_bp, url_prefix=f'{api_prefix}/invoices')
    app.register_blueprint(payments_bp, url_prefix=f'{api_prefix}/payments')
    app.register_blueprint(notifications_bp, url_prefix=f'{api_prefix}/notifications')
    app.register_blueprint(conversations_bp, url_prefix=f'{api_prefix}/conversations')
    app.register_blueprint(reports_bp, url_prefix=f'{api_prefix}/reports')

    # Health check endpoint
    @app.route('/health')
    def health():
        return {'status': 'healthy', 'service': 'haulbase-backend'}, 200

    return app
