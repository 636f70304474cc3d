"""
Application factory for the TrustNest backend
"""
import secrets
import time
import uuid

import click
from cryptography.fernet import Fernet
from flask import Flask, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from trustnest import models  # noqa: F401  register mappers before create_all
from trustnest.auth.jwt_handler import generate_token
from trustnest.config import Config
from trustnest.errors import TrustNestError
from trustnest.extensions import db, migrate, cors, limiter, cache, blob_store
from trustnest.models.user import User
from trustnest.routes import register_blueprints
from trustnest.services import build_services
from trustnest.utils.db_init import init_database
from trustnest.utils.logging_config import setup_logger


def _resolve_secrets(app, logger):
    """Production refuses to start without keys; development generates them"""
    if not app.config.get('SECRET_KEY'):
        if app.config['PRODUCTION']:
            raise RuntimeError('SECRET_KEY must be set in production')
        app.config['SECRET_KEY'] = secrets.token_hex(32)
        logger.warning("SECRET_KEY not set, generated a temporary key; tokens will not survive a restart")

    if not app.config.get('DOCUMENT_ENCRYPTION_KEY'):
        if app.config['PRODUCTION']:
            raise RuntimeError('DOCUMENT_ENCRYPTION_KEY must be set in production')
        app.config['DOCUMENT_ENCRYPTION_KEY'] = Fernet.generate_key().decode()
        logger.warning("DOCUMENT_ENCRYPTION_KEY not set, generated a temporary key; "
                       "stored documents will be unreadable after a restart")


def _error_response(payload, status_code):
    payload['request_id'] = getattr(g, 'request_id', 'unknown')
    return jsonify(payload), status_code


def register_error_handlers(app, logger):
    @app.errorhandler(TrustNestError)
    def handle_trustnest_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            logger.error(f"{error.code}: {error.message}", extra={
                'request_id': getattr(g, 'request_id', 'unknown')
            })
        return _error_response(error.to_dict(), error.status_code)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.error('database_error', extra={
            'error': str(error),
            'request_id': getattr(g, 'request_id', 'unknown')
        }, exc_info=True)
        return _error_response({
            'error': 'Database unavailable, please retry',
            'code': 'DEPENDENCY_FAILURE',
            'retryable': True
        }, 503)

    @app.errorhandler(404)
    def not_found(error):
        return _error_response({'error': 'Resource not found', 'code': 'NOT_FOUND'}, 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error_response({'error': 'Method not allowed', 'code': 'METHOD_NOT_ALLOWED'}, 405)

    @app.errorhandler(413)
    def request_too_large(error):
        return _error_response({
            'error': 'File too large',
            'code': 'VALIDATION_ERROR',
            'details': {'max_bytes': app.config['MAX_CONTENT_LENGTH']}
        }, 413)

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        return _error_response({
            'error': 'Rate limit exceeded',
            'code': 'RATE_LIMITED',
            'message': str(error.description)
        }, 429)

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return _error_response({'error': error.description, 'code': 'HTTP_ERROR'}, error.code)
        db.session.rollback()
        logger.error('internal_server_error', extra={
            'error': str(error),
            'request_id': getattr(g, 'request_id', 'unknown')
        }, exc_info=True)
        return _error_response({'error': 'Internal server error', 'code': 'INTERNAL_ERROR'}, 500)


def register_request_hooks(app, logger):
    @app.before_request
    def before_request():
        g.request_id = str(uuid.uuid4())
        g.request_start_time = time.monotonic()

        logger.info('request_started', extra={
            'request_id': g.request_id,
            'method': request.method,
            'path': request.path,
            'remote_addr': request.remote_addr
        })

    @app.after_request
    def after_request(response):
        if hasattr(g, 'request_start_time'):
            duration = time.monotonic() - g.request_start_time

            logger.info('request_completed', extra={
                'request_id': getattr(g, 'request_id', 'unknown'),
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': round(duration * 1000, 2)
            })

        response.headers['X-Request-ID'] = getattr(g, 'request_id', 'unknown')
        return response


def register_cli(app):
    @app.cli.command('init-db')
    def init_db_command():
        """Create tables and the admin account"""
        init_database(app.config['ADMIN_EMAIL'])

    @app.cli.command('issue-token')
    @click.argument('email')
    def issue_token_command(email):
        """Print a bearer token for an existing user"""
        user = User.query.filter_by(email=email).first()
        if not user:
            raise click.ClickException(f'No user with email {email}')
        click.echo(generate_token(user.id))


def create_app(config_class=Config, redis_client=None, blob_root=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logger = setup_logger('trustnest')
    _resolve_secrets(app, logger)

    db.init_app(app)
    migrate.init_app(app, db)
    cors.init_app(app, origins=app.config['ALLOWED_ORIGINS'], supports_credentials=True)
    limiter.init_app(app)
    cache.init_app(app, redis_client=redis_client)
    blob_store.init_app(app, root=blob_root)

    app.extensions['services'] = build_services(app, logger)

    register_request_hooks(app, logger)
    register_error_handlers(app, logger)
    register_blueprints(app)
    register_cli(app)

    @app.route('/api/health', methods=['GET'])
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'trustnest',
            'request_id': g.request_id
        })

    logger.info(f"TrustNest app created (production={app.config['PRODUCTION']})")
    return app
