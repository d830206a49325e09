from flask import Flask, jsonify
from pymongo.errors import PyMongoError
from config import config
from playerbook.extensions import jwt, celery, init_extensions
from playerbook.utils.errors import ApiError
import os
import logging

def create_app(config_name=None):
    """Application factory pattern"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    if not app.config.get('JWT_SECRET_KEY'):
        raise RuntimeError('JWT_SECRET_KEY must be set in the environment')

    logging.getLogger('playerbook').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions
    init_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'Playerbook Academy API',
            'version': '1.0.0'
        })

    return app, celery

def register_blueprints(app):
    """Register all blueprints"""
    from playerbook.routes.academies import academies_bp
    from playerbook.routes.players import players_bp
    from playerbook.routes.uploads import uploads_bp

    app.register_blueprint(academies_bp)
    app.register_blueprint(players_bp)
    app.register_blueprint(uploads_bp)

def register_error_handlers(app):
    """Register error handlers"""

    @app.errorhandler(ApiError)
    def api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(PyMongoError)
    def database_error(error):
        app.logger.error(f"Database error: {str(error)}")
        message = 'Something went wrong, please try again later.'
        return jsonify({'message': message, 'error': message}), 500

    @app.errorhandler(404)
    def not_found(error):
        message = 'Could not find this route.'
        return jsonify({'message': message, 'error': message}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        message = 'Method not allowed'
        return jsonify({'message': message, 'error': message}), 405

    @app.errorhandler(413)
    def too_large(error):
        message = 'Uploaded file is too large'
        return jsonify({'message': message, 'error': message}), 413

    @app.errorhandler(500)
    def internal_error(error):
        message = 'An unknown error occurred!'
        return jsonify({'message': message, 'error': message}), 500

# JWT error handlers
@jwt.expired_token_loader
def expired_token_callback(jwt_header, jwt_payload):
    return jsonify({'message': 'Token has expired', 'error': 'Token has expired'}), 401

@jwt.invalid_token_loader
def invalid_token_callback(error):
    return jsonify({'message': 'Authentication failed!', 'error': 'Invalid token'}), 401

@jwt.unauthorized_loader
def missing_token_callback(error):
    return jsonify({'message': 'Authentication failed!', 'error': 'Authorization token is required'}), 401
