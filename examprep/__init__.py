"""
Application Factory
Creates and configures the Flask application
"""
from flask import Flask
from examprep.config import get_config
from examprep.extensions import db, socketio
import logging


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures Flask app
    """
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from examprep.config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    app.logger.setLevel(getattr(logging, app.config['LOG_LEVEL'], logging.INFO))

    # Initialize extensions
    db.init_app(app)
    socketio.init_app(
        app,
        cors_allowed_origins=app.config['SOCKETIO_CORS_ALLOWED_ORIGINS'],
        async_mode=app.config['SOCKETIO_ASYNC_MODE']
    )

    # JSON errors for every blueprint
    from examprep.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from examprep.routes import api_bp
    app.register_blueprint(api_bp)

    # Register Socket.IO events
    from examprep.sockets import register_socket_events
    with app.app_context():
        register_socket_events()

    # Create database tables
    with app.app_context():
        db.create_all()
        app.logger.info('Database tables created/verified')

    return app
