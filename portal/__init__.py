import logging

from flask import Flask
from pymongo import MongoClient

from portal.config import SystemConfig
from portal.log_config import configure_logging
from portal.stores import create_indexes

logger = logging.getLogger(__name__)


def create_app(config=None, db=None):
    """
    Build the portal application.

    `db` may be any pymongo-compatible database; when omitted a MongoClient
    is opened from MONGO_URI / DB_NAME.
    """
    app = Flask(__name__)
    app.config.from_object(SystemConfig)
    if config:
        app.config.update(config)

    configure_logging(app.config.get('LOG_LEVEL'))

    # Database configuration
    if db is None:
        client = MongoClient(app.config['MONGO_URI'])
        db = client[app.config['DB_NAME']]
    app.extensions['portal_db'] = db
    create_indexes(db)

    from portal.routes import courses, fees, grades, registration

    app.register_blueprint(registration.bp)
    app.register_blueprint(fees.bp)
    app.register_blueprint(courses.bp)
    app.register_blueprint(grades.bp)

    logger.info("Portal started against database %s", getattr(db, 'name', db))
    return app
