# ==============================================================================
# merchant_hero/__init__.py
# ------------------------------------------------------------------------------
# Application factory for creating and configuring the Flask app instance.
# ==============================================================================

import os
import json
import logging

import click
from flask import Flask
from config import Config
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Initialize extensions globally to be accessible by other modules
db = SQLAlchemy()
migrate = Migrate()


def create_app(config_class=Config):
    """
    Application factory function. Creates and configures the Flask application.

    Args:
        config_class (class): The configuration class to use.

    Returns:
        Flask: The configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    # Configure logging
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    # The instance folder holds the SQLite upload history
    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    migrate.init_app(app, db)

    from merchant_hero.api import bp as api_bp
    app.register_blueprint(api_bp)

    register_commands(app)

    app.logger.info('Merchant Hero upload service startup complete')
    return app


def register_commands(app):

    @app.cli.command('diagnose')
    def diagnose():
        """Checks the storage configuration and connectivity."""
        from merchant_hero.api.routes import collect_diagnostics
        click.echo(json.dumps(collect_diagnostics(app.config), indent=2))

    @app.cli.command('upload')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    @click.option('--month', required=True, help="Month of the data, YYYY-MM or YYYY/MM.")
    @click.option('--filename', default=None, help="Name recorded with the upload (defaults to the file name).")
    def upload(path, month, filename):
        """Uploads a processor spreadsheet for one month."""
        from merchant_hero.ingest.analyzer import read_spreadsheet
        from merchant_hero.ingest.errors import UploadError
        from merchant_hero.ingest.storage import client_from_config
        from merchant_hero.ingest.uploader import upload_master

        try:
            client = client_from_config(app.config)
            with open(path, 'rb') as stream:
                rows = read_spreadsheet(stream, path)
            result = upload_master(month, rows, filename or os.path.basename(path), client)
        except UploadError as e:
            raise click.ClickException(json.dumps(e.to_dict()))
        click.echo(json.dumps(result, indent=2))
