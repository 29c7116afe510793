# ==============================================================================
# config.py
# ------------------------------------------------------------------------------
# Configuration settings for the Flask application.
# Uses environment variables for sensitive data to keep them out of version control.
# ==============================================================================

import os
from dotenv import load_dotenv

# Determine the absolute path of the project directory
basedir = os.path.abspath(os.path.dirname(__file__))

# Load environment variables from a .env file located in the project root
load_dotenv(os.path.join(basedir, '.env'))


def _optional_float(name):
    value = os.environ.get(name)
    return float(value) if value else None


class Config:
    """
    Base configuration class. Contains default settings that can be overridden
    by environment-specific configurations.
    """
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-should-really-set-a-secret-key-in-your-env-file'

    # --- Storage Collaborator ---
    # Endpoint and service credential of the managed database exposing the
    # mh_upload_master RPC. No defaults: both are checked on every upload
    # request and a missing one yields a 500.
    SUPABASE_URL = os.environ.get('SUPABASE_URL')
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get('SUPABASE_SERVICE_ROLE_KEY')

    # Seconds to wait for the RPC. None waits for as long as the call takes.
    STORAGE_TIMEOUT = _optional_float('STORAGE_TIMEOUT')

    # --- Database Configuration ---
    # Local upload history only. Facts and locations live in the storage collaborator.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance/app.db')

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # --- File Upload Configuration ---
    ALLOWED_EXTENSIONS = {'.csv', '.xlsx'}

    # Spreadsheets of a few thousand merchants fit comfortably in 20 MB
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024

    # Number of entries returned by the upload history endpoint
    UPLOAD_HISTORY_LIMIT = int(os.environ.get('UPLOAD_HISTORY_LIMIT') or 50)
