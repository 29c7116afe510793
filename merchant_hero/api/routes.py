# ==============================================================================
# merchant_hero/api/routes.py
# ------------------------------------------------------------------------------
# Defines the HTTP API of the upload service. Every upload entry point runs
# through the same orchestrator in merchant_hero.ingest.
# ==============================================================================

import json
from datetime import datetime

from flask import request, jsonify, current_app
from werkzeug.exceptions import HTTPException
from werkzeug.utils import secure_filename
from sqlalchemy.exc import SQLAlchemyError

from merchant_hero import db
from merchant_hero.api import bp
from merchant_hero.api.forms import SpreadsheetAnalysisForm, SpreadsheetUploadForm
from merchant_hero.models import UploadRecord
from merchant_hero.ingest import storage
from merchant_hero.ingest.analyzer import read_spreadsheet, analyze_rows
from merchant_hero.ingest.errors import UploadError, InvalidRequestBody
from merchant_hero.ingest.uploader import prepare_upload, submit_upload
from merchant_hero.reporting.commissions import prepare_commission_report

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
}

# Historical upload URLs still used by clients. All resolve to one view.
UPLOAD_MASTER_URLS = (
    '/api/uploads/master',
    '/api/uploads-master',
    '/functions/v1/mh_upload_master_http',
    '/functions/v1/uploads-master',
)

# --- Helper Functions ---

def preflight():
    return current_app.response_class('ok', status=200, headers=CORS_HEADERS)


def json_payload():
    """
    Decodes the request body as JSON regardless of the declared content type.
    An empty body counts as {}; a body that is not JSON is rejected.
    """
    raw = request.get_data(cache=True)
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise InvalidRequestBody()
    return payload if isinstance(payload, dict) else {}


def form_error(form):
    messages = [message for errors in form.errors.values() for message in errors]
    return UploadError(messages[0] if messages else 'Invalid upload', details=form.errors)


def record_upload(prepared):
    """Logs an accepted upload locally. Storage already has the data, so a failure here is only logged."""
    try:
        db.session.add(UploadRecord.from_prepared(prepared))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Could not record upload '{prepared.filename}': {e}", exc_info=True)


def run_upload(month, rows, filename, client):
    prepared = prepare_upload(month, rows, filename)
    result = submit_upload(prepared, client)
    record_upload(prepared)
    return jsonify(result), 200


def collect_diagnostics(config):
    """Reports which settings are present and whether storage answers. Never writes data."""
    has_url = bool(config.get('SUPABASE_URL'))
    has_key = bool(config.get('SUPABASE_SERVICE_ROLE_KEY'))
    db_ok, db_err, rpc_exists = False, None, False

    if has_url and has_key:
        client = storage.client_from_config(config)
        db_ok, db_err = client.check_connection()
        if db_ok:
            rpc_exists = client.rpc_exists()

    return {
        'hasUrl': has_url,
        'hasKey': has_key,
        'dbOk': db_ok,
        'dbErr': db_err,
        'rpcExists': rpc_exists,
        'timestamp': datetime.utcnow().isoformat() + 'Z',
    }

# --- Error Handling ---

@bp.after_request
def add_cors_headers(response):
    for header, value in CORS_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


@bp.errorhandler(UploadError)
def handle_upload_error(e):
    current_app.logger.warning(f"{type(e).__name__} on {request.path}: {e.message}")
    return jsonify(e.to_dict()), e.status_code


@bp.errorhandler(HTTPException)
def handle_http_error(e):
    return jsonify({'error': e.description}), e.code


@bp.errorhandler(Exception)
def handle_unexpected_error(e):
    current_app.logger.error(f"Unhandled error on {request.path}: {e}", exc_info=True)
    return jsonify({'error': 'Upload failed'}), 500


@bp.app_errorhandler(405)
def method_not_allowed(e):
    # Raised during routing, before the blueprint is known, so CORS headers are added here
    return jsonify({'error': 'Method not allowed'}), 405, CORS_HEADERS

# --- Upload Routes ---

def upload_master():
    """Accepts {month, rows, filename?} and forwards the normalized upload to storage."""
    if request.method == 'OPTIONS':
        return preflight()

    client = storage.client_from_config(current_app.config)
    payload = json_payload()
    month, rows, filename = payload.get('month'), payload.get('rows'), payload.get('filename')
    current_app.logger.info(
        f"{request.method} {request.path}: month={month!r}, "
        f"rows={len(rows) if isinstance(rows, list) else 0}, filename={filename!r}"
    )
    return run_upload(month, rows, filename, client)


for url in UPLOAD_MASTER_URLS:
    bp.add_url_rule(url, view_func=upload_master, methods=['POST', 'OPTIONS'])


@bp.route('/api/uploads/file', methods=['POST', 'OPTIONS'])
def upload_file():
    """Accepts a multipart spreadsheet with its month and uploads its rows."""
    if request.method == 'OPTIONS':
        return preflight()

    client = storage.client_from_config(current_app.config)
    form = SpreadsheetUploadForm(meta={'csrf': False})
    if not form.validate_on_submit():
        raise form_error(form)

    upload = form.file.data
    rows = read_spreadsheet(upload.stream, upload.filename)
    filename = form.filename.data or secure_filename(upload.filename)
    current_app.logger.info(f"Spreadsheet '{filename}' read with {len(rows)} rows for month {form.month.data!r}")
    return run_upload(form.month.data, rows, filename, client)


@bp.route('/api/uploads/analyze', methods=['POST', 'OPTIONS'])
def analyze_file():
    """Inspects a spreadsheet without uploading it."""
    if request.method == 'OPTIONS':
        return preflight()

    form = SpreadsheetAnalysisForm(meta={'csrf': False})
    if not form.validate_on_submit():
        raise form_error(form)

    upload = form.file.data
    rows = read_spreadsheet(upload.stream, upload.filename)
    return jsonify(analyze_rows(rows)), 200


@bp.route('/api/uploads/diagnostics', methods=['GET'])
def diagnostics():
    return jsonify(collect_diagnostics(current_app.config)), 200


@bp.route('/api/uploads/history', methods=['GET'])
def upload_history():
    """Most recent uploads accepted by storage, newest first."""
    limit = request.args.get('limit', current_app.config.get('UPLOAD_HISTORY_LIMIT', 50), type=int)
    records = UploadRecord.query.order_by(UploadRecord.upload_timestamp.desc(), UploadRecord.id.desc()) \
        .limit(max(limit, 1)).all()
    return jsonify([record.to_dict() for record in records]), 200

# --- Reporting Routes ---

@bp.route('/api/reports/commissions', methods=['POST', 'OPTIONS'])
def commission_report():
    """Computes per-location and per-agent commissions from the posted read models."""
    if request.method == 'OPTIONS':
        return preflight()

    payload = json_payload()
    sources = {key: payload.get(key) or [] for key in ('transactions', 'assignments', 'locations')}
    if not all(isinstance(value, list) for value in sources.values()):
        raise UploadError('transactions, assignments and locations must be lists')

    return jsonify(prepare_commission_report(**sources)), 200
