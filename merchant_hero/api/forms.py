# ==============================================================================
# merchant_hero/api/forms.py
# ------------------------------------------------------------------------------
# Defines multipart upload forms using Flask-WTF for input validation.
# The views build these with meta={'csrf': False}; callers are API clients.
# ==============================================================================

from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired, FileAllowed
from wtforms import StringField
from wtforms.validators import Optional, Length

SPREADSHEET_TYPES = ['csv', 'xlsx']


class SpreadsheetAnalysisForm(FlaskForm):
    """A single processor spreadsheet to inspect."""
    file = FileField('Spreadsheet', validators=[
        FileRequired(message='No file was uploaded.'),
        FileAllowed(SPREADSHEET_TYPES, message='Only .csv and .xlsx files are accepted.'),
    ])


class SpreadsheetUploadForm(SpreadsheetAnalysisForm):
    """A processor spreadsheet plus the month it reports on."""
    # Month is checked by the upload orchestrator so that a missing or malformed
    # month fails the same way as on the JSON endpoint.
    month = StringField('Month (YYYY-MM)', validators=[Optional()])
    filename = StringField('Upload name', validators=[Optional(), Length(max=256)])
