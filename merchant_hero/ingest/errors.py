# ==============================================================================
# merchant_hero/ingest/errors.py
# ------------------------------------------------------------------------------
# Failures raised while ingesting an upload. Each one knows the HTTP status it
# maps to and how to serialize itself for the JSON error body.
# ==============================================================================


class UploadError(Exception):
    """Base class for every failure the upload endpoints report to the caller."""
    status_code = 400
    message = 'Upload failed'

    def __init__(self, message=None, code=None, details=None):
        self.message = message or self.message
        self.code = code
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        payload = {'error': self.message}
        if self.code is not None:
            payload['code'] = self.code
        if self.details is not None:
            payload['details'] = self.details
        return payload


class ServerMisconfigured(UploadError):
    status_code = 500
    message = 'Server misconfigured: missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY'


class InvalidRequestBody(UploadError):
    message = 'Request body must be JSON'


class MissingInput(UploadError):
    message = 'Month and non-empty rows are required'


class InvalidMonthFormat(UploadError):
    message = 'Invalid month: use YYYY-MM'


class InvalidMonthRange(UploadError):
    message = 'Invalid month: use 01-12'


class NoValidRows(UploadError):
    message = 'No valid rows after mapping (check column mapping)'


class ArrayLengthMismatch(UploadError):
    message = 'Mapped arrays are different lengths'

    def __init__(self, locations, volumes, agent_nets):
        super().__init__(details={
            'locations': locations,
            'volumes': volumes,
            'agentNets': agent_nets,
        })


class UnreadableSpreadsheet(UploadError):
    message = 'The uploaded file could not be read as a spreadsheet'


class StorageError(UploadError):
    """
    Raised when the storage collaborator rejects the RPC or cannot be reached.
    The message and code are relayed to the caller exactly as received.
    """
    message = 'RPC error'

    def __init__(self, message=None, code=None, details=None, hint=None):
        super().__init__(message, code=code, details=details)
        self.hint = hint
