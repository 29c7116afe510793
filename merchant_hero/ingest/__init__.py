from .normalizer import normalize_month, parse_amount, map_rows, MappedRows
from .uploader import prepare_upload, submit_upload, upload_master, PreparedUpload

__all__ = [
    'normalize_month', 'parse_amount', 'map_rows', 'MappedRows',
    'prepare_upload', 'submit_upload', 'upload_master', 'PreparedUpload',
]
