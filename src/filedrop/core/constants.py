"""Constants used throughout the application."""

from pathlib import Path

# Bundled assets
SRC_DIR = Path(__file__).resolve().parents[2]
TEMPLATES_DIR = SRC_DIR / "templates"
STATIC_DIR = SRC_DIR / "static"

# Storage layout
THUMBNAIL_DIR_NAME = "thumbnails"
FALLBACK_FILENAME = "unnamed"
RANDOM_FILENAME_LENGTH = 8

# Thumbnail processing constants
RGB_MODE = "RGB"
JPEG_FORMAT = "JPEG"
DEFAULT_THUMBNAIL_SIZE = 200
PLACEHOLDER_THUMBNAIL_URL = "/static/no-thumbnail.svg"
THUMBNAIL_URL_PREFIX = "/thumbnails/"

# Listing
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_PAGE_SIZE = 15

# Rate limiting constants
UPLOAD_RATE_LIMIT = "120/minute"

# HTTP status codes
HTTP_303_SEE_OTHER = 303
HTTP_400_BAD_REQUEST = 400
HTTP_401_UNAUTHORIZED = 401
HTTP_404_NOT_FOUND = 404
HTTP_500_INTERNAL_SERVER_ERROR = 500

# Error messages
ERROR_MISSING_FILE = "Missing file part"
ERROR_NOT_MULTIPART = "Expected a multipart/form-data body"
ERROR_MALFORMED_MULTIPART = "Malformed multipart body"
ERROR_FILE_NOT_UPLOAD = "The file part must carry a filename"
ERROR_DUPLICATE_FILE = "Only one file part is accepted"
ERROR_EMPTY_UPLOAD = "Uploaded file is empty"
ERROR_UPLOAD_FAILED = "Could not upload file"
ERROR_INVALID_FILENAME = "Invalid filename"
ERROR_FILE_NOT_FOUND = "File not found"
ERROR_DELETE_FAILED = "Could not delete file"
ERROR_LISTING_FAILED = "Could not list stored files"
ERROR_AUTHENTICATION_FAILED = "Invalid credentials"

# Application settings
APP_TITLE = "filedrop - Simple File Uploads"
APP_DESCRIPTION = "Upload files to a shared directory and browse them by time or size"
APP_VERSION = "1.0.0"
AUTH_REALM = "filedrop: file upload"
