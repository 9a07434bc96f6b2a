"""
reqtools - request-handling helpers for Flask services: multipart uploads,
strict JSON bodies, slugs, random tokens and outbound JSON POSTs.
"""

from .client import post_json
from .config import JSONPolicy, UploadPolicy
from .errors import (
    BodyTooLarge,
    EmptyBody,
    EmptyInput,
    EmptyResult,
    FileWriteError,
    IncompleteJSON,
    InvalidTarget,
    JSONDecodeFailure,
    MalformedJSON,
    MultipartParseError,
    MultipleValues,
    ReqtoolsError,
    SlugError,
    TypeMismatch,
    Unclassified,
    UnknownField,
    UnsupportedFileType,
    UploadError,
    UploadTooLarge,
)
from .files import clean_directory, download_static_file, make_dir_if_not_exist
from .jsonio import JSONResponse, error_json, read_json, write_json
from .randomness import ALPHABET, random_string
from .slug import slugify
from .uploads import UploadedFile, upload_file, upload_files

__version__ = "1.0.0"
