"""
Error taxonomy. Every error is raised to the immediate caller; nothing in
this package logs or swallows them.
"""


class ReqtoolsError(Exception):
    """Base class for every error raised by reqtools."""


# Uploads


class UploadError(ReqtoolsError):
    """
    An upload batch failed.

    ``files`` holds the records stored before the failure, so callers can
    inspect or clean up the partial batch.
    """

    def __init__(self, message, files=None):
        super().__init__(message)
        self.files = list(files or [])


class UploadTooLarge(UploadError):
    pass


class UnsupportedFileType(UploadError):
    def __init__(self, message, files=None, content_type=None):
        super().__init__(message, files)
        self.content_type = content_type


class MultipartParseError(UploadError):
    pass


class FileWriteError(UploadError, OSError):
    """
    An OSError raised while storing one file.

    It is an OSError itself, with the original errno, strerror and
    filename; the original error is ``__cause__``.
    """

    def __init__(self, error, files=None):
        if error.errno is None:
            OSError.__init__(self, *error.args)
        else:
            OSError.__init__(self, error.errno, error.strerror, error.filename)
        self.files = list(files or [])


# JSON bodies


class JSONDecodeFailure(ReqtoolsError):
    """A request body could not be decoded into the requested model."""


class BodyTooLarge(JSONDecodeFailure):
    def __init__(self, max_bytes):
        super().__init__(f"the request body must not be larger than {max_bytes} bytes")
        self.max_bytes = max_bytes


class MalformedJSON(JSONDecodeFailure):
    def __init__(self, offset):
        super().__init__(f"the request body contains malformed JSON (at character {offset})")
        self.offset = offset


class IncompleteJSON(JSONDecodeFailure):
    def __init__(self):
        super().__init__("the request body contains incomplete JSON")


class TypeMismatch(JSONDecodeFailure):
    def __init__(self, field=None, offset=None):
        if field:
            message = f'the request body contains an incorrect JSON type for field "{field}"'
        else:
            message = f"the request body contains an incorrect JSON type (at character {offset})"
        super().__init__(message)
        self.field = field
        self.offset = offset


class EmptyBody(JSONDecodeFailure):
    def __init__(self):
        super().__init__("the request body must not be empty")


class UnknownField(JSONDecodeFailure):
    def __init__(self, field):
        super().__init__(f'the request body contains an unknown key "{field}"')
        self.field = field


class InvalidTarget(JSONDecodeFailure):
    def __init__(self, detail):
        super().__init__(f"unable to unmarshal the JSON request body: {detail}")


class MultipleValues(JSONDecodeFailure):
    def __init__(self):
        super().__init__("body must contain only one JSON value")


class Unclassified(JSONDecodeFailure):
    """Any other decode failure; the message is the validator's, unchanged."""


# Slugs


class SlugError(ReqtoolsError):
    pass


class EmptyInput(SlugError):
    pass


class EmptyResult(SlugError):
    pass
