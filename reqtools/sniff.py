"""Content-type sniffing from a byte prefix."""

import magic

# Number of leading bytes inspected per upload
SNIFF_LEN = 512


def detect_content_type(prefix):
    """
    Best-guess MIME type for ``prefix`` (at most SNIFF_LEN bytes are used).

    Backed by libmagic through python-magic. The result is advisory only.
    """
    return magic.from_buffer(bytes(prefix[:SNIFF_LEN]), mime=True)
