"""
Media reference rules.

A reference is either an http(s) URL, which can be forwarded to a provider,
or an embedded `data:` URI, which never is (uploading raw bytes to a
provider is not supported).
"""

import re
from enum import Enum
from typing import Any

from deepguard.core.errors import ValidationError

_URL_RE = re.compile(r"^https?://\S+$")
_DATA_URI_RE = re.compile(r"^data:[^,]*,", re.IGNORECASE)


class MediaKind(str, Enum):
    URL = "url"
    EMBEDDED = "embedded"


def classify_media_reference(media_ref: Any) -> MediaKind:
    if media_ref is None or (isinstance(media_ref, str) and not media_ref.strip()):
        raise ValidationError("Missing mediaUrl in request body")
    if not isinstance(media_ref, str):
        raise ValidationError("Invalid mediaUrl format")

    if _URL_RE.match(media_ref):
        return MediaKind.URL
    if _DATA_URI_RE.match(media_ref):
        return MediaKind.EMBEDDED
    raise ValidationError("Invalid mediaUrl format")
