from urllib.parse import quote
from urllib.parse import unquote

OBJECT_META_PREFIX = "X-Object-Meta-"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def bind_metadata_value(values):
    """Encode one or more metadata values into a single header value.

    Each value is UTF-8 percent-encoded, so commas inside a value and
    non-ASCII text survive; the encoded values are joined with commas.
    """
    if isinstance(values, str):
        values = [values]
    return ",".join(quote(str(v), safe="") for v in values)


def unbind_metadata_value(header_value):
    return [unquote(part.strip()) for part in header_value.split(",")]


def bind_user_metadata(user_metadata, prefix=OBJECT_META_PREFIX):
    """Render a multimap of user metadata as request headers."""
    return {
        prefix + key: bind_metadata_value(values)
        for key, values in (user_metadata or {}).items()
    }


def bind_object(obj):
    """Return ``(headers, body)`` for uploading a StorageObject."""
    metadata = obj.metadata
    headers = {
        "Content-Type": metadata.content_type or DEFAULT_CONTENT_TYPE,
        "Content-Length": str(len(obj.data)),
    }
    if metadata.etag:
        headers["ETag"] = metadata.etag.hex()
    headers.update(bind_user_metadata(metadata.user_metadata))
    return headers, obj.data
