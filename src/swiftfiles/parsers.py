"""Response parsers and status-code mappings.

Each parser takes an ``httpx.Response`` and returns a domain value. The
status mappings decide which answers are results rather than errors.
"""

from email.utils import parsedate_to_datetime
from swiftfiles.binders import OBJECT_META_PREFIX
from swiftfiles.binders import unbind_metadata_value
from swiftfiles.domain import AccountMetadata
from swiftfiles.domain import ContainerMetadata
from swiftfiles.domain import ObjectMetadata
from swiftfiles.domain import StorageObject
from swiftfiles.errors import StorageOperationError

import datetime
import logging


logger = logging.getLogger(__name__)

NOT_FOUND = 404


def _int_header(headers, name):
    try:
        return int(headers.get(name, 0))
    except ValueError:
        return 0


def _etag_bytes(value):
    value = value.strip().strip('"')
    try:
        return bytes.fromhex(value)
    except ValueError:
        logger.debug("ignoring non-hex ETag %r", value)
        return None


def _listing_timestamp(value):
    """Listings carry naive ISO timestamps in UTC."""
    timestamp = datetime.datetime.fromisoformat(value)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=datetime.timezone.utc)
    return timestamp


def _error(response, operation, message):
    return StorageOperationError(
        f"{operation} {message}",
        operation,
        str(response.request.url.path),
        response.status_code,
    )


def parse_account_metadata(response):
    headers = response.headers
    return AccountMetadata(
        container_count=_int_header(headers, "X-Account-Container-Count"),
        bytes_used=_int_header(headers, "X-Account-Bytes-Used"),
    )


def _parse_listing(response, operation, parse_entry):
    if response.status_code == 204 or not response.content:
        return []
    try:
        entries = response.json()
    except ValueError as e:
        raise _error(response, operation, "returned malformed JSON") from e
    if not isinstance(entries, list):
        raise _error(
            response,
            operation,
            f"returned {type(entries).__name__}, expected a list",
        )
    parsed = []
    for entry in entries:
        try:
            parsed.append(parse_entry(entry))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.debug("%s: bad listing entry %r", operation, entry)
            raise _error(response, operation, "returned a malformed entry") from e
    return parsed


def _container_entry(entry):
    return ContainerMetadata(
        name=entry["name"],
        count=int(entry.get("count", 0)),
        bytes=int(entry.get("bytes", 0)),
    )


def _object_entry(entry):
    if "subdir" in entry:
        # Pseudo directory rolled up by a delimiter query.
        return ObjectMetadata(key=entry["subdir"])
    last_modified = entry.get("last_modified")
    return ObjectMetadata(
        key=entry["name"],
        size=int(entry.get("bytes", 0)),
        content_type=entry.get("content_type"),
        etag=_etag_bytes(entry["hash"]) if entry.get("hash") else None,
        last_modified=_listing_timestamp(last_modified) if last_modified else None,
    )


def parse_container_list(response):
    return _parse_listing(response, "list containers", _container_entry)


def parse_object_list(response):
    return _parse_listing(response, "list objects", _object_entry)


def parse_object_metadata(response, key):
    headers = response.headers
    metadata = ObjectMetadata(key=key, content_type=headers.get("Content-Type"))
    if "Content-Length" in headers:
        metadata.size = _int_header(headers, "Content-Length")
    if "ETag" in headers:
        metadata.etag = _etag_bytes(headers["ETag"])
    if "Last-Modified" in headers:
        try:
            metadata.last_modified = parsedate_to_datetime(headers["Last-Modified"])
        except (TypeError, ValueError):
            logger.debug("ignoring bad Last-Modified %r", headers["Last-Modified"])
    prefix = OBJECT_META_PREFIX.lower()
    for name, value in headers.multi_items():
        if name.lower().startswith(prefix):
            for item in unbind_metadata_value(value):
                metadata.add_user_metadata(name[len(prefix) :], item)
    return metadata


def parse_object(response, key):
    metadata = parse_object_metadata(response, key)
    return StorageObject(metadata, response.content)


def parse_etag(response):
    etag = response.headers.get("ETag")
    if not etag:
        raise _error(response, "put object", "response carries no ETag")
    return _etag_bytes(etag)


# -- Status mappings --
#
# Success parsers run on 2xx answers. Result tables map the listed
# non-success statuses to plain values instead of raising.


def true_on(*statuses):
    """Map the listed statuses to True and any other status to False."""

    def mapping(response):
        return response.status_code in statuses

    return mapping


NONE_ON_404 = {NOT_FOUND: None}
FALSE_ON_404 = {NOT_FOUND: False}
