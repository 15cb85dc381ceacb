from zope.interface import Attribute
from zope.interface import Interface


class IObjectMetadata(Interface):
    """Metadata of a stored object."""

    key = Attribute("Object name inside its container")
    size = Attribute("Content length in bytes, or None if unknown")
    content_type = Attribute("MIME type of the content")
    etag = Attribute("Raw MD5 digest bytes of the content, or None")
    last_modified = Attribute("datetime of the last write, or None")
    user_metadata = Attribute("dict mapping lower-cased keys to lists of values")


class IObjectClient(Interface):
    """Object operations shared by CloudFiles and Swift v1."""

    def put_object(container, obj):
        """Upload a StorageObject; return a Future of the ETag bytes."""

    def head_object(container, key):
        """Return IObjectMetadata for an object, or None if not found."""

    def get_object(container, key):
        """Return a Future of the StorageObject, or of None if not found."""

    def set_object_metadata(container, key, user_metadata):
        """Replace the user metadata of an object. True only on 202."""

    def delete_object(container, key):
        """Delete an object. False if it did not exist."""

    def close():
        """Release the HTTP session and worker threads."""


class ICloudFilesClient(IObjectClient):
    """Rackspace CloudFiles account, container and object operations."""

    def get_account_metadata():
        """Return AccountMetadata parsed from the account HEAD response."""

    def list_owned_containers(options=None):
        """Return a list of ContainerMetadata for the account."""

    def put_container(container):
        """Create a container. Return False instead of raising on failure."""

    def delete_container_if_empty(container):
        """Delete an empty container. False if missing or not empty."""


class ISwiftObjectClient(IObjectClient):
    """OpenStack Swift v1 storage object services."""

    def list_objects(container, options=None):
        """Return a list of IObjectMetadata, or None if the container is missing."""
