from swiftfiles import parsers
from swiftfiles.client import StorageClient
from swiftfiles.interfaces import ISwiftObjectClient
from zope.interface import implementer


@implementer(ISwiftObjectClient)
class SwiftObjectClient(StorageClient):
    """OpenStack Swift v1 storage object services.

    Object names keep ``/`` and ``=`` unencoded in request paths.
    """

    safe_chars = "/="

    def list_objects(self, container, options=None):
        params = {"format": "json"}
        if options is not None:
            params.update(options.to_query())
        return self._call(
            "list objects",
            "GET",
            self._container_path(container),
            parse=parsers.parse_object_list,
            results=parsers.NONE_ON_404,
            params=params,
        )
