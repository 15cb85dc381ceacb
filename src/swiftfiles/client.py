from concurrent.futures import ThreadPoolExecutor
from swiftfiles import binders
from swiftfiles import parsers
from swiftfiles.errors import StorageOperationError
from swiftfiles.interfaces import ICloudFilesClient
from urllib.parse import quote
from zope.interface import implementer

import httpx
import logging


logger = logging.getLogger(__name__)

USER_AGENT = "swiftfiles"


class StorageClient:
    """Shared HTTP plumbing: one method per operation, table driven results.

    Subclasses set ``safe_chars``, the characters left unencoded when
    container and object names are substituted into the path.
    """

    safe_chars = "/"

    def __init__(
        self,
        auth,
        timeout=60,
        max_workers=4,
        executor=None,
        transport=None,
    ):
        self._auth = auth
        self._http = httpx.Client(
            auth=auth,
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": USER_AGENT},
        )
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="swiftfiles"
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        # Queued uploads and downloads still need the HTTP session.
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        self._http.close()

    @property
    def storage_url(self):
        return self._auth.storage_url

    # -- Paths --

    def _quote(self, name):
        if not name:
            raise ValueError("container and object names must not be empty")
        return quote(name, safe=self.safe_chars)

    def _container_path(self, container):
        return "/" + self._quote(container)

    def _object_path(self, container, key):
        return f"/{self._quote(container)}/{self._quote(key)}"

    # -- Dispatch --

    def _send(self, operation, method, path, **kwargs):
        storage_url = self._auth.ensure_authenticated(self._http)
        try:
            return self._http.request(method, storage_url + path, **kwargs)
        except httpx.HTTPError as e:
            logger.debug("%s %s failed: %s", method, path, e)
            raise StorageOperationError(
                f"{operation} failed for {path}: {type(e).__name__}",
                operation,
                path,
            ) from e

    def _call(self, operation, method, path, parse=None, results=None, **kwargs):
        """Issue a request and map its response.

        A status listed in ``results`` returns the mapped value. Otherwise
        a 2xx answer goes through ``parse`` and anything else raises
        StorageOperationError.
        """
        response = self._send(operation, method, path, **kwargs)
        status = response.status_code
        if results and status in results:
            return results[status]
        if response.is_success:
            return parse(response) if parse is not None else None
        logger.debug("%s %s returned %s", method, path, status)
        raise StorageOperationError(
            f"{operation} failed for {path}: status {status}",
            operation,
            path,
            status,
        )

    # -- Objects --

    def put_object(self, container, obj):
        return self._executor.submit(self._put_object, container, obj)

    def _put_object(self, container, obj):
        headers, body = binders.bind_object(obj)
        return self._call(
            "put object",
            "PUT",
            self._object_path(container, obj.key),
            parse=parsers.parse_etag,
            headers=headers,
            content=body,
        )

    def head_object(self, container, key):
        return self._call(
            "head object",
            "HEAD",
            self._object_path(container, key),
            parse=lambda response: parsers.parse_object_metadata(response, key),
            results=parsers.NONE_ON_404,
        )

    def get_object(self, container, key):
        return self._executor.submit(self._get_object, container, key)

    def _get_object(self, container, key):
        return self._call(
            "get object",
            "GET",
            self._object_path(container, key),
            parse=lambda response: parsers.parse_object(response, key),
            results=parsers.NONE_ON_404,
        )

    def set_object_metadata(self, container, key, user_metadata):
        return self._call(
            "set object metadata",
            "POST",
            self._object_path(container, key),
            parse=parsers.true_on(202),
            headers=binders.bind_user_metadata(user_metadata),
        )

    def delete_object(self, container, key):
        return self._call(
            "delete object",
            "DELETE",
            self._object_path(container, key),
            parse=parsers.true_on(204),
            results=parsers.FALSE_ON_404,
        )


@implementer(ICloudFilesClient)
class CloudFilesClient(StorageClient):
    """Rackspace CloudFiles REST client.

    ``put_object`` and ``get_object`` return ``concurrent.futures.Future``
    objects; errors raised while processing surface from ``result()``.
    """

    def get_account_metadata(self):
        return self._call(
            "get account metadata",
            "HEAD",
            "/",
            parse=parsers.parse_account_metadata,
        )

    # TODO: follow markers to collect listings past the 10000 entry page limit
    def list_owned_containers(self, options=None):
        params = {"format": "json"}
        if options is not None:
            params.update(options.to_query())
        return self._call(
            "list containers",
            "GET",
            "/",
            parse=parsers.parse_container_list,
            params=params,
        )

    def put_container(self, container):
        path = self._container_path(container)
        response = self._send("put container", "PUT", path)
        if not response.is_success:
            logger.debug("PUT %s returned %s", path, response.status_code)
        return response.is_success

    def delete_container_if_empty(self, container):
        # 409 means the container still holds objects.
        return self._call(
            "delete container",
            "DELETE",
            self._container_path(container),
            parse=parsers.true_on(204),
            results={**parsers.FALSE_ON_404, 409: False},
        )
