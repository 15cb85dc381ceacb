from swiftfiles.errors import AuthenticationError

import httpx
import logging
import threading


logger = logging.getLogger(__name__)

AUTH_VERSIONS = ("1.0", "2.0")
OBJECT_STORE_SERVICE = "object-store"


class AuthenticateRequest(httpx.Auth):
    """Request filter attaching the auth token to every storage request.

    Supports the v1.0 header handshake (CloudFiles, Swift tempauth), the
    Keystone v2.0 token API and pre-authenticated ``storage_url`` + ``token``
    pairs. A 401 answer triggers one re-authentication and replay.
    """

    requires_response_body = True

    def __init__(
        self,
        auth_url=None,
        username=None,
        api_key=None,
        auth_version="1.0",
        tenant_name=None,
        region=None,
        storage_url=None,
        token=None,
    ):
        if auth_version not in AUTH_VERSIONS:
            raise ValueError(
                f"auth_version must be one of {', '.join(AUTH_VERSIONS)}, "
                f"got {auth_version!r}"
            )
        if not auth_url and not (storage_url and token):
            raise ValueError("either auth_url or storage_url and token are required")
        if auth_url and not (username and api_key):
            raise ValueError("auth_url requires username and api_key")
        self.auth_url = auth_url
        self.username = username
        self.api_key = api_key
        self.auth_version = auth_version
        self.tenant_name = tenant_name
        self.region = region
        self.storage_url = storage_url.rstrip("/") if storage_url else None
        self.token = token
        self._lock = threading.RLock()

    @property
    def authenticated(self):
        return bool(self.storage_url and self.token)

    def ensure_authenticated(self, http):
        """Authenticate through ``http`` unless a token is already held."""
        with self._lock:
            if not self.authenticated:
                self.authenticate(http)
            return self.storage_url

    def authenticate(self, http):
        if not self.auth_url:
            raise AuthenticationError(
                "token was rejected and no auth_url is configured", "auth"
            )
        request = self.build_auth_request()
        try:
            response = http.send(request, auth=None)
        except httpx.HTTPError as e:
            logger.debug("auth request to %s failed: %s", self.auth_url, e)
            raise AuthenticationError(
                f"auth request failed: {type(e).__name__}", "auth"
            ) from e
        self.handle_auth_response(response)

    def build_auth_request(self):
        if self.auth_version == "1.0":
            return httpx.Request(
                "GET",
                self.auth_url,
                headers={"X-Auth-User": self.username, "X-Auth-Key": self.api_key},
            )
        credentials = {
            "passwordCredentials": {
                "username": self.username,
                "password": self.api_key,
            }
        }
        if self.tenant_name:
            credentials["tenantName"] = self.tenant_name
        return httpx.Request(
            "POST", self.auth_url.rstrip("/") + "/tokens", json={"auth": credentials}
        )

    def handle_auth_response(self, response):
        if not response.is_success:
            raise AuthenticationError(
                f"auth failed with status {response.status_code}",
                "auth",
                status=response.status_code,
            )
        if self.auth_version == "1.0":
            storage_url = response.headers.get("X-Storage-Url")
            token = response.headers.get("X-Auth-Token") or response.headers.get(
                "X-Storage-Token"
            )
        else:
            storage_url, token = self._parse_keystone(response)
        if not storage_url:
            raise AuthenticationError("auth response carries no storage URL", "auth")
        if not token:
            raise AuthenticationError("auth response carries no token", "auth")
        if storage_url.startswith("http://"):
            logger.warning(
                "storage URL %s is not HTTPS, tokens are sent in cleartext",
                storage_url,
            )
        self.storage_url = storage_url.rstrip("/")
        self.token = token
        logger.info("authenticated %s against %s", self.username, self.auth_url)

    def _parse_keystone(self, response):
        try:
            access = response.json()["access"]
            token = access["token"]["id"]
            catalog = access.get("serviceCatalog", [])
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationError("malformed Keystone response", "auth") from e
        for service in catalog:
            if service.get("type") != OBJECT_STORE_SERVICE:
                continue
            for endpoint in service.get("endpoints", []):
                if self.region and endpoint.get("region") != self.region:
                    continue
                return endpoint.get("publicURL"), token
        return None, token

    def auth_flow(self, request):
        sent_token = self.token
        if sent_token is not None:
            request.headers["X-Auth-Token"] = sent_token
        response = yield request
        if response.status_code != 401 or not self.auth_url:
            return
        with self._lock:
            # Another request may have refreshed the token meanwhile.
            if self.token == sent_token:
                logger.info("token expired, re-authenticating %s", self.username)
                auth_response = yield self.build_auth_request()
                self.handle_auth_response(auth_response)
            request.headers["X-Auth-Token"] = self.token
        yield request
