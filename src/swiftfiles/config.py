from swiftfiles.auth import AuthenticateRequest
from swiftfiles.client import CloudFilesClient
from swiftfiles.swift import SwiftObjectClient

import io
import os
import ZConfig


SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schema.xml")

_schema = None


class BaseClientFactory:
    """ZConfig datatype for an object store section; ``open()`` builds the client."""

    client_class = None

    def __init__(self, config):
        self.name = config.getSectionName()
        self.config = config

    def open(self, transport=None):
        config = self.config
        auth = AuthenticateRequest(
            auth_url=config.auth_url,
            username=config.username,
            api_key=config.api_key,
            auth_version=config.auth_version,
            tenant_name=config.tenant_name,
            region=config.region,
            storage_url=config.storage_url,
            token=config.token,
        )
        return self.client_class(
            auth,
            timeout=config.timeout,
            max_workers=config.max_workers,
            transport=transport,
        )


class CloudFilesClientFactory(BaseClientFactory):
    client_class = CloudFilesClient


class SwiftObjectClientFactory(BaseClientFactory):
    client_class = SwiftObjectClient


def get_schema():
    global _schema
    if _schema is None:
        with open(SCHEMA_PATH) as f:
            _schema = ZConfig.loadSchemaFile(f)
    return _schema


def client_from_file(path, transport=None):
    config, _handler = ZConfig.loadConfig(get_schema(), path)
    return config.client.open(transport=transport)


def client_from_string(text, transport=None):
    config, _handler = ZConfig.loadConfigFile(get_schema(), io.StringIO(text))
    return config.client.open(transport=transport)
