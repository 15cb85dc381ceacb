from swiftfiles.client import CloudFilesClient
from swiftfiles.domain import StorageObject
from swiftfiles.errors import AuthenticationError
from swiftfiles.errors import StorageOperationError
from swiftfiles.swift import SwiftObjectClient


__all__ = [
    "AuthenticationError",
    "CloudFilesClient",
    "StorageObject",
    "StorageOperationError",
    "SwiftObjectClient",
]
