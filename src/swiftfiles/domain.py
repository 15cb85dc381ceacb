from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from swiftfiles.interfaces import IObjectMetadata
from zope.interface import implementer

import datetime
import hashlib


@dataclass(frozen=True)
class AccountMetadata:
    container_count: int = 0
    bytes_used: int = 0


@dataclass(frozen=True)
class ContainerMetadata:
    name: str
    count: int = 0
    bytes: int = 0


@implementer(IObjectMetadata)
@dataclass
class ObjectMetadata:
    key: str
    size: int = None
    content_type: str = None
    etag: bytes = None
    last_modified: datetime.datetime = None
    user_metadata: dict = field(default_factory=dict)

    def add_user_metadata(self, key, value):
        """Append a value; keys are case-insensitive and stored lower-cased."""
        self.user_metadata.setdefault(key.lower(), []).append(value)


@dataclass
class StorageObject:
    """An object payload together with its metadata.

    When ``data`` is given and the metadata carries no size or etag,
    both are computed from the payload so uploads are integrity checked.
    The metadata is copied first; the caller's instance is left as is.
    """

    metadata: ObjectMetadata
    data: bytes = b""

    def __post_init__(self):
        if isinstance(self.data, str):
            self.data = self.data.encode("utf-8")
        self.metadata = replace(
            self.metadata,
            user_metadata={
                key: [values] if isinstance(values, str) else list(values)
                for key, values in self.metadata.user_metadata.items()
            },
        )
        if self.metadata.size is None:
            self.metadata.size = len(self.data)
        if self.metadata.etag is None and self.data:
            self.metadata.etag = hashlib.md5(self.data).digest()

    @classmethod
    def from_bytes(cls, key, data, content_type=None, **user_metadata):
        metadata = ObjectMetadata(key=key, content_type=content_type)
        for name, value in user_metadata.items():
            metadata.add_user_metadata(name, value)
        return cls(metadata, data)

    @property
    def key(self):
        return self.metadata.key
