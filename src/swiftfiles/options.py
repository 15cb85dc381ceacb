MAX_LIST_LIMIT = 10000


class _ListOptions:
    """Query parameters shared by account and container listings."""

    _keys = ("limit", "marker", "end_marker", "prefix")

    def __init__(self, limit=None, marker=None, end_marker=None, prefix=None):
        if limit is not None:
            if isinstance(limit, bool) or not isinstance(limit, int):
                raise ValueError(f"limit must be an integer, got {limit!r}")
            if not 0 < limit <= MAX_LIST_LIMIT:
                raise ValueError(
                    f"limit must be between 1 and {MAX_LIST_LIMIT}, got {limit}"
                )
        self.limit = limit
        self.marker = marker
        self.end_marker = end_marker
        self.prefix = prefix

    def to_query(self):
        query = {}
        for name in self._keys:
            value = getattr(self, name)
            if value is not None:
                query[name] = str(value)
        return query

    def __repr__(self):
        return f"<{type(self).__name__} {self.to_query()!r}>"


class ListContainerOptions(_ListOptions):
    """Options for listing the containers of an account."""


class ListObjectOptions(_ListOptions):
    """Options for listing the objects of a container.

    ``path`` returns only the objects nested directly under a pseudo
    directory, ``delimiter`` rolls names up to the next delimiter.
    """

    _keys = _ListOptions._keys + ("path", "delimiter")

    def __init__(self, path=None, delimiter=None, **kwargs):
        super().__init__(**kwargs)
        if delimiter is not None and len(delimiter) != 1:
            raise ValueError(f"delimiter must be a single character: {delimiter!r}")
        self.path = path
        self.delimiter = delimiter
