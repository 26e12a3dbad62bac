# stationcounts/errors.py


class SchemaMismatchError(ValueError):
    """
    A delimited file does not fit the two-column (name, count) table schema.
    """

    def __init__(self, message: str, *, line: int | None = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class ExportTooLargeError(ValueError):
    """
    Serialized result set is bigger than a single export file may be.
    Callers are expected to shard the result themselves.
    """

    def __init__(self, size_bytes: int, limit_bytes: int):
        super().__init__(
            f"export is {size_bytes:,} bytes, single-file limit is {limit_bytes:,}"
        )
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
