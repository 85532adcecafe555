"""
Exceptions raised while reading a .torrent file.

Everything the decoder or the descriptor model rejects is a TorrentError,
so a caller only needs one except clause to report a failed conversion.
"""


class TorrentError(ValueError):
    """Base exception for anything wrong with a torrent descriptor."""
    pass


class MalformedEncoding(TorrentError):
    """The bytes do not follow the bencoding grammar."""

    def __init__(self, message, offset):
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


class UnexpectedEndOfData(MalformedEncoding):
    """The input ended before the current value was complete."""
    pass


class MissingField(TorrentError):
    def __init__(self, field):
        super().__init__(f"Missing required field '{field}'")
        self.field = field


class WrongType(TorrentError):
    def __init__(self, field, message):
        super().__init__(f"Field '{field}' {message}")
        self.field = field


class InvalidTrackerURI(TorrentError):
    def __init__(self, uri, reason):
        super().__init__(f"Invalid tracker URI {uri!r}: {reason}")
        self.uri = uri
