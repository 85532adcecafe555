from collections import namedtuple
from datetime import datetime, timezone
from urllib.parse import urlsplit

from bencoding import Decoder, Encoder
from errors import InvalidTrackerURI, MissingField, WrongType
from utils import format_size, info_hash_hex, logger

FileEntry = namedtuple('FileEntry', ['path', 'length'])

_KIND_NAMES = {
    dict: 'a dictionary',
    list: 'a list',
    int: 'an integer',
    bytes: 'a byte string',
}


def _check(value, kind, field):
    """Returns ``value`` if it is a ``kind``, otherwise raises WrongType."""
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise WrongType(field, f"must be {_KIND_NAMES[kind]}, not {type(value).__name__}")
    return value


def _require(mapping, key, kind, where=''):
    field = f"{where}.{key}" if where else key
    if key.encode() not in mapping:
        raise MissingField(field)
    return _check(mapping[key.encode()], kind, field)


def _optional(mapping, key, kind, where=''):
    if key.encode() not in mapping:
        return None
    return _require(mapping, key, kind, where)


def _text(raw):
    return raw.decode('utf-8', errors='replace')


def _tracker_uri(raw):
    """Decodes one announce URL and checks it names an endpoint (scheme://host)."""
    try:
        uri = raw.decode('utf-8')
    except UnicodeDecodeError:
        raise InvalidTrackerURI(raw, "not valid UTF-8") from None

    if not uri.isprintable() or any(c.isspace() for c in uri):
        raise InvalidTrackerURI(uri, "contains whitespace or control characters")
    try:
        parts = urlsplit(uri)
        parts.port  # raises on a non-numeric or out-of-range port
    except ValueError as e:
        raise InvalidTrackerURI(uri, str(e)) from None
    if not parts.scheme or not parts.netloc:
        raise InvalidTrackerURI(uri, "expected scheme://host")
    return uri


class Torrent:
    """
    Read-only view of a decoded .torrent file.

    Construction either validates every field or raises a TorrentError;
    there is no partially filled Torrent.
    """
    def __init__(self, meta_info):
        meta_info = _check(meta_info, dict, '<root>')

        # 1. Extract Info Dictionary
        info = _require(meta_info, 'info', dict)
        self._name = _text(_require(info, 'name', bytes, 'info'))
        self._piece_length = _require(info, 'piece length', int, 'info')
        if self._piece_length <= 0:
            raise WrongType('info.piece length', "must be positive")

        # 2. Handle Files (Single vs Multi-file)
        self._is_multi_file = b'files' in info
        self._files = tuple(self._parse_files(info))
        self._total_size = sum(f.length for f in self._files)

        # 3. Resolve tracker tiers
        self._tracker_tiers = self._parse_trackers(meta_info)

        # 4. Optional free-text and date fields
        self._creation_date = self._parse_creation_date(meta_info)
        comment = _optional(meta_info, 'comment', bytes)
        self._comment = _text(comment) if comment is not None else None
        created_by = _optional(meta_info, 'created by', bytes)
        self._created_by = _text(created_by) if created_by is not None else None

        # 5. Calculate Info Hash (This is the unique ID of the torrent)
        self._info_hash = info_hash_hex(Encoder.encode(info))

        logger.debug(f"Loaded Torrent: {self._name}")
        logger.debug(f"Size: {self.size} in {len(self._files)} file(s)")
        logger.debug(f"Pieces: {self.pieces_summary}")
        logger.debug(f"Info Hash: {self._info_hash}")

    @classmethod
    def from_bytes(cls, data: bytes):
        decoder = Decoder(data)
        meta_info = decoder.decode()
        if decoder.index < len(data):
            logger.debug(f"Ignoring {len(data) - decoder.index} trailing bytes")
        return cls(meta_info)

    @classmethod
    def from_file(cls, file_path):
        with open(file_path, 'rb') as f:
            return cls.from_bytes(f.read())

    def _parse_files(self, info):
        if not self._is_multi_file:
            length = _require(info, 'length', int, 'info')
            if length < 0:
                raise WrongType('info.length', "must not be negative")
            return [FileEntry(self._name, length)]

        files = _require(info, 'files', list, 'info')
        if not files:
            raise WrongType('info.files', "must not be empty")

        entries = []
        for i, file_info in enumerate(files):
            where = f"info.files[{i}]"
            _check(file_info, dict, where)
            length = _require(file_info, 'length', int, where)
            if length < 0:
                raise WrongType(f"{where}.length", "must not be negative")
            path_parts = _require(file_info, 'path', list, where)
            if not path_parts:
                raise WrongType(f"{where}.path", "must not be empty")
            path = '/'.join(
                _text(_check(part, bytes, f"{where}.path[{j}]"))
                for j, part in enumerate(path_parts)
            )
            entries.append(FileEntry(path, length))
        return entries

    def _parse_trackers(self, meta_info):
        """
        Returns the tracker tiers with duplicates removed.

        A URL keeps only its first position, scanning tiers top to bottom and
        each tier left to right; tiers left empty are dropped. 'announce' is
        only used when there is no 'announce-list'.
        """
        tiers = []
        announce_list = _optional(meta_info, 'announce-list', list)
        if announce_list is not None:
            seen = set()
            for i, tier_urls in enumerate(announce_list):
                _check(tier_urls, list, f"announce-list[{i}]")
                tier = []
                for j, raw in enumerate(tier_urls):
                    url = _tracker_uri(_check(raw, bytes, f"announce-list[{i}][{j}]"))
                    if url not in seen:
                        seen.add(url)
                        tier.append(url)
                if tier:
                    tiers.append(tuple(tier))
        else:
            announce = _optional(meta_info, 'announce', bytes)
            if announce is not None:
                tiers.append((_tracker_uri(announce),))
        return tuple(tiers)

    def _parse_creation_date(self, meta_info):
        timestamp = _optional(meta_info, 'creation date', int)
        if timestamp is None:
            return None
        try:
            return datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise WrongType('creation date', "is not a valid Unix timestamp") from None

    @property
    def info_hash(self) -> str:
        return self._info_hash

    @property
    def name(self) -> str:
        return self._name

    @property
    def comment(self):
        return self._comment

    @property
    def created_by(self):
        return self._created_by

    @property
    def creation_date(self):
        return self._creation_date

    @property
    def tracker_tiers(self):
        return self._tracker_tiers

    @property
    def trackers(self):
        """All tracker URLs, flattened in tier order."""
        return tuple(url for tier in self._tracker_tiers for url in tier)

    @property
    def files(self):
        return self._files

    @property
    def file_count(self) -> int:
        return len(self._files)

    @property
    def is_multi_file(self) -> bool:
        return self._is_multi_file

    @property
    def file_names(self):
        return tuple(f.path for f in self._files)

    @property
    def file_labels(self):
        return tuple(f"{f.path} ({format_size(f.length)})" for f in self._files)

    @property
    def total_size(self) -> int:
        return self._total_size

    @property
    def size(self) -> str:
        return format_size(self._total_size)

    @property
    def piece_length(self) -> int:
        return self._piece_length

    @property
    def piece_count(self) -> int:
        # Counts one piece too many when the size is an exact multiple
        # of the piece length; kept for output compatibility.
        return self._total_size // self._piece_length + 1

    @property
    def pieces_summary(self) -> str:
        return f"{self.piece_count} pieces @ {format_size(self._piece_length)}"

    def magnet_link(self, include_trackers=False) -> str:
        link = f"magnet:?xt=urn:btih:{self._info_hash}&dn={self._name}"
        if include_trackers:
            link += ''.join(f"&tr={url}" for url in self.trackers)
        return link

    def __repr__(self):
        return f"Torrent(name={self._name!r}, info_hash={self._info_hash!r})"

    def __str__(self):
        return self._name


def parse(meta_info):
    """Builds a Torrent from an already decoded top-level value."""
    return Torrent(meta_info)
