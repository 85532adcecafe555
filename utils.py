import hashlib
import logging

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'

# Binary prefixes, one step per power of 1024
SIZE_UNITS = 'KMGTPE'

logger = logging.getLogger("tor2mag")


def setup_logging(verbose=False):
    """Configures the root handler with the project's time-stamped format."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT
    )


def sha1_hash(data: bytes) -> bytes:
    """Computes the SHA-1 hash of the given binary data."""
    return hashlib.sha1(data).digest()


def info_hash_hex(info_bytes: bytes) -> str:
    """
    Returns the torrent identifier: the SHA-1 of the bencoded info
    dictionary as 40 lowercase hex characters.
    """
    return sha1_hash(info_bytes).hex()


def format_size(size: int) -> str:
    """
    Renders a byte count the way file managers do.

    >>> format_size(500)
    '500 B'
    >>> format_size(1536)
    '1.5 KB'
    """
    if size < 1024:
        return f"{size} B"
    unit = min((size.bit_length() - 1) // 10, len(SIZE_UNITS))
    return f"{size / (1 << (unit * 10)):.1f} {SIZE_UNITS[unit - 1]}B"
