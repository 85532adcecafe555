import re
from collections import OrderedDict

from errors import MalformedEncoding, UnexpectedEndOfData

# Integers are signed 64-bit values, like every length and date in a .torrent
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1

# Nested lists/dicts deeper than this are rejected instead of exhausting the stack
MAX_DEPTH = 256

_DIGITS = re.compile(rb'\d*')
_INTEGER = re.compile(rb'-?(0|[1-9]\d*)')


class Decoder:
    """
    Decodes Bencoded data (d, l, i, s) used in torrent files.
    Uses a recursive descent parser.

    Byte strings come back as bytes, lists as lists and dictionaries as
    OrderedDicts keyed by bytes, in the order the keys appear in the input.
    A repeated key overwrites the earlier value but keeps its position.
    """
    def __init__(self, data: bytes):
        if isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        if not isinstance(data, bytes):
            raise TypeError('The data to decode must be bytes.')
        self._data = data
        self._index = 0
        self._depth = 0

    @property
    def index(self) -> int:
        """Offset of the first byte not consumed yet."""
        return self._index

    def decode(self):
        """Decodes exactly one value starting at the current offset."""
        char = self._peek()

        if char == b'i':
            return self._decode_int()
        elif char == b'l':
            return self._decode_list()
        elif char == b'd':
            return self._decode_dict()
        elif char.isdigit():
            return self._decode_string()
        else:
            raise MalformedEncoding(f"Invalid token {char!r}", self._index)

    def _peek(self) -> bytes:
        if self._index >= len(self._data):
            raise UnexpectedEndOfData("Unexpected end of data", self._index)
        return self._data[self._index:self._index + 1]

    def _decode_int(self):
        start = self._index
        self._index += 1  # Skip 'i'
        end = self._data.find(b'e', self._index)
        if end == -1:
            raise UnexpectedEndOfData("Unterminated integer", start)
        # 20 characters already covers "-9223372036854775808"
        if end - self._index > 20:
            raise MalformedEncoding("Integer too long", start)

        body = self._data[self._index:end]
        if not _INTEGER.fullmatch(body) or body == b'-0':
            raise MalformedEncoding(f"Invalid integer {body!r}", start)

        number = int(body)
        if not INT_MIN <= number <= INT_MAX:
            raise MalformedEncoding("Integer out of 64-bit range", start)
        self._index = end + 1  # Skip 'e'
        return number

    def _decode_string(self):
        start = self._index
        colon = _DIGITS.match(self._data, self._index).end()
        if colon >= len(self._data):
            raise UnexpectedEndOfData("Unterminated string length", start)
        if self._data[colon:colon + 1] != b':':
            raise MalformedEncoding("Expected ':' after string length", colon)
        if colon - start > 1 and self._data[start:start + 1] == b'0':
            raise MalformedEncoding("Leading zero in string length", start)

        remaining = len(self._data) - (colon + 1)
        # A length with more digits than the remaining size can never fit
        if colon - start > len(str(remaining)):
            raise UnexpectedEndOfData(f"String length exceeds the {remaining} remaining bytes", start)
        length = int(self._data[start:colon])
        if length > remaining:
            raise UnexpectedEndOfData(
                f"String length {length} exceeds the {remaining} remaining bytes", start)

        self._index = colon + 1
        s = self._data[self._index:self._index + length]
        self._index += length
        return s

    def _enter(self):
        if self._depth >= MAX_DEPTH:
            raise MalformedEncoding(f"Nesting deeper than {MAX_DEPTH} levels", self._index)
        self._depth += 1
        self._index += 1  # Skip 'l' or 'd'

    def _decode_list(self):
        self._enter()
        try:
            lst = []
            while self._peek() != b'e':
                lst.append(self.decode())
        finally:
            self._depth -= 1
        self._index += 1  # Skip 'e'
        return lst

    def _decode_dict(self):
        self._enter()
        try:
            d = OrderedDict()
            while True:
                char = self._peek()
                if char == b'e':
                    break
                if not char.isdigit():
                    # Keys in bencoded dicts must be strings (bytes)
                    raise MalformedEncoding("Dictionary key must be a byte string", self._index)
                key = self._decode_string()
                d[key] = self.decode()
        finally:
            self._depth -= 1
        self._index += 1  # Skip 'e'
        return d


class Encoder:
    """Encodes Python objects back into Bencoded bytes."""
    @staticmethod
    def encode(data):
        if isinstance(data, str):
            return Encoder.encode(data.encode('utf-8'))
        elif isinstance(data, bool):
            raise TypeError(f"Cannot encode type: {type(data)}")
        elif isinstance(data, int):
            if not INT_MIN <= data <= INT_MAX:
                raise ValueError(f"Integer out of 64-bit range: {data}")
            return f"i{data}e".encode()
        elif isinstance(data, (bytes, bytearray)):
            return f"{len(data)}:".encode() + bytes(data)
        elif isinstance(data, (list, tuple)):
            return b"l" + b"".join(Encoder.encode(item) for item in data) + b"e"
        elif isinstance(data, dict):
            # Keys go out in the mapping's own order so a decoded dict
            # re-encodes to the exact bytes it was read from.
            parts = [b"d"]
            for k, v in data.items():
                if not isinstance(k, (bytes, bytearray, str)):
                    raise TypeError(f"Dict keys must be strings, not {type(k)}")
                parts.append(Encoder.encode(k))
                parts.append(Encoder.encode(v))
            parts.append(b"e")
            return b"".join(parts)
        else:
            raise TypeError(f"Cannot encode type: {type(data)}")


def decode(data: bytes):
    """Decodes the first bencoded value in ``data``."""
    return Decoder(data).decode()


def encode(data) -> bytes:
    return Encoder.encode(data)
