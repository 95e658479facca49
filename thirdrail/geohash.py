"""Decoding of geohash strings into latitude and longitude."""

from __future__ import annotations

import math

_ALPHABET = "0123456789bcdefghjkmnpqrstuvwxyz"
_VALUES = {char: value for value, char in enumerate(_ALPHABET)}
_MAX_LENGTH = 12


def _decode_range(value: int, bits: int, extent: float) -> float:
    fraction = (value << (32 - bits)) / 2.0**32
    return 2 * extent * fraction - extent


def _max_decimal_power(size: float) -> float:
    exponent = math.floor(math.log10(size))
    if exponent < 0:
        return 1 / 10.0**-exponent
    return 10.0**exponent


def _round(minimum: float, size: float) -> float:
    step = _max_decimal_power(size)
    return math.ceil(minimum / step) * step


def decode(geohash: str) -> tuple[float, float]:
    """Return a (latitude, longitude) inside the geohash's cell.

    The point is rounded to the fewest decimal places the cell allows.
    Raises ValueError for an empty, over-long or malformed geohash.
    """
    if not geohash:
        raise ValueError("empty geohash")
    if len(geohash) > _MAX_LENGTH:
        raise ValueError(f"geohash longer than {_MAX_LENGTH} characters: {geohash!r}")

    lat_int = lng_int = 0
    lat_bits = lng_bits = 0
    even = True
    for char in geohash.lower():
        try:
            value = _VALUES[char]
        except KeyError:
            raise ValueError(f"invalid geohash character {char!r} in {geohash!r}") from None
        for shift in range(4, -1, -1):
            bit = (value >> shift) & 1
            if even:
                lng_int = (lng_int << 1) | bit
                lng_bits += 1
            else:
                lat_int = (lat_int << 1) | bit
                lat_bits += 1
            even = not even

    min_lat = _decode_range(lat_int, lat_bits, 90.0)
    min_lng = _decode_range(lng_int, lng_bits, 180.0)
    lat_size = math.ldexp(180.0, -lat_bits)
    lng_size = math.ldexp(360.0, -lng_bits)
    return _round(min_lat, lat_size), _round(min_lng, lng_size)