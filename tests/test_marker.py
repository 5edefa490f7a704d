"""Tests for the pagination marker codec."""

import base64

import pytest

from pipeline_registry.exceptions.domain import InvalidMarkerError
from pipeline_registry.utils.marker import MarkerCodec


class TestMarkerCodec:
    """Tests for MarkerCodec."""

    @pytest.mark.parametrize("pk", [0, 1, 42, 1_000_000, -1, 2**63 - 1, -(2**63)])
    def test_round_trip(self, marker_codec, pk):
        assert marker_codec.decode(marker_codec.encode(pk)) == pk

    def test_encode_is_deterministic(self, marker_codec):
        assert marker_codec.encode(7) == marker_codec.encode(7)
        assert marker_codec.encode(7) != marker_codec.encode(8)

    def test_marker_does_not_expose_row_key(self, marker_codec):
        marker = marker_codec.encode(12345)
        assert "12345" not in marker

    def test_encode_rejects_out_of_range_key(self, marker_codec):
        with pytest.raises(ValueError):
            marker_codec.encode(2**63)

    @pytest.mark.parametrize("marker", ["", "abc", "not a marker!", "AAAA", "ä"])
    def test_decode_malformed(self, marker_codec, marker):
        with pytest.raises(InvalidMarkerError):
            marker_codec.decode(marker)

    def test_decode_tampered(self, marker_codec):
        raw = bytearray(base64.urlsafe_b64decode(marker_codec.encode(99)))
        raw[0] ^= 0x01
        tampered = base64.urlsafe_b64encode(bytes(raw)).decode("ascii")
        with pytest.raises(InvalidMarkerError):
            marker_codec.decode(tampered)

    def test_decode_foreign_block(self, marker_codec):
        foreign = base64.urlsafe_b64encode(b"0123456789abcdef").decode("ascii")
        with pytest.raises(InvalidMarkerError):
            marker_codec.decode(foreign)

    def test_decode_marker_from_other_secret(self, marker_codec):
        other = MarkerCodec("another-secret")
        with pytest.raises(InvalidMarkerError):
            marker_codec.decode(other.encode(5))

    def test_invalid_marker_code(self, marker_codec):
        with pytest.raises(InvalidMarkerError) as exc_info:
            marker_codec.decode("bogus")
        assert exc_info.value.code == "InvalidMarker"

    @pytest.mark.parametrize("pk", [0, 99, 2**40])
    def test_decode_rejects_every_single_character_change(self, marker_codec, pk):
        alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
        marker = marker_codec.encode(pk)
        for i, char in enumerate(marker):
            # Flipping the lowest bit also hits the unused padding bits of the last symbol
            replacement = "A" if char == "=" else alphabet[alphabet.index(char) ^ 1]
            altered = marker[:i] + replacement + marker[i + 1 :]
            with pytest.raises(InvalidMarkerError):
                marker_codec.decode(altered)

    def test_decode_rejects_standard_alphabet(self, marker_codec):
        markers = (marker_codec.encode(pk) for pk in range(1000))
        marker = next(m for m in markers if "-" in m or "_" in m)
        standard = marker.translate(str.maketrans("-_", "+/"))
        with pytest.raises(InvalidMarkerError):
            marker_codec.decode(standard)
