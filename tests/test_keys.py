"""
Key Material Tests

1. Public key decoding from the 04 || x || y hex encoding
2. Private key decoding and pairing with a public key
3. Short / malformed input produces typed errors, never IndexError
4. Optional key pair validation
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from guomi.errors import DecodeError, MalformedKeyError
from guomi.keys import (
    CurveKeyPair,
    decode_private_key,
    decode_public_key,
    private_key_to_hex,
    public_key_to_hex,
    validate_key_pair,
)
from guomi.primitive import SM2_GX, SM2_GY, SM2_N, sm2_public_point

D = 0x3945208F7B2144B13F36E38AC6D39F95889393692860B51A42FB81EF4DF7C5B8
D_HEX = f"{D:064x}"

# generator point: public key of scalar 1
G_HEX = "04" + f"{SM2_GX:064x}" + f"{SM2_GY:064x}"


def _public_hex(d: int) -> str:
    x, y = sm2_public_point(d)
    return public_key_to_hex(CurveKeyPair(x=x, y=y))


class TestDecodePublicKey:
    """decode_public_key()"""

    def test_extracts_coordinates(self):
        pair = decode_public_key(G_HEX)
        assert pair.public_point == (SM2_GX, SM2_GY)
        assert pair.d is None
        assert not pair.has_private
        assert pair.curve == "sm2p256v1"

    def test_deterministic(self):
        assert decode_public_key(G_HEX) == decode_public_key(G_HEX)

    def test_upper_case_hex(self):
        assert decode_public_key(G_HEX.upper()) == decode_public_key(G_HEX)

    def test_fixed_offsets(self):
        """x comes from bytes 1..32 and y from bytes 33..64."""
        hex_key = "04" + "00" * 31 + "01" + "00" * 31 + "02"
        assert decode_public_key(hex_key).public_point == (1, 2)

    def test_format_tag_not_checked(self):
        """Any tag byte is accepted; only the coordinates matter."""
        assert decode_public_key("07" + G_HEX[2:]).public_point == (SM2_GX, SM2_GY)

    def test_trailing_bytes_ignored(self):
        assert decode_public_key(G_HEX + "ffff").public_point == (SM2_GX, SM2_GY)

    @pytest.mark.parametrize("length", [0, 2, 64, 128])
    def test_short_input(self, length):
        with pytest.raises(MalformedKeyError) as exc:
            decode_public_key(G_HEX[:length])
        assert exc.value.code == "GM_KEY_MALFORMED"
        assert exc.value.details == {"expected_bytes": 65, "actual_bytes": length // 2}

    @pytest.mark.parametrize("bad", [G_HEX[:-1], "zz" + G_HEX[2:], " " + G_HEX])
    def test_invalid_hex(self, bad):
        with pytest.raises(DecodeError):
            decode_public_key(bad)

    def test_encode_round_trip(self):
        assert public_key_to_hex(decode_public_key(G_HEX)) == G_HEX


class TestDecodePrivateKey:
    """decode_private_key()"""

    def test_pairs_scalar_with_public_key(self):
        pub_hex = _public_hex(D)
        pair = decode_private_key(D_HEX, pub_hex)
        assert pair.d == D
        assert pair.has_private
        assert pair.public_point == decode_public_key(pub_hex).public_point

    def test_private_round_trip(self):
        pair = decode_private_key(D_HEX, _public_hex(D))
        assert private_key_to_hex(pair) == D_HEX

    def test_short_scalar_is_left_padded_on_encode(self):
        pair = decode_private_key("01", G_HEX)
        assert pair.d == 1
        assert private_key_to_hex(pair) == "00" * 31 + "01"

    def test_mismatched_pair_is_accepted(self):
        """No consistency check happens at decode time."""
        pair = decode_private_key(D_HEX, G_HEX)
        assert pair.d == D
        assert pair.public_point == (SM2_GX, SM2_GY)

    def test_invalid_scalar_hex(self):
        with pytest.raises(DecodeError):
            decode_private_key("xyz", G_HEX)

    def test_empty_scalar(self):
        with pytest.raises(MalformedKeyError):
            decode_private_key("", G_HEX)

    def test_short_public_key(self):
        with pytest.raises(MalformedKeyError):
            decode_private_key(D_HEX, "04abcd")

    def test_public_only_has_no_private_hex(self):
        with pytest.raises(MalformedKeyError):
            private_key_to_hex(decode_public_key(G_HEX))

    def test_repr_hides_scalar(self):
        pair = decode_private_key(D_HEX, G_HEX)
        assert D_HEX not in repr(pair).lower()
        assert str(D) not in repr(pair)


class TestValidateKeyPair:
    """validate_key_pair()"""

    def test_matching_pair(self):
        validate_key_pair(decode_private_key(D_HEX, _public_hex(D)))

    def test_generator_pair(self):
        validate_key_pair(decode_private_key("01", G_HEX))

    def test_mismatched_pair(self):
        with pytest.raises(MalformedKeyError):
            validate_key_pair(decode_private_key(D_HEX, G_HEX))

    def test_public_only(self):
        with pytest.raises(MalformedKeyError):
            validate_key_pair(decode_public_key(G_HEX))

    @pytest.mark.parametrize("d", [0, SM2_N, SM2_N + 1])
    def test_scalar_out_of_range(self, d):
        with pytest.raises(MalformedKeyError):
            validate_key_pair(CurveKeyPair(x=SM2_GX, y=SM2_GY, d=d))
