"""
SM3 Tests

Standard vectors from GB/T 32905-2016 appendix A.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from guomi import sm3
from guomi.primitive import sm3_kdf

ABC_DIGEST = "66c7f0f462eeedd9d1f2d46bdc10e4e24167c4875cf2f7a2297da02b8f4ba8e0"
ABCD16_DIGEST = "debe9ff92275b8a138604889c18e5a4d6fdb70e5387e5765293dcba39c0c5732"


class TestDigest:
    """digest() / hexdigest()"""

    def test_abc(self):
        assert sm3.hexdigest(b"abc") == ABC_DIGEST

    def test_512_bit_message(self):
        assert sm3.hexdigest(b"abcd" * 16) == ABCD16_DIGEST

    def test_str_is_hashed_as_utf8(self):
        assert sm3.digest("abc") == bytes.fromhex(ABC_DIGEST)
        assert sm3.digest("国密") == sm3.digest("国密".encode("utf-8"))

    @pytest.mark.parametrize("data", [b"", b"x", b"y" * 1000])
    def test_fixed_length(self, data):
        assert len(sm3.digest(data)) == 32

    def test_upper(self):
        assert sm3.hexdigest(b"abc", upper=True) == ABC_DIGEST.upper()


class TestKdf:
    """SM3 counter-mode KDF used by SM2."""

    @pytest.mark.parametrize("klen", [0, 1, 31, 32, 33, 100])
    def test_length(self, klen):
        assert len(sm3_kdf(b"seed", klen)) == klen

    def test_first_block_is_counter_one(self):
        assert sm3_kdf(b"seed", 32) == sm3.digest(b"seed\x00\x00\x00\x01")

    def test_prefix_stable(self):
        assert sm3_kdf(b"seed", 100)[:40] == sm3_kdf(b"seed", 40)
