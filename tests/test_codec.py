"""Tests for the register map and frame codec.

Pure functions only, no transport involved.
"""

import itertools

import pytest

from max7219.codec import (
    BITS_PER_BYTE,
    FRAME_SIZE,
    build_frame,
    describe_frame,
    pack_bits,
    unpack_bits,
)
from max7219.registers import DIGIT_COUNT, Register, digit_register


# =========================================================================
# Register map
# =========================================================================

class TestRegisterMap:
    def test_datasheet_addresses(self):
        assert Register.NoOp == 0x00
        assert Register.DecodeMode == 0x09
        assert Register.Intensity == 0x0A
        assert Register.ScanLimit == 0x0B
        assert Register.Shutdown == 0x0C
        assert Register.DisplayTest == 0x0F

    def test_digit_registers_are_contiguous(self):
        for n in range(DIGIT_COUNT):
            assert Register[f"Digit{n}"] == 0x01 + n

    def test_digit_register_lookup(self):
        assert digit_register(0) is Register.Digit0
        assert digit_register(7) is Register.Digit7

    @pytest.mark.parametrize("n", [-1, 8, 100])
    def test_digit_register_out_of_range(self, n):
        with pytest.raises(IndexError, match="Invalid digit number"):
            digit_register(n)

    def test_digit_register_rejects_non_int(self):
        with pytest.raises(IndexError):
            digit_register("3")

    @pytest.mark.parametrize("n", [True, False])
    def test_digit_register_rejects_bool(self, n):
        with pytest.raises(IndexError, match="Invalid digit number"):
            digit_register(n)


# =========================================================================
# pack_bits / unpack_bits
# =========================================================================

class TestPackBits:
    def test_lsb_first(self):
        assert pack_bits([1, 0, 0, 0, 0, 0, 0, 0]) == 0x01
        assert pack_bits([0, 0, 0, 0, 0, 0, 0, 1]) == 0x80

    def test_alternating(self):
        assert pack_bits([1, 0, 1, 0, 1, 0, 1, 0]) == 0x55
        assert pack_bits([0, 1, 0, 1, 0, 1, 0, 1]) == 0xAA

    def test_docstring_example(self):
        assert pack_bits([1, 1, 0, 1, 0, 1, 0, 1]) == 0xAB

    def test_accepts_bools(self):
        assert pack_bits([True] * 8) == 0xFF
        assert pack_bits((False,) * 8) == 0x00

    def test_every_bit_lands_in_place(self):
        """bit i of the result equals input element i, for all 256 inputs."""
        for bits in itertools.product((False, True), repeat=BITS_PER_BYTE):
            byte = pack_bits(bits)
            for i in range(BITS_PER_BYTE):
                assert bool(byte >> i & 1) == bits[i]

    def test_bijection(self):
        results = {pack_bits(bits)
                   for bits in itertools.product((0, 1), repeat=BITS_PER_BYTE)}
        assert results == set(range(256))

    @pytest.mark.parametrize("length", [0, 1, 7, 9, 16])
    def test_wrong_length_rejected(self, length):
        with pytest.raises(ValueError, match="Expected 8 bits"):
            pack_bits([0] * length)

    def test_unpack_inverts_pack(self):
        for byte in (0x00, 0x01, 0x55, 0x7B, 0xFF):
            assert pack_bits(unpack_bits(byte)) == byte

    def test_unpack_out_of_range(self):
        with pytest.raises(ValueError):
            unpack_bits(256)


# =========================================================================
# build_frame / describe_frame
# =========================================================================

class TestBuildFrame:
    def test_two_bytes(self):
        frame = build_frame(Register.Intensity, 0x0F)
        assert frame == b'\x0a\x0f'
        assert len(frame) == FRAME_SIZE

    def test_accepts_plain_ints(self):
        assert build_frame(0x01, 0xFF) == b'\x01\xff'

    @pytest.mark.parametrize("reg,data", [(-1, 0), (256, 0), (0, -1), (0, 256)])
    def test_out_of_range_rejected(self, reg, data):
        with pytest.raises(ValueError):
            build_frame(reg, data)

    def test_describe_known_register(self):
        assert describe_frame(b'\x0b\x07') == "ScanLimit <- 0x07"

    def test_describe_unknown_register(self):
        assert describe_frame(b'\x0d\x01') == "0x0d <- 0x01"

    def test_describe_malformed(self):
        assert "malformed" in describe_frame(b'\x01')
