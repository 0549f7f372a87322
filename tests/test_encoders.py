#    Copyright 2026 Two Sigma Open Source, LLC
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.

"""Tests for bit utilities, validation and the instruction encoders."""

import pytest

from rv32i_lockstep.encoders.instruction_encode import enc_b, enc_i, enc_j, enc_r, enc_u
from rv32i_lockstep.encoders.op_tables import (
    ALU_EVALUATORS,
    BRANCHES,
    I_ALU,
    JUMPS,
    LOADS,
    R_ALU,
    STORES,
    UPPER,
)
from rv32i_lockstep.models.reference_cpu import decode
from rv32i_lockstep.utils.riscv_utils import bit_field, sign_extend, to_signed32, to_unsigned32
from rv32i_lockstep.utils.validation import (
    HardwareAssertions,
    ValidationError,
    assert_aligned,
)


@pytest.mark.parametrize(
    "value, bits, expected",
    [
        (0xFF, 8, -1),
        (0x7F, 8, 127),
        (0x800, 12, -2048),
        (0x7FF, 12, 2047),
        (0x1FFE, 13, -2),
    ],
)
def test_sign_extend(value, bits, expected):
    assert sign_extend(value, bits) == expected


def test_signed_unsigned_casts():
    assert to_signed32(0xFFFFFFFF) == -1
    assert to_signed32(0x7FFFFFFF) == 0x7FFFFFFF
    assert to_unsigned32(-1) == 0xFFFFFFFF
    assert to_unsigned32(1 << 32) == 0


def test_bit_field():
    assert bit_field(0x002081B3, 6, 0) == 0x33
    assert bit_field(0x002081B3, 11, 7) == 3
    assert bit_field(0xF0000000, 31, 28) == 0xF


def test_validation_error_carries_context():
    with pytest.raises(ValidationError) as excinfo:
        HardwareAssertions.assert_register_valid(32)
    assert excinfo.value.context["max"] == 31
    assert "register out of range" in str(excinfo.value)


def test_assert_aligned():
    assert_aligned(8, 4)
    with pytest.raises(ValidationError):
        assert_aligned(6, 4)


@pytest.mark.parametrize(
    "word, expected",
    [
        (I_ALU["addi"][0](1, 0, 5), 0x00500093),
        (I_ALU["addi"][0](2, 0, 3), 0x00300113),
        (R_ALU["add"][0](3, 1, 2), 0x002081B3),
        (I_ALU["andi"][0](2, 1, 10), 0x00A0F113),
        (I_ALU["ori"][0](3, 1, 15), 0x00F0E193),
        (I_ALU["addi"][0](1, 0, 20), 0x01400093),
        (R_ALU["sub"][0](3, 1, 2), 0x402081B3),
        (I_ALU["srai"][0](4, 3, 2), 0x4021D213),
        (STORES["sw"](1, 2, 0), 0x00112023),
        (LOADS["lw"][0](3, 2, 0), 0x00012183),
        (BRANCHES["bne"](1, 0, -4), 0xFE009EE3),
        (JUMPS["jal"](1, 12), 0x00C000EF),
        (JUMPS["jalr"](2, 1, 0), 0x00008167),
        (UPPER["lui"][0](1, 0x12345), 0x123450B7),
    ],
)
def test_known_encodings(word, expected):
    assert word == expected


@pytest.mark.parametrize(
    "encoder, args",
    [
        (enc_i, (0, 1, 0, 2048)),
        (enc_i, (0, 32, 0, 0)),
        (enc_r, (0, 0, 1, 2, 40)),
        (enc_b, (0, 1, 2, 3)),
        (enc_b, (0, 1, 2, 4096)),
        (enc_j, (1, 1 << 20)),
        (enc_u, (0x37, 1, 1 << 20)),
    ],
)
def test_encoders_reject_out_of_range_fields(encoder, args):
    with pytest.raises(ValidationError):
        encoder(*args)


def test_shift_encoder_rejects_wide_shamt():
    with pytest.raises(ValidationError):
        I_ALU["slli"][0](1, 1, 32)


@pytest.mark.parametrize("name", sorted(R_ALU))
def test_register_ops_decode_to_their_mnemonic(name):
    encoder, _ = R_ALU[name]
    assert decode(encoder(5, 6, 7)).mnemonic == name


@pytest.mark.parametrize("name", sorted(I_ALU))
def test_immediate_ops_decode_to_their_mnemonic(name):
    encoder, _ = I_ALU[name]
    decoded = decode(encoder(5, 6, 3))
    assert decoded.mnemonic == name
    assert decoded.imm == 3


def test_every_alu_mnemonic_has_an_evaluator():
    assert set(R_ALU) | set(I_ALU) == set(ALU_EVALUATORS)
