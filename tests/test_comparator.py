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

"""Tests for the architectural state comparator."""

from rv32i_lockstep.lockstep.comparator import FieldMismatch, compare
from rv32i_lockstep.verification_types import StateSnapshot


def snapshot(pc=0, registers=None, memory_words=None):
    values = [0] * 32
    for index, value in (registers or {}).items():
        values[index] = value
    return StateSnapshot(pc, tuple(values), memory_words)


def test_identical_states_match():
    state = snapshot(8, {1: 5, 2: 3, 3: 8})
    verdict = compare(state, state)
    assert verdict.matched
    assert verdict
    assert verdict.fields == frozenset()


def test_one_record_per_differing_field():
    verdict = compare(
        snapshot(0x10, {3: 8, 7: 1}),
        snapshot(0x14, {3: 9, 7: 1, 9: 2}),
    )
    assert not verdict
    assert [m.field for m in verdict.mismatches] == ["pc", "x3", "x9"]
    assert verdict.mismatches[1] == FieldMismatch("x3", 8, 9)


def test_x0_is_never_compared():
    hardware = StateSnapshot(0, (123,) + (0,) * 31)
    assert compare(hardware, snapshot()).matched


def test_memory_compared_only_when_both_sides_have_a_window():
    hardware = snapshot(memory_words={4: 1, 5: 2})
    reference = snapshot(memory_words={4: 1, 5: 3})

    assert compare(hardware, snapshot()).matched
    verdict = compare(hardware, reference)
    assert verdict.fields == {"mem[0x00000005]"}


def test_describe_formats():
    assert FieldMismatch("x3", 8, 9).describe() == "REG x3 MISMATCH: HW=8 REF=9"
    assert (
        FieldMismatch("pc", 0x10, 0x14).describe()
        == "PC MISMATCH: HW=0x00000010 REF=0x00000014"
    )
    assert FieldMismatch("mem[0x00000005]", 2, 3).describe().startswith(
        "MEM[0X00000005] MISMATCH"
    )
