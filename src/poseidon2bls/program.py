"""Straight-line instruction programs for downstream code emitters.

``build_program`` traces the compression function into a sequence of
primitive word operations (``mod``, ``add``, ``addmod``, ``mulmod``,
``copy``) over named registers. Each operand carries the tag it is known to
have when the instruction runs (``raw`` input word, ``clean`` or ``dirty``),
which is all an emitter needs to decide between ``add`` and ``addmod`` on a
256-bit machine. ``Program.run`` interprets the trace with 256-bit word
semantics and checks every tag against the actual value.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from .constants import RoundConstantTable, default_table
from .field import (
    DIRTY_BOUND,
    PRIME,
    WORD_LIMIT,
    InvalidFieldElement,
    ReductionInvariantError,
    parse_field_input,
)
from .permutation import Variant, compress_with
from .schedule import RoundKind

RAW = "raw"
CLEAN = "clean"
DIRTY = "dirty"

RESULT_REGISTER = "result"
INPUT_REGISTERS = ("left", "right")


class Op(str, Enum):
    MOD = "mod"
    ADD = "add"
    ADDMOD = "addmod"
    MULMOD = "mulmod"
    COPY = "copy"


Operand = Union[str, int]


@dataclass(frozen=True)
class Instruction:
    op: Op
    dest: str
    operands: Tuple[Operand, ...]
    operand_tags: Tuple[str, ...]
    result_tag: str
    comment: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op": self.op.value,
            "dest": self.dest,
            "operands": [hex(o) if isinstance(o, int) else o for o in self.operands],
            "operand_tags": list(self.operand_tags),
            "result_tag": self.result_tag,
            "comment": self.comment,
        }


@dataclass(frozen=True)
class _Reg:
    name: str
    tag: str


class _Tracer:
    """Backend that records instructions instead of computing values."""

    name = ""

    def __init__(self) -> None:
        self.instructions: List[Instruction] = []
        self._comment = "load"

    def _emit(self, op: Op, dest: str, operands: Tuple[Union[_Reg, int], ...], result_tag: str) -> _Reg:
        names = tuple(o.name if isinstance(o, _Reg) else o for o in operands)
        tags = tuple(o.tag if isinstance(o, _Reg) else CLEAN for o in operands)
        self.instructions.append(Instruction(op, dest, names, tags, result_tag, self._comment))
        return _Reg(dest, result_tag)

    def load(self, value: _Reg, slot: int) -> _Reg:
        return self._emit(Op.MOD, f"s{slot}", (value,), CLEAN)

    def snapshot(self, value: _Reg) -> _Reg:
        saved = self._emit(Op.COPY, "saved_right", (value,), value.tag)
        self._comment = "initial mix"
        return saved

    def begin_round(self, index: int, kind: RoundKind) -> None:
        self._comment = f"{kind.value} round {index}"

    def sbox(self, value: _Reg) -> _Reg:
        sq = self._emit(Op.MULMOD, "sq", (value, value), CLEAN)
        quad = self._emit(Op.MULMOD, "quad", (sq, sq), CLEAN)
        return self._emit(Op.MULMOD, value.name, (quad, value), CLEAN)

    def feed_forward(self, s1: _Reg, saved: _Reg) -> _Reg:
        self._comment = "feed-forward"
        return self._emit(Op.ADDMOD, RESULT_REGISTER, (s1, saved), CLEAN)

    def output(self, value: _Reg) -> _Reg:
        return value


class _ReducedTracer(_Tracer):
    name = Variant.REFERENCE.value

    def add_constant(self, value: _Reg, constant: int) -> _Reg:
        return self._emit(Op.ADDMOD, value.name, (value, constant), CLEAN)

    def mix_external(self, s0: _Reg, s1: _Reg) -> Tuple[_Reg, _Reg]:
        total = self._emit(Op.ADDMOD, "sum", (s0, s1), CLEAN)
        new_s0 = self._emit(Op.ADDMOD, s0.name, (s0, total), CLEAN)
        return new_s0, self._emit(Op.ADDMOD, s1.name, (s1, total), CLEAN)

    def mix_internal(self, s0: _Reg, s1: _Reg) -> Tuple[_Reg, _Reg]:
        total = self._emit(Op.ADDMOD, "sum", (s0, s1), CLEAN)
        new_s0 = self._emit(Op.ADDMOD, s0.name, (s0, total), CLEAN)
        doubled = self._emit(Op.ADDMOD, "s1_double", (s1, s1), CLEAN)
        return new_s0, self._emit(Op.ADDMOD, s1.name, (doubled, total), CLEAN)


class _ElidedTracer(_Tracer):
    name = Variant.ELIDED.value

    def _add(self, dest: str, a: Union[_Reg, int], b: Union[_Reg, int]) -> _Reg:
        for operand in (a, b):
            if isinstance(operand, _Reg) and operand.tag != CLEAN:
                raise ReductionInvariantError(
                    f"unreduced add on {operand.tag} register {operand.name!r} ({self._comment})"
                )
        return self._emit(Op.ADD, dest, (a, b), DIRTY)

    def add_constant(self, value: _Reg, constant: int) -> _Reg:
        return self._add(value.name, value, constant)

    def mix_external(self, s0: _Reg, s1: _Reg) -> Tuple[_Reg, _Reg]:
        total = self._add("sum", s0, s1)
        new_s0 = self._emit(Op.ADDMOD, s0.name, (s0, total), CLEAN)
        return new_s0, self._emit(Op.ADDMOD, s1.name, (s1, total), CLEAN)

    def mix_internal(self, s0: _Reg, s1: _Reg) -> Tuple[_Reg, _Reg]:
        total = self._add("sum", s0, s1)
        new_s0 = self._emit(Op.ADDMOD, s0.name, (s0, total), CLEAN)
        doubled = self._add("s1_double", s1, s1)
        return new_s0, self._emit(Op.ADDMOD, s1.name, (doubled, total), CLEAN)


_TRACERS = {
    Variant.REFERENCE: _ReducedTracer,
    Variant.ELIDED: _ElidedTracer,
}


def _check_tag(tag: str, value: int, where: str) -> None:
    if tag == CLEAN and not 0 <= value < PRIME:
        raise ReductionInvariantError(f"{where}: value tagged clean is not canonical")
    if tag == DIRTY and not 0 <= value < DIRTY_BOUND:
        raise ReductionInvariantError(f"{where}: value tagged dirty exceeds 2*PRIME")
    if not 0 <= value < WORD_LIMIT:
        raise ReductionInvariantError(f"{where}: value does not fit a 256-bit word")


@dataclass(frozen=True)
class Program:
    variant: Variant
    domain: str
    instructions: Tuple[Instruction, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.instructions)

    def op_counts(self) -> Dict[str, int]:
        counts = Counter(instr.op.value for instr in self.instructions)
        return {op.value: counts.get(op.value, 0) for op in Op}

    def count(self, op: Union[Op, str]) -> int:
        return self.op_counts()[Op(op).value]

    @property
    def reductions(self) -> int:
        """Explicit reduction operations (``mod`` and ``addmod``)."""
        return self.count(Op.MOD) + self.count(Op.ADDMOD)

    def run(self, left: Any, right: Any, *, check_tags: bool = True) -> int:
        registers: Dict[str, int] = {}
        for name, raw in zip(INPUT_REGISTERS, (left, right)):
            value = parse_field_input(raw)
            if value >= WORD_LIMIT:
                raise InvalidFieldElement(f"{name} input does not fit a 256-bit word")
            registers[name] = value

        for step, instr in enumerate(self.instructions):
            where = f"step {step} ({instr.op.value} -> {instr.dest}, {instr.comment})"
            values = []
            for operand, tag in zip(instr.operands, instr.operand_tags):
                value = registers[operand] if isinstance(operand, str) else operand
                if check_tags:
                    _check_tag(tag, value, where)
                values.append(value)

            if instr.op is Op.MOD:
                result = values[0] % PRIME
            elif instr.op is Op.ADD:
                result = values[0] + values[1]
                if result >= WORD_LIMIT:
                    raise ReductionInvariantError(f"{where}: add overflows a 256-bit word")
            elif instr.op is Op.ADDMOD:
                result = (values[0] + values[1]) % PRIME
            elif instr.op is Op.MULMOD:
                result = (values[0] * values[1]) % PRIME
            elif instr.op is Op.COPY:
                result = values[0]
            else:  # pragma: no cover - Op is closed
                raise AssertionError(f"unknown op {instr.op!r}")

            if check_tags:
                _check_tag(instr.result_tag, result, where)
            registers[instr.dest] = result

        return registers[RESULT_REGISTER]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variant": self.variant.value,
            "domain": self.domain,
            "prime": hex(PRIME),
            "inputs": list(INPUT_REGISTERS),
            "output": RESULT_REGISTER,
            "op_counts": self.op_counts(),
            "instructions": [instr.to_dict() for instr in self.instructions],
        }


def build_program(
    table: Optional[RoundConstantTable] = None,
    variant: Union[Variant, str] = Variant.REFERENCE,
) -> Program:
    """Trace ``compress`` into a straight-line program."""
    table = table if table is not None else default_table()
    key = Variant(variant)
    tracer = _TRACERS[key]()
    compress_with(tracer, table, _Reg("left", RAW), _Reg("right", RAW))
    return Program(variant=key, domain=table.domain, instructions=tuple(tracer.instructions))


__all__ = [
    "CLEAN",
    "DIRTY",
    "RAW",
    "Instruction",
    "Op",
    "Program",
    "build_program",
]
