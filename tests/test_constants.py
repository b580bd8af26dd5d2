"""Tests for the chained Keccak-256 round constant derivation."""
from __future__ import annotations

import json

import pytest
from Crypto.Hash import keccak as crypto_keccak

from poseidon2bls.constants import (
    KeccakChain,
    RoundConstantTable,
    TableShapeError,
    default_table,
    derive,
)
from poseidon2bls.field import PRIME
from poseidon2bls.schedule import DEFAULT_SCHEDULE, RoundKind, RoundSchedule, UnsupportedSchedule

DOMAIN = "Poseidon2-BLS12_381[t=2,rF=8,rP=56,d=5]"


def _keccak256(data: bytes) -> bytes:
    h = crypto_keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


def _independent_constants(domain: str, count: int) -> list[int]:
    cur = _keccak256(_keccak256(domain.encode("utf-8")))
    out = []
    for _ in range(count):
        out.append(int.from_bytes(cur, "big") % PRIME)
        cur = _keccak256(cur)
    return out


def test_keccak_is_not_sha3() -> None:
    # keccak256("") is the Ethereum empty hash, not SHA3-256("")
    chain = KeccakChain("")
    h0 = _keccak256(b"")
    assert h0.hex() == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    assert chain.cursor == _keccak256(h0)


def test_chain_reads_before_advancing() -> None:
    chain = KeccakChain(DOMAIN)
    h1 = _keccak256(_keccak256(DOMAIN.encode()))
    assert chain.cursor == h1
    first = next(chain)
    assert first == int.from_bytes(h1, "big") % PRIME
    assert chain.cursor == _keccak256(h1)
    assert chain.emitted == 1


def test_independent_chains_do_not_interfere() -> None:
    a = KeccakChain(DOMAIN)
    b = KeccakChain(DOMAIN)
    next(a)
    next(a)
    assert next(b) == _independent_constants(DOMAIN, 1)[0]


def test_derive_matches_independent_keccak(table) -> None:
    expected = _independent_constants(DOMAIN, 8 * 2 + 56)
    assert list(table.values()) == expected
    assert table.domain == DOMAIN


def test_derive_is_deterministic() -> None:
    assert derive() == derive()
    assert derive().rows == default_table().rows


def test_default_table_is_shared() -> None:
    assert default_table() is default_table()


def test_table_shape(table) -> None:
    assert len(table) == 64
    widths = [len(row) for row in table]
    assert widths == [2] * 4 + [1] * 56 + [2] * 4
    kinds = [kind for kind, _ in table.kinds()]
    assert kinds[:4] == [RoundKind.FULL] * 4
    assert kinds[4:60] == [RoundKind.PARTIAL] * 56
    assert kinds[60:] == [RoundKind.FULL] * 4


def test_constants_in_range(table) -> None:
    values = list(table.values())
    assert len(values) == 72
    assert all(0 <= v < PRIME for v in values)
    assert len(set(values)) == len(values)


def test_different_seed_changes_every_constant(table) -> None:
    other = derive("Poseidon2-Other")
    assert other.domain == "Poseidon2-Other[t=2,rF=8,rP=56,d=5]"
    assert all(a != b for a, b in zip(table.values(), other.values()))


def test_schedule_is_part_of_domain() -> None:
    shorter = derive(schedule=RoundSchedule(partial_rounds=2))
    assert len(shorter) == 10
    assert shorter.domain == "Poseidon2-BLS12_381[t=2,rF=8,rP=2,d=5]"
    assert list(shorter.values()) == _independent_constants(shorter.domain, 18)


def test_unsupported_schedule_rejected() -> None:
    with pytest.raises(UnsupportedSchedule):
        derive(schedule=RoundSchedule(width=3))


def test_table_is_immutable(table) -> None:
    with pytest.raises(AttributeError):
        table.rows = ()  # type: ignore[misc]
    with pytest.raises(TypeError):
        table.rows[0][0] = 1  # type: ignore[index]


def test_hex_export_round_trip(table) -> None:
    data = json.loads(json.dumps(table.to_dict()))
    assert data["domain"] == DOMAIN
    assert data["schedule"] == {"t": 2, "rF": 8, "rP": 56, "d": 5}
    assert data["round_constants"][0][0] == hex(table[0][0])
    assert all(v.startswith("0x") for row in data["round_constants"] for v in row)
    assert RoundConstantTable.from_dict(data) == table


def test_from_dict_rejects_bad_shapes(table) -> None:
    data = table.to_dict()
    data["round_constants"] = data["round_constants"][:-1]
    with pytest.raises(TableShapeError):
        RoundConstantTable.from_dict(data)

    data = table.to_dict()
    data["round_constants"][4] = ["0x1", "0x2"]
    with pytest.raises(TableShapeError):
        RoundConstantTable.from_dict(data)

    data = table.to_dict()
    data["round_constants"][0][0] = hex(PRIME)
    with pytest.raises(TableShapeError):
        RoundConstantTable.from_dict(data)

    data = table.to_dict()
    data["prime"] = "0x11"
    with pytest.raises(TableShapeError):
        RoundConstantTable.from_dict(data)

    with pytest.raises(TableShapeError):
        RoundConstantTable.from_dict({"round_constants": []})
