"""
parcnet_pod/crypto/poseidon.py

Poseidon hash over the BN254 scalar field, circomlib instantiation.

    S-box        : x^5
    full rounds  : 8 (4 before, 4 after the partial rounds)
    partial      : per width, see PARTIAL_ROUNDS
    width t      : inputs + 1, state[0] is the capacity element (zero)
    output       : state[0] after the last round

Round constants and the Cauchy MDS matrix are regenerated from the Grain
LFSR exactly as the reference parameter script does, then memoized per
width. The resulting tables match circomlib's published constants.
"""

from functools import lru_cache
from typing import Iterator, List, Sequence, Tuple

from parcnet_pod.crypto.field import FIELD_MODULUS, inv

FULL_ROUNDS = 8

# Partial rounds for widths 2..17
PARTIAL_ROUNDS = (
    56, 57, 56, 60, 60, 63, 64, 63, 60, 66, 60, 65, 70, 60, 64, 68,
)

MAX_INPUTS = len(PARTIAL_ROUNDS)

_FIELD_BITS = 254
_STATE_BITS = 80
_STATE_MASK = (1 << _STATE_BITS) - 1


class _Grain:
    """Self-shrinking Grain LFSR seeded with the Poseidon parameters."""

    def __init__(self, t: int, full_rounds: int, partial_rounds: int) -> None:
        # field=1 (prime), sbox=0 (x^alpha), n, t, R_F, R_P, then 30 ones
        seed = 1
        seed = (seed << 4) | 0
        seed = (seed << 12) | _FIELD_BITS
        seed = (seed << 12) | t
        seed = (seed << 10) | full_rounds
        seed = (seed << 10) | partial_rounds
        seed = (seed << 30) | ((1 << 30) - 1)
        self._state = seed
        for _ in range(160):
            self._step()

    def _step(self) -> int:
        st  = self._state
        bit = ((st >> 17) ^ (st >> 28) ^ (st >> 41) ^ (st >> 56) ^ (st >> 66) ^ (st >> 79)) & 1
        self._state = ((st << 1) | bit) & _STATE_MASK
        return bit

    def bits(self) -> Iterator[int]:
        while True:
            if self._step():
                yield self._step()
            else:
                self._step()

    def field_element(self, bits: Iterator[int]) -> int:
        value = 0
        for _ in range(_FIELD_BITS):
            value = (value << 1) | next(bits)
        return value


@lru_cache(maxsize=None)
def poseidon_parameters(t: int) -> Tuple[Tuple[int, ...], Tuple[Tuple[int, ...], ...]]:
    """(round_constants, mds) for state width t."""
    if not 2 <= t <= MAX_INPUTS + 1:
        raise ValueError(f"Poseidon width must be in [2, {MAX_INPUTS + 1}], got {t}")
    partial = PARTIAL_ROUNDS[t - 2]
    grain   = _Grain(t, FULL_ROUNDS, partial)
    bits    = grain.bits()

    constants: List[int] = []
    while len(constants) < (FULL_ROUNDS + partial) * t:
        candidate = grain.field_element(bits)
        if candidate < FIELD_MODULUS:
            constants.append(candidate)

    while True:
        draws = [grain.field_element(bits) % FIELD_MODULUS for _ in range(2 * t)]
        if len(set(draws)) == len(draws):
            break
    xs, ys = draws[:t], draws[t:]
    mds = tuple(
        tuple(inv(x + y) for y in ys)
        for x in xs
    )
    return tuple(constants), mds


def _pow5(x: int) -> int:
    x2 = x * x % FIELD_MODULUS
    return x2 * x2 % FIELD_MODULUS * x % FIELD_MODULUS


def poseidon_hash(inputs: Sequence[int]) -> int:
    """Hash 1..16 field elements to one field element."""
    if not 1 <= len(inputs) <= MAX_INPUTS:
        raise ValueError(f"Poseidon takes 1 to {MAX_INPUTS} inputs, got {len(inputs)}")

    t = len(inputs) + 1
    constants, mds = poseidon_parameters(t)
    partial = PARTIAL_ROUNDS[t - 2]
    half    = FULL_ROUNDS // 2

    state = [0] + [x % FIELD_MODULUS for x in inputs]
    for r in range(FULL_ROUNDS + partial):
        state = [(s + constants[r * t + i]) % FIELD_MODULUS for i, s in enumerate(state)]
        if r < half or r >= half + partial:
            state = [_pow5(s) for s in state]
        else:
            state[0] = _pow5(state[0])
        state = [
            sum(m * s for m, s in zip(row, state)) % FIELD_MODULUS
            for row in mds
        ]
    return state[0]
