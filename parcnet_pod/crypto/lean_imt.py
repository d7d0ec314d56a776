"""
parcnet_pod/crypto/lean_imt.py

Root of a lean incremental Merkle tree with Poseidon as the node hash.

Leaves are paired left to right and hashed; an unpaired last node is
carried to the next level unchanged. A single leaf is its own root.
"""

from typing import Sequence

from parcnet_pod.crypto.poseidon import poseidon_hash


def lean_poseidon_imt(leaves: Sequence[int]) -> int:
    if not leaves:
        raise ValueError("Lean IMT needs at least one leaf")
    level = list(leaves)
    while len(level) > 1:
        nxt = [
            poseidon_hash([level[i], level[i + 1]])
            for i in range(0, len(level) - 1, 2)
        ]
        if len(level) % 2:
            nxt.append(level[-1])
        level = nxt
    return level[0]
