"""Fiat-Shamir schedule shared by prover and verifier.

Transcript order:
    1. seed, then the statement (constraint system + params, canonical JSON)
    2. one Merkle root per trace column
    3. constraint weights: one per transition constraint, then one per boundary
    4. FRI: layer roots interleaved with folding challenges, then final coefficients
    5. query indices
"""

import json
from typing import List

from primitives.channel import Channel
from primitives.field import FieldElement
from protocol.constraints import ConstraintSystem
from protocol.params import StarkParams


def statement_bytes(system: ConstraintSystem, params: StarkParams) -> bytes:
    """Canonical encoding of what is being proven."""
    statement = {"system": system.to_dict(), "params": params.to_dict()}
    return json.dumps(statement, sort_keys=True, separators=(",", ":")).encode()


def new_channel(system: ConstraintSystem, params: StarkParams) -> Channel:
    """Fresh channel bound to the statement."""
    channel = Channel(params.channel_seed)
    channel.send(statement_bytes(system, params))
    return channel


def draw_constraint_weights(channel: Channel, system: ConstraintSystem) -> List[FieldElement]:
    return [channel.receive_random_field_element() for _ in range(system.n_constraints)]


def draw_query_indices(channel: Channel, params: StarkParams) -> List[int]:
    """Query positions in the extended domain; repeats are allowed."""
    return [
        channel.receive_random_int(0, params.extended_size - 1)
        for _ in range(params.n_queries)
    ]
