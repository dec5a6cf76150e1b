"""
Fiat-Shamir channel built on SHA-256.

The channel absorbs prover messages into a running digest and derives
verifier randomness from it, so prover and verifier compute the same
challenges by replaying the same sequence of sends.

State update rules:
    initial:  state = H(DOMAIN_TAG || seed)
    send(m):  state = H(state || len(m) as u64 BE || m)
    draw:     out   = H(state || counter as u64 BE); counter += 1
"""
import hashlib
from typing import List, Sequence, Union

from primitives.field import P, FieldElement

DOMAIN_TAG = b"stark-channel/v1"


class Channel:
    """
    Non-interactive transcript between a prover and a verifier.

    Each proof owns its channel; nothing here is global, so independent
    proofs can run side by side.

    Attributes:
        state: Current 32-byte digest of everything sent so far
        counter: Number of random values drawn so far (never reset)
        messages: Every message sent, in order
    """

    def __init__(self, seed: bytes = b"") -> None:
        self.state = hashlib.sha256(DOMAIN_TAG + seed).digest()
        self.counter = 0
        self.messages: List[bytes] = []

    def send(self, data: bytes) -> None:
        """Absorb a prover message."""
        self.state = hashlib.sha256(self.state + len(data).to_bytes(8, "big") + data).digest()
        self.messages.append(bytes(data))

    def send_field_elements(self, values: Sequence[Union[int, FieldElement]]) -> None:
        """Absorb a list of field values as one message."""
        self.send(b"".join(FieldElement(v).to_bytes() for v in values))

    def _draw(self) -> int:
        """Squeeze 256 pseudorandom bits without touching the sent history."""
        digest = hashlib.sha256(self.state + self.counter.to_bytes(8, "big")).digest()
        self.counter += 1
        return int.from_bytes(digest, "big")

    def receive_random_int(self, min_value: int, max_value: int) -> int:
        """Pseudorandom integer in [min_value, max_value] (inclusive)."""
        if min_value > max_value:
            raise ValueError(f"Empty range [{min_value}, {max_value}]")
        return min_value + self._draw() % (max_value - min_value + 1)

    def receive_random_field_element(self) -> FieldElement:
        """Pseudorandom field element (256 bits reduced mod p)."""
        return FieldElement(self._draw() % P)
