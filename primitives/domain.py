"""Multiplicative evaluation domains (subgroups and their cosets)."""

from dataclasses import dataclass, field

from primitives.field import FF, FieldElement, get_omega, powers
from primitives.ntt import _log2


@dataclass(frozen=True)
class Domain:
    """The coset offset * <omega> of size 2^k.

    omega is always the canonical root get_omega(k), so a domain is fully
    described by its size and offset. Squaring every point of a domain of
    size n gives the domain of size n/2 with offset^2.
    """

    size: int
    offset: FieldElement = field(default_factory=FieldElement.one)

    def __post_init__(self) -> None:
        if self.size <= 0 or self.size & (self.size - 1):
            raise ValueError(f"Domain size must be a power of two, got {self.size}")
        object.__setattr__(self, "offset", FieldElement(self.offset))

    @classmethod
    def subgroup(cls, size: int) -> "Domain":
        return cls(size)

    @classmethod
    def coset(cls, size: int, offset) -> "Domain":
        return cls(size, FieldElement(offset))

    @property
    def n_bits(self) -> int:
        return _log2(self.size)

    @property
    def generator(self) -> FieldElement:
        return get_omega(self.n_bits)

    def element(self, index: int) -> FieldElement:
        """Return offset * omega^index."""
        return self.offset * self.generator ** (index % self.size)

    def elements(self) -> FF:
        """All points, in index order."""
        return powers(self.generator, self.size) * FF(int(self.offset))

    def squared(self) -> "Domain":
        """Image of this domain under x -> x^2."""
        if self.size < 2:
            raise ValueError("Cannot square a domain of size 1")
        return Domain(self.size // 2, self.offset ** 2)

    def __len__(self) -> int:
        return self.size
