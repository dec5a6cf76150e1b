"""Number Theoretic Transform over GF(p)."""

import galois

from primitives.field import FF, FieldElement, get_omega, powers

# --- NTT Engine ---

class NTT:
    """NTT engine for a power-of-two domain size.

    Transforms run through galois.ntt / galois.intt. galois picks the root
    FF.primitive_element^((p - 1) / size), which is get_omega(log2(size))
    because the smallest primitive root of p is GENERATOR. So
    ntt(c)[i] == c(omega^i) and coset_ntt(c, s)[i] == c(s * omega^i).
    """

    def __init__(self, domain_size: int) -> None:
        assert domain_size > 0, "Domain size must be positive"
        assert (domain_size & (domain_size - 1)) == 0, "Domain size must be power of 2"

        self.n = domain_size
        self.n_bits = _log2(domain_size)
        self.omega = get_omega(self.n_bits)

    def ntt(self, coeffs: FF) -> FF:
        """Forward NTT: coefficients -> evaluations on <omega>."""
        return galois.ntt(self._pad(coeffs))

    def intt(self, evals: FF) -> FF:
        """Inverse NTT: evaluations on <omega> -> coefficients."""
        return galois.intt(self._pad(evals))

    def coset_ntt(self, coeffs: FF, offset: FieldElement) -> FF:
        """Evaluate on the coset offset * <omega>."""
        return self.ntt(self._pad(coeffs) * powers(offset, self.n))

    def coset_intt(self, evals: FF, offset: FieldElement) -> FF:
        """Interpolate values given on the coset offset * <omega>."""
        coeffs = self.intt(evals)
        return coeffs * powers(FieldElement(offset).inverse(), self.n)

    # --- Internal ---

    def _pad(self, values: FF) -> FF:
        if len(values) > self.n:
            raise ValueError(f"Input of length {len(values)} exceeds domain size {self.n}")
        if len(values) == self.n:
            return values
        out = FF.Zeros(self.n)
        out[:len(values)] = values
        return out


# --- Helpers ---

def _log2(size: int) -> int:
    """Compute log2 of size (must be power of 2)."""
    assert size != 0
    res = 0
    while size != 1:
        size >>= 1
        res += 1
    return res
