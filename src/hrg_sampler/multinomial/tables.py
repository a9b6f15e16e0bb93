"""
Multinomial table builder.

For every quantum-number group the builder computes the group's total
mean count and the normalized probability that a unit of the group's
charge is carried by each member species. Sampling a group then reduces
to one count draw plus one multinomial split of that count.

Excluded-volume corrections can push densities negative (or to NaN) at
extreme conditions. Such contributions are clamped to zero before
normalizing and reported through a RuntimeWarning.
"""

import warnings
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from hrg_sampler.multinomial.grouping import QuantumNumberGroup


def sanitize_means(
    means: Sequence[float],
    names: Optional[Sequence[str]] = None,
    context: str = "",
) -> Tuple[NDArray[np.floating], Tuple[int, ...]]:
    """
    Clamp negative or NaN mean counts to zero.

    Args:
        means: Mean counts.
        names: Optional labels for the warning message.
        context: Where the means come from (for the warning message).

    Returns:
        (clamped copy, positions that were clamped)
    """
    values = np.array(means, dtype=float)
    # +inf is not a usable mean either
    bad = ~np.isfinite(values) | (values < 0)
    clamped = tuple(int(i) for i in np.flatnonzero(bad))

    if clamped:
        labels = [names[i] for i in clamped] if names is not None else list(clamped)
        where = f" in {context}" if context else ""
        warnings.warn(
            f"Clamped {len(clamped)} negative/NaN mean count(s){where} to zero: {labels}",
            RuntimeWarning,
            stacklevel=2,
        )
        values[bad] = 0.0

    return values, clamped


@dataclass(frozen=True)
class MultinomialTable:
    """
    Normalized species distribution within one group.

    Attributes:
        name: Group name.
        indices: Species indices of the members.
        probabilities: Probability of each member (sums to 1 unless empty).
        mean: Aggregate mean count of the group.
        clamped: Species indices whose contribution was clamped to zero.
    """
    name: str
    indices: NDArray[np.int64]
    probabilities: NDArray[np.floating]
    mean: float
    clamped: Tuple[int, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True if the group can never produce a particle."""
        return self.mean <= 0.0

    def split(self, count: int, rng: np.random.Generator) -> NDArray[np.int64]:
        """
        Split `count` particles among the members with one multinomial draw.

        An empty table always yields zeros.
        """
        if count <= 0 or self.is_empty:
            return np.zeros(len(self.indices), dtype=np.int64)
        return rng.multinomial(count, self.probabilities).astype(np.int64)

    def distribute(self, count: int, totals: NDArray[np.int64], rng: np.random.Generator) -> None:
        """Add a multinomial split of `count` to `totals` in place."""
        if count <= 0 or self.is_empty:
            return
        totals[self.indices] += self.split(count, rng)


def build_table(group: QuantumNumberGroup, names: Optional[Sequence[str]] = None) -> MultinomialTable:
    """
    Build the multinomial table of one group.

    Args:
        group: Group with (mean count, species index) members.
        names: Optional species names indexed like the full species list,
               used in clamping diagnostics.

    Returns:
        MultinomialTable. If the clamped total is zero the table is empty
        and its probabilities are all zero.
    """
    indices = group.indices
    member_names = [names[i] for i in indices] if names is not None else None
    weights, clamped_positions = sanitize_means(group.weights, member_names, context=group.name)
    clamped = tuple(int(indices[p]) for p in clamped_positions)

    mean = float(np.sum(weights))
    if mean > 0.0:
        probabilities = weights / mean
    else:
        probabilities = np.zeros_like(weights)

    return MultinomialTable(
        name=group.name,
        indices=indices,
        probabilities=probabilities,
        mean=mean,
        clamped=clamped,
    )


def build_tables(
    groups: Dict[str, QuantumNumberGroup],
    names: Optional[Sequence[str]] = None,
    verbose: bool = False,
) -> Dict[str, MultinomialTable]:
    """
    Build the tables of all groups.

    Args:
        groups: Output of group_species().
        names: Optional species names for diagnostics.
        verbose: Print one line per group.
    """
    tables = {name: build_table(group, names) for name, group in groups.items()}

    if verbose:
        print("=== Multinomial tables ===")
        for name, table in tables.items():
            status = "empty" if table.is_empty else f"mean = {table.mean:.4f}"
            print(f"  {name:20s} {len(table.indices):3d} species, {status}")

    return tables
