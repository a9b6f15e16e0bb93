"""
Sample Reporter for the HRG multiplicity sampler.

Collects a batch of sampled events and summarizes it: per-species mean
multiplicities against their expectations, the net value of every
conserved charge, conservation violations and the canonical acceptance
of the run. The summary renders as tabulate tables.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray
from tabulate import tabulate

from hrg_sampler.core.particle_configurations import Species, CONSERVED_CHARGES


@dataclass
class SampleSummary:
    """Statistics of a batch of sampled events."""
    ensemble: str
    n_events: int
    species_names: List[str]

    # Per-species multiplicities (weighted by the event weights)
    mean_multiplicities: NDArray[np.floating]
    std_multiplicities: NDArray[np.floating]
    expected_multiplicities: Optional[NDArray[np.floating]] = None

    # Conserved charges
    mean_net_charges: Dict[str, float] = field(default_factory=dict)
    std_net_charges: Dict[str, float] = field(default_factory=dict)
    targets: Dict[str, int] = field(default_factory=dict)
    violations: Dict[str, int] = field(default_factory=dict)

    # Weights and acceptance
    mean_weight: float = 1.0
    min_weight: float = 1.0
    accepted: int = 0
    trials: int = 0

    @property
    def acceptance_rate(self) -> float:
        return self.accepted / self.trials if self.trials > 0 else 0.0

    @property
    def conserved(self) -> bool:
        """True if no event violated an exact target."""
        return all(count == 0 for count in self.violations.values())

    def deviation_sigmas(self) -> Optional[NDArray[np.floating]]:
        """
        (mean - expected) in units of the standard error of the mean.

        Species with zero spread get 0 when the mean matches and inf
        otherwise.
        """
        if self.expected_multiplicities is None:
            return None
        error = self.std_multiplicities / np.sqrt(max(self.n_events, 1))
        diff = self.mean_multiplicities - self.expected_multiplicities
        with np.errstate(divide='ignore', invalid='ignore'):
            sigmas = np.where(error > 0, diff / error, np.where(diff == 0, 0.0, np.inf))
        return sigmas


def summarize_totals(
    species: Sequence[Species],
    totals: NDArray[np.int64],
    weights: Optional[Sequence[float]] = None,
    expected: Optional[Sequence[float]] = None,
    targets: Optional[Dict[str, int]] = None,
    ensemble: str = "",
    accepted: int = 0,
    trials: int = 0,
) -> SampleSummary:
    """
    Summarize a matrix of sampled totals.

    Args:
        species: Ordered particle species.
        totals: Array of shape (n_events, n_species).
        weights: Event weights (default: all 1).
        expected: Expected mean multiplicity per species.
        targets: Exactly conserved totals to check, e.g. {'S': 0}.
        ensemble: Ensemble label.
        accepted: Accepted canonical trials during the run.
        trials: Canonical trials during the run.

    Returns:
        SampleSummary
    """
    totals = np.atleast_2d(np.asarray(totals))
    n_events, n_species = totals.shape
    if n_species != len(species):
        raise ValueError(f"Totals have {n_species} columns but there are {len(species)} species")
    if n_events == 0:
        raise ValueError("Cannot summarize an empty batch")

    if weights is None:
        w = np.ones(n_events)
    else:
        w = np.asarray(weights, dtype=float)
        if w.shape != (n_events,):
            raise ValueError(f"Expected {n_events} weights, got shape {w.shape}")
    if np.sum(w) <= 0:
        raise ValueError("Event weights sum to zero")

    mean = np.average(totals, axis=0, weights=w)
    std = np.sqrt(np.average((totals - mean) ** 2, axis=0, weights=w))

    mean_net, std_net, violations = {}, {}, {}
    targets = dict(targets or {})
    for charge in CONSERVED_CHARGES:
        vector = np.array([s.quantum_number(charge) for s in species])
        net = totals @ vector
        mean_net[charge] = float(np.average(net, weights=w))
        std_net[charge] = float(np.sqrt(np.average((net - mean_net[charge]) ** 2, weights=w)))
        if charge in targets:
            violations[charge] = int(np.count_nonzero(net != targets[charge]))

    return SampleSummary(
        ensemble=ensemble,
        n_events=n_events,
        species_names=[s.name for s in species],
        mean_multiplicities=mean,
        std_multiplicities=std,
        expected_multiplicities=None if expected is None else np.asarray(expected, dtype=float),
        mean_net_charges=mean_net,
        std_net_charges=std_net,
        targets=targets,
        violations=violations,
        mean_weight=float(np.mean(w)),
        min_weight=float(np.min(w)),
        accepted=accepted,
        trials=trials,
    )


def summarize_events(generator, n_events: int, expected: Optional[Sequence[float]] = None) -> SampleSummary:
    """
    Sample `n_events` with a configured generator and summarize them.

    Args:
        generator: A configured EventGeneratorBase.
        n_events: Number of events to sample.
        expected: Expected means (default: the generator's mean counts,
                  which are the exact expectation only in the GCE).

    Returns:
        SampleSummary with the acceptance of this run alone.
    """
    if n_events < 1:
        raise ValueError(f"n_events must be positive, got {n_events}")

    accepted_before, total_before = generator.counters.snapshot()
    totals = np.empty((n_events, len(generator.species)), dtype=np.int64)
    weights = np.empty(n_events)
    for i in range(n_events):
        result = generator.generate_totals()
        totals[i] = result.totals
        weights[i] = result.weight
    accepted_after, total_after = generator.counters.snapshot()

    configuration = generator.configuration
    return summarize_totals(
        generator.species,
        totals,
        weights=weights,
        expected=generator.mean_counts if expected is None else expected,
        targets=configuration.exact_targets,
        ensemble=configuration.ensemble.value,
        accepted=accepted_after - accepted_before,
        trials=total_after - total_before,
    )


def format_summary(summary: SampleSummary, tablefmt: str = 'grid') -> str:
    """
    Render a summary as text tables.

    Args:
        summary: Output of summarize_events() or summarize_totals().
        tablefmt: tabulate table format.
    """
    lines = []
    title = f"{summary.ensemble} SAMPLE SUMMARY" if summary.ensemble else "SAMPLE SUMMARY"
    lines.append("=" * 80)
    lines.append(title)
    lines.append("=" * 80)
    lines.append(f"  Events: {summary.n_events}")
    if summary.trials > 0:
        lines.append(
            f"  Acceptance: {summary.accepted}/{summary.trials} = {summary.acceptance_rate:.4f}"
        )
    lines.append(f"  Weights: mean = {summary.mean_weight:.4f}, min = {summary.min_weight:.4f}")

    sigmas = summary.deviation_sigmas()
    table_data = []
    for i, name in enumerate(summary.species_names):
        row = [name, f"{summary.mean_multiplicities[i]:.4f}", f"{summary.std_multiplicities[i]:.4f}"]
        if summary.expected_multiplicities is not None:
            row.append(f"{summary.expected_multiplicities[i]:.4f}")
            row.append(f"{sigmas[i]:+.2f}")
        table_data.append(row)
    headers = ['Species', 'Mean', 'Std']
    if summary.expected_multiplicities is not None:
        headers += ['Expected', 'Deviation (σ)']
    lines.append("")
    lines.append(tabulate(table_data, headers=headers, tablefmt=tablefmt))

    table_data = []
    for charge in CONSERVED_CHARGES:
        target = summary.targets.get(charge)
        table_data.append([
            charge,
            f"{summary.mean_net_charges[charge]:.4f}",
            f"{summary.std_net_charges[charge]:.4f}",
            "-" if target is None else target,
            "-" if target is None else summary.violations[charge],
        ])
    headers = ['Charge', 'Mean net', 'Std net', 'Exact target', 'Violations']
    lines.append("")
    lines.append(tabulate(table_data, headers=headers, tablefmt=tablefmt))

    return "\n".join(lines)
