"""
Multinomial machinery of the canonical samplers.

- grouping: quantum-number groups and group pairs
- tables: normalized per-group species distributions
- pair_statistics: group/antigroup counts with a fixed difference
"""

from hrg_sampler.multinomial.grouping import (
    QuantumNumberGroup,
    GroupPair,
    classify_species,
    group_species,
    ALL_GROUPS,
    EXCLUSIVE_GROUPS,
    AGGREGATE_GROUPS,
    CE_PAIRS,
    SCE_PAIRS,
    CCE_PAIRS,
)
from hrg_sampler.multinomial.tables import (
    MultinomialTable,
    build_table,
    build_tables,
    sanitize_means,
)
from hrg_sampler.multinomial.pair_statistics import FixedDifferencePair, log_poisson_pmf

__all__ = [
    # Grouping
    "QuantumNumberGroup",
    "GroupPair",
    "classify_species",
    "group_species",
    "ALL_GROUPS",
    "EXCLUSIVE_GROUPS",
    "AGGREGATE_GROUPS",
    "CE_PAIRS",
    "SCE_PAIRS",
    "CCE_PAIRS",
    # Tables
    "MultinomialTable",
    "build_table",
    "build_tables",
    "sanitize_means",
    # Pair statistics
    "FixedDifferencePair",
    "log_poisson_pmf",
]
