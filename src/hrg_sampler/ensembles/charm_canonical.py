"""
Charm-canonical sampler.

Only net charm is fixed event by event, through the aggregate charm and
anticharm groups (charm mesons and charm baryons together). Doubly
charmed hadrons are free Poisson species and enter the residual.
"""

from hrg_sampler.core.configuration import Ensemble
from hrg_sampler.ensembles.canonical import CascadeSampler
from hrg_sampler.multinomial.grouping import CCE_PAIRS


class CharmCanonicalSampler(CascadeSampler):
    """Exact C conservation."""

    ensemble = Ensemble.CCE
    pairs = CCE_PAIRS
