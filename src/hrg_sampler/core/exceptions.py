"""
Exceptions raised by the HRG multiplicity sampler.
"""


class ConfigurationError(ValueError):
    """
    Raised when a configuration cannot be sampled.

    Typical causes: a non-zero conserved target with no species carrying
    that charge, a target that is not a multiple of the carriers' charges,
    or an invalid canonical sub-volume.
    """


class NonConvergentSamplingError(RuntimeError):
    """
    Raised when a canonical rejection loop exceeds its trial budget.

    Attributes:
        ensemble: Name of the ensemble that failed.
        trials: Number of trials spent before giving up.
    """

    def __init__(self, ensemble: str, trials: int):
        self.ensemble = ensemble
        self.trials = trials
        super().__init__(
            f"{ensemble} sampling did not accept an event within {trials} trials"
        )
