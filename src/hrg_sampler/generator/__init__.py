"""
Event generator layer.

- EventGeneratorBase: configuration, table preparation and ensemble dispatch
- RawEvent: sampled multiplicities of one event
"""

from hrg_sampler.generator.event_generator import EventGeneratorBase, RawEvent

__all__ = [
    "EventGeneratorBase",
    "RawEvent",
]
