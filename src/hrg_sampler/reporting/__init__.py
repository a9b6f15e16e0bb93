"""
Reporting for sampled event batches.

- SampleSummary: per-species means and per-charge conservation statistics
- summarize_events / summarize_totals: build a summary
- format_summary: render it as tables
"""

from hrg_sampler.reporting.sample_reporter import (
    SampleSummary,
    summarize_events,
    summarize_totals,
    format_summary,
)

__all__ = [
    "SampleSummary",
    "summarize_events",
    "summarize_totals",
    "format_summary",
]
