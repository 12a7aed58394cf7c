"""Helpers for the metric command."""

from __future__ import annotations

from datetime import timedelta
from typing import Mapping


def avg_latency(histogram: Mapping[timedelta, int]) -> timedelta:
    """Return the mean latency of a cumulative latency histogram.

    Each entry maps an upper latency bound to the number of requests
    that completed within it, so counts grow with the bound.
    """
    latencies = sorted(histogram)
    if not latencies:
        return timedelta(0)

    total = histogram[latencies[-1]]
    if total == 0:
        return timedelta(0)

    avg_us = 0.0
    seen = 0
    for latency in latencies:
        count = histogram[latency]
        micros = latency / timedelta(microseconds=1)
        avg_us += micros * ((count - seen) / total)
        seen = count
    return timedelta(microseconds=avg_us)