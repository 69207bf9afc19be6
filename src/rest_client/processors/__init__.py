"""Processadores de resultados."""

from .aggregator import (
    ResultAggregator,
    collect_bodies,
    count_results,
    decode_json_bodies,
)

__all__ = ["ResultAggregator", "collect_bodies", "count_results", "decode_json_bodies"]
