from __future__ import annotations

from .merge import dedupe_records, filter_records, merge_and_rank, rank_records

__all__ = ["dedupe_records", "filter_records", "merge_and_rank", "rank_records"]
