"""Domain models for GPT layout planning."""

from __future__ import annotations

from .models import Plan, PartitionSpec, ResolvedPartition


__all__ = [
    "PartitionSpec",
    "Plan",
    "ResolvedPartition",
]
