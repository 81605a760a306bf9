"""Plain-text rendering of a Plan."""

from __future__ import annotations

from gptplan.domain.models import Plan, ResolvedPartition

from .sizes import human_size

REPORT_FIELDS = (
    "index",
    "start",
    "end",
    "name",
    "sizeKB",
    "align",
    "type",
    "format",
    "file",
)


def format_report_line(partition: ResolvedPartition) -> str:
    return ",".join(
        str(value)
        for value in (
            partition.index,
            partition.start_sector,
            partition.end_sector,
            partition.name,
            partition.size_kb,
            partition.align_kb,
            partition.type,
            partition.format,
            partition.file_path,
        )
    )


def format_report(plan: Plan) -> list[str]:
    """One ``index,start,end,name,sizeKB,align,type,format,file`` line per entry."""
    return [format_report_line(partition) for partition in plan.partitions]


def format_summary(plan: Plan) -> str:
    summary = (
        f"{len(plan.partitions)} partitions, "
        f"{plan.total_size_kb}K ({human_size(plan.total_bytes)}), "
        f"{plan.total_sectors} sectors"
    )
    if plan.warnings:
        summary += f", {len(plan.warnings)} warning(s)"
    return summary
