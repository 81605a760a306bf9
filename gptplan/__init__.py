"""GPT partition layout planner and image writer.

Main Functions:
    - load_description(): Parse a partition description file
    - plan_layout(): Compute sector ranges and the image size
    - materialize_plan(): Write the plan to an image file or block device

Data Models:
    - PartitionSpec: One description record
    - ResolvedPartition: One planned partition entry
    - Plan: The complete, immutable layout
"""

from .__version__ import __version__
from .domain.models import PartitionSpec, Plan, ResolvedPartition
from .storage.description import load_description, parse_description
from .storage.image import materialize_plan
from .storage.planner import plan_layout

__all__ = [
    "__version__",
    "load_description",
    "materialize_plan",
    "parse_description",
    "plan_layout",
    "PartitionSpec",
    "Plan",
    "ResolvedPartition",
]
