"""Conditional show/hide evaluation for fields and sections."""

from .dependencies import check_conditional_cycles, dependency_graph, visibility_order
from .evaluator import Visibility, as_number, compute_visibility, evaluate, values_equal

__all__ = [
    "Visibility",
    "compute_visibility",
    "evaluate",
    "values_equal",
    "as_number",
    "dependency_graph",
    "visibility_order",
    "check_conditional_cycles",
]
