"""Conditional dependency graph and cycle detection.

A field *depends on* every field named by its own conditional and by its
section's conditional.  The graph must be acyclic; this is checked once,
when a schema loads, never during evaluation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..core.exceptions import SchemaConfigurationError
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..schemas.form import FormSchema

logger = get_logger(__name__)


def dependency_graph(schema: FormSchema) -> dict[str, set[str]]:
    """Map each field name to the set of field names its visibility reads.

    References to names the schema does not define are dropped (they
    evaluate to False at runtime) and logged.
    """
    known = set(schema.field_names)
    graph: dict[str, set[str]] = {}

    for section in schema.sections:
        section_refs = section.conditional.referenced_fields() if section.conditional else set()
        for field in section.fields:
            refs = set(section_refs)
            if field.conditional is not None:
                refs |= field.conditional.referenced_fields()
            unknown = refs - known
            if unknown:
                logger.warning(
                    "Conditional for field '%s' in form '%s' references unknown field(s) %s; "
                    "it will stay hidden",
                    field.name, schema.id, sorted(unknown),
                )
            graph[field.name] = refs & known

    return graph


def visibility_order(schema: FormSchema) -> list[list[str]]:
    """Kahn's algorithm returning grouped dependency levels.

    Level 0 holds fields whose visibility depends on nothing; each later
    level depends only on earlier ones.

    Raises:
        SchemaConfigurationError: If the dependency graph contains a cycle
            (including a field whose conditional reads itself).
    """
    graph = dependency_graph(schema)
    in_degree: dict[str, int] = {name: len(deps) for name, deps in graph.items()}

    # Reverse adjacency: field -> fields whose visibility reads it
    dependents: dict[str, list[str]] = {name: [] for name in graph}
    for name, deps in graph.items():
        for dep in deps:
            dependents[dep].append(name)

    current_level = [name for name, deg in in_degree.items() if deg == 0]
    levels: list[list[str]] = []
    processed: set[str] = set()

    while current_level:
        levels.append(sorted(current_level))
        next_level: list[str] = []
        for name in current_level:
            processed.add(name)
            for dependent in dependents[name]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    next_level.append(dependent)
        current_level = next_level

    if len(processed) != len(graph):
        remaining = sorted(set(graph) - processed)
        raise SchemaConfigurationError(
            f"Conditional cycle detected involving fields: {remaining}",
            form_id=schema.id,
        )

    return levels


def check_conditional_cycles(schema: FormSchema) -> None:
    """Raise :class:`SchemaConfigurationError` if conditionals form a cycle."""
    visibility_order(schema)
