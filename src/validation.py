"""Consistency checks for family tree data."""

import logging

import networkx as nx

from graph import build_graph
from models import FamilyTree
from parsing import calculate_age, parse_date_string

logger = logging.getLogger(__name__)

MIN_PARENT_AGE = 12


def _check_references(tree: FamilyTree) -> list[str]:
    """Broken references and missing back-references."""
    warnings: list[str] = []

    for person in tree.nodes.values():
        for role, parent_id in (("father", person.father_id), ("mother", person.mother_id)):
            if not parent_id:
                continue
            parent = tree.lookup(parent_id)
            if parent is None:
                warnings.append(f"Broken reference: {person.name} lists missing {role} {parent_id}")
            elif person.id not in parent.child_ids:
                warnings.append(f"Missing back-reference: {parent.name} does not list child {person.name}")

        for spouse_id in person.spouse_ids:
            spouse = tree.lookup(spouse_id)
            if spouse is None:
                warnings.append(f"Broken reference: {person.name} lists missing spouse {spouse_id}")
            elif person.id not in spouse.spouse_ids:
                warnings.append(f"One-sided marriage: {spouse.name} does not list spouse {person.name}")

        for child_id in person.child_ids:
            child = tree.lookup(child_id)
            if child is None:
                warnings.append(f"Broken reference: {person.name} lists missing child {child_id}")
            elif person.id not in (child.father_id, child.mother_id):
                warnings.append(f"Missing back-reference: {child.name} does not list parent {person.name}")

    return warnings


def validate_tree(tree: FamilyTree) -> list[str]:
    """
    Validate a family tree for:
    - Broken and one-sided references
    - Cycles in parent-child relationships
    - Impossible ages (child born before parent, parent under 12)
    - Death recorded before birth, or a death date that cannot be read

    Returns a list of warning messages. The tree is not modified.
    """
    warnings = _check_references(tree)
    G = build_graph(tree.nodes.values())

    # Create a subgraph with only PARENT_OF edges for cycle detection
    parent_edges = [(u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "PARENT_OF"]
    parent_graph = nx.DiGraph(parent_edges)

    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        cycle_names = [tree.name_of(edge[0]) for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_names}")
    except nx.NetworkXNoCycle:
        pass

    for parent, child, data in G.edges(data=True):
        if data.get("relationship_type") != "PARENT_OF":
            continue

        parent_birth = parse_date_string(G.nodes[parent].get("birth_date"))
        child_birth = parse_date_string(G.nodes[child].get("birth_date"))
        if not (parent_birth and child_birth):
            continue

        parent_name = G.nodes[parent].get("person_name")
        child_name = G.nodes[child].get("person_name")

        # ISO dates compare as strings
        if child_birth < parent_birth:
            warnings.append(f"Impossible: {child_name} born before parent {parent_name}")
        elif int(child_birth[:4]) - int(parent_birth[:4]) < MIN_PARENT_AGE:
            warnings.append(
                f"Suspicious: {parent_name} was less than {MIN_PARENT_AGE} years old when {child_name} was born"
            )

    for person in tree.nodes.values():
        if not person.death_date:
            continue
        age = calculate_age(person.birth_date, person.death_date)
        if age is None or not age.error:
            continue
        if "before birth" in age.error:
            warnings.append(f"Impossible: {person.name} died before being born ({age.display})")
        else:
            warnings.append(f"Unreadable: {person.name} has death date {person.death_date!r}")

    logger.debug("Validated %d people: %d warnings", len(tree.nodes), len(warnings))
    return warnings
