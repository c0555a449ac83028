"""
Lineage tracking: tag every descendant of a progenitor with a lineage name.

A lineage follows all descent, father-to-child descent only (patrilineal)
or mother-to-child descent only (matrilineal). A person may belong to
several lineages; the current lineages of each person are passed in as a
plain mapping and the updated lists are handed to a writer callback.
"""

from collections import deque
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
import logging

from models import FamilyTree, Person

logger = logging.getLogger(__name__)

LINEAGE_TYPES = ("all", "patrilineal", "matrilineal")

# writer(person_id, lineages); an empty list means "remove the field"
LineageWriter = Callable[[str, list[str]], None]


@dataclass
class LineageAssignment:
    person_id: str
    name: str
    lineages: list[str]
    generation: int
    path_from_root: list[str] = field(default_factory=list)


@dataclass
class LineageStats:
    lineage_name: str
    root_id: str
    root_name: str
    lineage_type: str
    assignments: list[LineageAssignment] = field(default_factory=list)

    @property
    def total_members(self) -> int:
        return len(self.assignments)

    @property
    def max_generation(self) -> int:
        return max((a.generation for a in self.assignments), default=0)


def assign_lineage(
    tree: FamilyTree,
    lineage_name: str,
    root_id: str | None = None,
    lineage_type: str = "all",
    current_lineages: Mapping[str, list[str]] | None = None,
) -> LineageStats:
    """
    Tag the progenitor and their descendants with `lineage_name`.

    Children are visited breadth-first in declaration order. For the
    patrilineal type a child is followed only from its father, for the
    matrilineal type only from its mother. Lineages already on a person
    (from `current_lineages`) are kept and the new name appended once.

    Raises:
        PersonNotFoundError: if the root is not in the tree
        ValueError: for an unknown lineage type
    """
    if lineage_type not in LINEAGE_TYPES:
        raise ValueError(f"Unknown lineage type: {lineage_type}")
    root = tree.require(root_id or tree.root_id)
    current_lineages = current_lineages or {}

    stats = LineageStats(lineage_name, root.id, root.name, lineage_type)
    visited: set[str] = set()
    queue = deque([(root.id, 0, [root.name])])

    while queue:
        person_id, generation, path = queue.popleft()
        if person_id in visited:
            continue
        visited.add(person_id)

        lineages = list(current_lineages.get(person_id, []))
        if lineage_name not in lineages:
            lineages.append(lineage_name)
        stats.assignments.append(LineageAssignment(person_id, tree.name_of(person_id), lineages, generation, path))

        for child_id in tree.children(person_id):
            if child_id in visited:
                continue
            if lineage_type == "patrilineal" and tree.father(child_id) != person_id:
                continue
            if lineage_type == "matrilineal" and tree.mother(child_id) != person_id:
                continue
            queue.append((child_id, generation + 1, [*path, tree.name_of(child_id)]))

    logger.info(
        "Assigned lineage %r to %d descendants of %s",
        lineage_name,
        stats.total_members,
        root.name,
    )
    return stats


def write_lineages(stats: LineageStats, writer: LineageWriter) -> int:
    for assignment in stats.assignments:
        writer(assignment.person_id, assignment.lineages)
    return stats.total_members


def remove_lineage(current_lineages: Mapping[str, list[str]], lineage_name: str, writer: LineageWriter) -> int:
    """Drop `lineage_name` from everyone who has it; returns how many people changed."""
    removed = 0
    for person_id, lineages in current_lineages.items():
        if lineage_name in lineages:
            writer(person_id, [name for name in lineages if name != lineage_name])
            removed += 1
    logger.info("Removed lineage %r from %d people", lineage_name, removed)
    return removed


def all_lineages(current_lineages: Mapping[str, list[str]]) -> list[str]:
    return sorted({name for lineages in current_lineages.values() for name in lineages})


def people_in_lineage(current_lineages: Mapping[str, list[str]], lineage_name: str) -> list[str]:
    return [pid for pid, lineages in current_lineages.items() if lineage_name in lineages]


def find_common_lineages(current_lineages: Mapping[str, list[str]], person_a_id: str, person_b_id: str) -> list[str]:
    other = current_lineages.get(person_b_id, [])
    return [name for name in current_lineages.get(person_a_id, []) if name in other]


def suggest_lineage_name(person: Person) -> str:
    """Suggest "<Surname> Line", using the last word of the name when no surname is recorded."""
    if person.surname:
        return f"{person.surname} Line"
    parts = person.name.split()
    if len(parts) > 1:
        return f"{parts[-1]} Line"
    return f"{person.name} Line"


def format_lineage_type(lineage_type: str) -> str:
    labels = {
        "all": "All descendants",
        "patrilineal": "Patrilineal (father's line)",
        "matrilineal": "Matrilineal (mother's line)",
    }
    return labels[lineage_type]


def describe_lineage_type(lineage_type: str) -> str:
    descriptions = {
        "all": "Includes all descendants regardless of parent gender",
        "patrilineal": "Follows father-to-child descent only (traditional surname inheritance)",
        "matrilineal": "Follows mother-to-child descent only (mitochondrial lineage)",
    }
    return descriptions[lineage_type]
