"""
Genealogical reference numbering.

- Ahnentafel: ancestor numbering (self=1, father=2, mother=3, PGF=4, ...)
- d'Aboville: descendant numbering with dots (1, 1.1, 1.2, 1.1.1, ...)
- Henry: compact descendant numbering without dots (1, 11, 12, 111, ...)

Numbers are computed purely from the tree. Storing them on person
records goes through a caller-supplied writer callback.
"""

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
import logging
import threading

from models import FamilyTree, Person
from parsing import parse_date_string
from settings import NUMBERING_SYSTEMS

logger = logging.getLogger(__name__)

AHNENTAFEL = "ahnentafel"
DABOVILLE = "daboville"
HENRY = "henry"

# writer(person_id, system, number); clearer(person_id, system) -> had a number
NumberWriter = Callable[[str, str, int | str], None]
NumberClearer = Callable[[str, str], bool]


@dataclass(frozen=True)
class NumberingResult:
    person_id: str
    name: str
    number: int | str


@dataclass
class NumberingStats:
    system: str
    root_id: str
    root_name: str
    results: list[NumberingResult] = field(default_factory=list)

    @property
    def total_assigned(self) -> int:
        return len(self.results)

    def as_pairs(self) -> list[tuple[str, int | str]]:
        return [(r.person_id, r.number) for r in self.results]

    def number_of(self, person_id: str) -> int | str | None:
        for result in self.results:
            if result.person_id == person_id:
                return result.number
        return None


def _child_sort_key(person: Person) -> tuple:
    # Dated children first, by ISO date; undated after, by name
    iso = parse_date_string(person.birth_date)
    if iso:
        return (0, iso, person.name, person.id)
    return (1, "", person.name, person.id)


def sorted_children(tree: FamilyTree, person_id: str) -> list[str]:
    """Children of a person in birth order, falling back to name for undated children."""
    children = [tree.nodes[c] for c in tree.children(person_id)]
    return [child.id for child in sorted(children, key=_child_sort_key)]


def assign_ahnentafel(tree: FamilyTree, root_id: str | None = None) -> NumberingStats:
    """
    Number the root and all ancestors: root=1, father of n=2n, mother of n=2n+1.

    Breadth-first; if a person is reachable by more than one route (pedigree
    collapse) the first number reached is kept.

    Raises:
        PersonNotFoundError: if the root is not in the tree
    """
    root = tree.require(root_id or tree.root_id)
    stats = NumberingStats(system=AHNENTAFEL, root_id=root.id, root_name=root.name)

    visited: set[str] = set()
    queue = deque([(root.id, 1)])

    while queue:
        person_id, number = queue.popleft()
        if person_id in visited:
            continue
        visited.add(person_id)
        stats.results.append(NumberingResult(person_id, tree.name_of(person_id), number))

        father = tree.father(person_id)
        if father and father not in visited:
            queue.append((father, number * 2))
        mother = tree.mother(person_id)
        if mother and mother not in visited:
            queue.append((mother, number * 2 + 1))

    logger.info("Assigned Ahnentafel numbers to %d ancestors of %s", stats.total_assigned, root.name)
    return stats


def henry_digit(index: int) -> str:
    """
    Henry digit for a 1-based child index: 1-9, then A=10 ... Z=35.

    Letters run out after Z; from the 36th child on the index is written
    in parentheses, e.g. "(36)".
    """
    if index < 10:
        return str(index)
    if index <= 35:
        return chr(ord("A") + index - 10)
    return f"({index})"


def _assign_descendants(tree: FamilyTree, root: Person, system: str) -> NumberingStats:
    stats = NumberingStats(system=system, root_id=root.id, root_name=root.name)
    visited: set[str] = set()

    def child_number(prefix: str, index: int) -> str:
        if system == DABOVILLE:
            return f"{prefix}.{index}"
        return f"{prefix}{henry_digit(index)}"

    def assign(person_id: str, number: str) -> None:
        if person_id in visited:
            return
        visited.add(person_id)
        stats.results.append(NumberingResult(person_id, tree.name_of(person_id), number))

        for index, child_id in enumerate(sorted_children(tree, person_id), start=1):
            assign(child_id, child_number(number, index))

    assign(root.id, "1")
    return stats


def assign_daboville(tree: FamilyTree, root_id: str | None = None) -> NumberingStats:
    """
    Number the root and all descendants with dotted codes: 1, 1.1, 1.2, 1.1.1.

    Children are numbered in birth order.

    Raises:
        PersonNotFoundError: if the root is not in the tree
    """
    root = tree.require(root_id or tree.root_id)
    stats = _assign_descendants(tree, root, DABOVILLE)
    logger.info("Assigned d'Aboville numbers to %d descendants of %s", stats.total_assigned, root.name)
    return stats


def assign_henry(tree: FamilyTree, root_id: str | None = None) -> NumberingStats:
    """
    Number the root and all descendants with compact codes: 1, 11, 12, 111.

    Children past the ninth get letters (A=10, B=11, ...).

    Raises:
        PersonNotFoundError: if the root is not in the tree
    """
    root = tree.require(root_id or tree.root_id)
    stats = _assign_descendants(tree, root, HENRY)
    logger.info("Assigned Henry numbers to %d descendants of %s", stats.total_assigned, root.name)
    return stats


NUMBERING_FUNCTIONS = {
    AHNENTAFEL: assign_ahnentafel,
    DABOVILLE: assign_daboville,
    HENRY: assign_henry,
}


def assign_numbers(tree: FamilyTree, system: str, root_id: str | None = None) -> NumberingStats:
    """Dispatch to one of the numbering systems by name."""
    if system not in NUMBERING_SYSTEMS:
        raise ValueError(f"Unknown numbering system: {system}")
    return NUMBERING_FUNCTIONS[system](tree, root_id)


def write_numbers(
    stats: NumberingStats,
    writer: NumberWriter,
    cancel_event: threading.Event | None = None,
) -> int:
    """
    Store each computed number through `writer`.

    `cancel_event` is checked before every write; once set, the remaining
    results are skipped. Returns the number of results written.
    """
    written = 0
    for result in stats.results:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(
                "Writing %s numbers cancelled after %d of %d",
                stats.system,
                written,
                stats.total_assigned,
            )
            break
        writer(result.person_id, stats.system, result.number)
        written += 1
    return written


def clear_numbers(
    person_ids: list[str],
    system: str,
    clearer: NumberClearer,
    cancel_event: threading.Event | None = None,
) -> int:
    """Remove one system's numbers through `clearer`; returns how many people had one."""
    cleared = 0
    for person_id in person_ids:
        if cancel_event is not None and cancel_event.is_set():
            logger.warning("Clearing %s numbers cancelled", system)
            break
        if clearer(person_id, system):
            cleared += 1
    logger.info("Cleared %d %s numbers", cleared, system)
    return cleared


def format_numbering_result(result: NumberingResult, system: str) -> str:
    if system == AHNENTAFEL:
        return f"{result.name}: #{result.number}"
    return f"{result.name}: {result.number}"


def describe_system(system: str) -> str:
    descriptions = {
        AHNENTAFEL: "Ahnentafel (ancestor numbering: self=1, father=2, mother=3, etc.)",
        DABOVILLE: "d'Aboville (descendant numbering: 1, 1.1, 1.2, 1.1.1, etc.)",
        HENRY: "Henry (compact descendant: 1, 11, 12, 111, etc.)",
    }
    return descriptions[system]
