"""Generation numbering relative to a root person."""

from collections import deque
from dataclasses import dataclass, field
import logging

from models import FamilyTree, PersonNotFoundError
from settings import DIRECTION_ALIASES

logger = logging.getLogger(__name__)

ANCESTORS = "ancestors"
DESCENDANTS = "descendants"


@dataclass
class BoundaryPerson:
    person_id: str
    range_label: str
    adjacent_ranges: list[str] = field(default_factory=list)


@dataclass
class GenerationAssignment:
    """
    Signed generation per reachable person, plus partition buckets.

    `by_range` and `boundary_people` stay empty until a generation split
    fills them in.
    """

    direction: str
    generation_map: dict[str, int] = field(default_factory=dict)
    min_generation: int = 0
    max_generation: int = 0
    by_range: dict[str, list[str]] = field(default_factory=dict)
    boundary_people: dict[str, BoundaryPerson] = field(default_factory=dict)

    @property
    def bounds(self) -> tuple[int, int]:
        return (self.min_generation, self.max_generation)

    def people_at(self, generation: int) -> list[str]:
        return [pid for pid, gen in self.generation_map.items() if gen == generation]


def normalize_direction(direction: str | None) -> str:
    """Map 'up'/'down' style names onto ANCESTORS/DESCENDANTS, defaulting to ANCESTORS."""
    if isinstance(direction, str) and direction.strip().lower() in DIRECTION_ALIASES:
        return DIRECTION_ALIASES[direction.strip().lower()]
    logger.warning("Unknown generation direction %r, counting toward ancestors", direction)
    return ANCESTORS


def assign_generations(
    tree: FamilyTree, direction: str = ANCESTORS, root_id: str | None = None
) -> GenerationAssignment:
    """
    Label every reachable person with a generation offset from the root.

    Counting toward ancestors, parents are +1 and children -1; counting
    toward descendants the signs flip. Spouses share a generation. Each
    person keeps the generation of the first path that reaches them.

    Raises:
        PersonNotFoundError: if the root is not in the tree
    """
    direction = normalize_direction(direction)
    root_id = root_id or tree.root_id
    if root_id not in tree:
        raise PersonNotFoundError(root_id)

    parent_step = 1 if direction == ANCESTORS else -1
    assignment = GenerationAssignment(direction=direction)
    visited: set[str] = set()
    queue = deque([(root_id, 0)])

    while queue:
        person_id, generation = queue.popleft()
        if person_id in visited:
            continue
        visited.add(person_id)

        assignment.generation_map[person_id] = generation
        assignment.min_generation = min(assignment.min_generation, generation)
        assignment.max_generation = max(assignment.max_generation, generation)

        for parent_id in tree.parents(person_id):
            if parent_id not in visited:
                queue.append((parent_id, generation + parent_step))
        for child_id in tree.children(person_id):
            if child_id not in visited:
                queue.append((child_id, generation - parent_step))
        for spouse_id in tree.spouses(person_id):
            if spouse_id not in visited:
                queue.append((spouse_id, generation))

    logger.debug(
        "Assigned generations to %d people from %s (%s), bounds %s",
        len(assignment.generation_map),
        root_id,
        direction,
        assignment.bounds,
    )
    return assignment
