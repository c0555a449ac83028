"""
Relationship path search and kinship naming.

`find_path` runs a breadth-first search over father, mother, child and
spouse links; `classify_path` turns the resulting steps into a kinship
term such as "Grandparent" or "2nd Cousin twice removed".
"""

from collections import deque
from dataclasses import dataclass, field
import logging

from models import FamilyTree, Person

logger = logging.getLogger(__name__)

DIRECTION_BY_RELATIONSHIP = {
    "father": "up",
    "mother": "up",
    "child": "down",
    "spouse": "lateral",
}


@dataclass(frozen=True)
class RelationshipStep:
    person_id: str
    relationship: str  # start, father, mother, child, spouse
    direction: str  # start, up, down, lateral


@dataclass
class KinshipAnalysis:
    description: str
    common_ancestor_id: str | None
    generations_up: int
    generations_down: int
    is_direct_line: bool
    is_blood_relation: bool
    cousin_degree: int | None = None
    removal: int | None = None
    needs_review: bool = False


@dataclass
class RelationshipResult:
    person_a: Person
    person_b: Person
    path: list[RelationshipStep] = field(default_factory=list)
    description: str = "Not related"
    common_ancestor: Person | None = None
    generations_up: int = 0
    generations_down: int = 0
    is_direct_line: bool = False
    is_blood_relation: bool = False
    cousin_degree: int | None = None
    removal: int | None = None
    needs_review: bool = False

    @property
    def is_related(self) -> bool:
        return bool(self.path)

    @property
    def distance(self) -> int:
        """Number of links between the two people (0 for the same person)."""
        return max(len(self.path) - 1, 0)


# ============================================================================
# Path Finder
# ============================================================================


def find_path(tree: FamilyTree, start_id: str, target_id: str) -> list[RelationshipStep] | None:
    """
    Find a shortest chain of family links from `start_id` to `target_id`.

    Neighbours are enqueued father, mother, children, spouses, so among
    several shortest paths the same one is always returned. Returns None
    when either person is missing or no chain exists.
    """
    if start_id not in tree or target_id not in tree:
        return None

    start_path = [RelationshipStep(start_id, "start", "start")]
    visited = {start_id}
    queue = deque([(start_id, start_path)])

    while queue:
        current_id, path = queue.popleft()

        if current_id == target_id:
            return path

        for relationship, next_id in tree.relatives(current_id):
            if next_id in visited:
                continue
            visited.add(next_id)
            step = RelationshipStep(next_id, relationship, DIRECTION_BY_RELATIONSHIP[relationship])
            queue.append((next_id, [*path, step]))

    return None


# ============================================================================
# Kinship Classifier
# ============================================================================


def ordinal(n: int) -> str:
    if n == 1:
        return "1st"
    if n == 2:
        return "2nd"
    if n == 3:
        return "3rd"
    return f"{n}th"


def removal_text(removal: int) -> str:
    if removal == 1:
        return "once removed"
    if removal == 2:
        return "twice removed"
    return f"{removal} times removed"


def _greats(count: int) -> str:
    return "Great-" * max(count, 0)


def ancestor_term(generations: int) -> str:
    if generations == 1:
        return "Parent"
    if generations == 2:
        return "Grandparent"
    return _greats(generations - 2) + "Grandparent"


def descendant_term(generations: int) -> str:
    if generations == 1:
        return "Child"
    if generations == 2:
        return "Grandchild"
    return _greats(generations - 2) + "Grandchild"


def cousin_term(generations_up: int, generations_down: int) -> tuple[str, int, int]:
    """Return (term, degree, removal) for a cousin relationship."""
    degree = min(generations_up, generations_down) - 1
    removal = abs(generations_up - generations_down)
    term = f"{ordinal(degree)} Cousin"
    if removal:
        term = f"{term} {removal_text(removal)}"
    return term, degree, removal


def _affinal_term(up: int, down: int, marriage_positions: list[int], path_length: int) -> str:
    """
    Name a path that contains marriage links.

    Only a single marriage at either end of the path gets a specific term;
    a marriage first means a relative of one's spouse, a marriage last
    means the spouse of one's relative.
    """
    if len(marriage_positions) != 1:
        return "Related by marriage"

    position = marriage_positions[0]
    spouse_first = position == 1
    spouse_last = position == path_length - 1

    if (up, down) == (1, 1) and (spouse_first or spouse_last):
        return "Sibling-in-law"
    if (up, down) == (1, 0):
        if spouse_first:
            return "Parent-in-law"
        if spouse_last:
            return "Step-parent"
    if (up, down) == (0, 1):
        if spouse_last:
            return "Child-in-law"
        if spouse_first:
            return "Step-child"
    return "Related by marriage"


def classify_path(path: list[RelationshipStep]) -> KinshipAnalysis:
    """
    Interpret a path from `find_path` as a kinship term.

    Rules are applied in precedence order: spouse, direct ancestor, direct
    descendant, sibling, niece/nephew and aunt/uncle, cousin, grand
    aunt/uncle and grand niece/nephew, then marriage terms. A blood path
    that climbs again after descending fits none of these and gets a
    generic description flagged for review.
    """
    up = 0
    down = 0
    marriage_positions: list[int] = []
    turn_index = -1
    # Down then up again (e.g. the other parent of one's child) is not descent
    climbs_after_descent = False

    for i, step in enumerate(path[1:], start=1):
        if step.direction == "up":
            up += 1
            turn_index = i
            climbs_after_descent = climbs_after_descent or down > 0
        elif step.direction == "down":
            down += 1
        elif step.direction == "lateral":
            marriage_positions.append(i)

    married = bool(marriage_positions)

    # A one-directional path has its common ancestor at the far end
    if turn_index == -1 or down == 0:
        turn_index = len(path) - 1
    common_ancestor_id = path[turn_index].person_id if (up or down) else None

    analysis = KinshipAnalysis(
        description="",
        common_ancestor_id=common_ancestor_id,
        generations_up=up,
        generations_down=down,
        is_direct_line=up == 0 or down == 0,
        is_blood_relation=not married or up > 0 or down > 0,
    )

    if up == 0 and down == 0 and len(marriage_positions) == 1:
        analysis.description = "Spouse"
    elif climbs_after_descent and not married:
        analysis.description = f"Related ({up} gen. up, {down} gen. down)"
        analysis.needs_review = True
    elif up > 0 and down == 0 and not married:
        analysis.description = ancestor_term(up)
    elif up == 0 and down > 0 and not married:
        analysis.description = descendant_term(down)
    elif not married and (up, down) == (1, 1):
        analysis.description = "Sibling"
    elif not married and (up, down) == (1, 2):
        analysis.description = "Niece/Nephew"
    elif not married and (up, down) == (2, 1):
        analysis.description = "Aunt/Uncle"
    elif not married and up > 1 and down > 1:
        term, degree, removal = cousin_term(up, down)
        analysis.description = term
        analysis.cousin_degree = degree
        analysis.removal = removal
    elif not married and up > 2 and down == 1:
        analysis.description = f"{_greats(up - 2)}Grand Aunt/Uncle"
    elif not married and up == 1 and down > 2:
        analysis.description = f"{_greats(down - 2)}Grand Niece/Nephew"
    else:
        analysis.description = _affinal_term(up, down, marriage_positions, len(path))

    return analysis


# ============================================================================
# Entry point
# ============================================================================


def calculate_relationship(tree: FamilyTree, person_a_id: str, person_b_id: str) -> RelationshipResult | None:
    """
    Calculate how `person_b_id` is related to `person_a_id`.

    Returns None if either person is missing from the tree, and a
    "Not related" result if they are not connected.
    """
    person_a = tree.lookup(person_a_id)
    person_b = tree.lookup(person_b_id)

    if person_a is None or person_b is None:
        logger.warning(
            "Person not found: %s (found=%s), %s (found=%s)",
            person_a_id,
            person_a is not None,
            person_b_id,
            person_b is not None,
        )
        return None

    if person_a_id == person_b_id:
        return RelationshipResult(
            person_a=person_a,
            person_b=person_b,
            path=[RelationshipStep(person_a_id, "start", "start")],
            description="Same person",
            is_direct_line=True,
            is_blood_relation=True,
        )

    path = find_path(tree, person_a_id, person_b_id)
    if not path:
        return RelationshipResult(person_a=person_a, person_b=person_b)

    analysis = classify_path(path)
    logger.debug(
        "%s -> %s: %s (%d up, %d down)",
        person_a_id,
        person_b_id,
        analysis.description,
        analysis.generations_up,
        analysis.generations_down,
    )

    return RelationshipResult(
        person_a=person_a,
        person_b=person_b,
        path=path,
        description=analysis.description,
        common_ancestor=tree.lookup(analysis.common_ancestor_id),
        generations_up=analysis.generations_up,
        generations_down=analysis.generations_down,
        is_direct_line=analysis.is_direct_line,
        is_blood_relation=analysis.is_blood_relation,
        cousin_degree=analysis.cousin_degree,
        removal=analysis.removal,
        needs_review=analysis.needs_review,
    )


def format_relationship(tree: FamilyTree, result: RelationshipResult) -> str:
    """Render a relationship result as a plain-text block."""
    lines = [
        f"Relationship: {result.person_a.name} -> {result.person_b.name}",
        f"Result: {result.description}",
        "",
    ]

    if result.generations_up or result.generations_down:
        lines.append(f"Generations: {result.generations_up} up, {result.generations_down} down")

    lines.append(f"Blood relation: {'Yes' if result.is_blood_relation else 'No'}")
    lines.append(f"Direct line: {'Yes' if result.is_direct_line else 'No'}")

    if result.common_ancestor and not result.is_direct_line:
        lines.append(f"Common ancestor: {result.common_ancestor.name}")

    if result.needs_review:
        lines.append("Note: complex relationship, description is approximate")

    if len(result.path) > 1:
        lines.append("")
        lines.append("Path:")
        for index, step in enumerate(result.path):
            if index == 0:
                lines.append(f"  {tree.name_of(step.person_id)}")
            else:
                lines.append(f"  -> {step.relationship} -> {tree.name_of(step.person_id)}")

    return "\n".join(lines)
