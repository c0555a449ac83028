"""
Splitting a family tree into smaller linked partitions.

Five strategies are supported:
- generation ranges (bands of N generations around a root)
- branches (paternal / maternal ancestral fans, descendant lines, any
  named ancestor), with recursive sub-branches
- single lineage extraction and the ancestor/descendant pair
- collections (the free-form grouping tag on each person)
- surnames (everyone carrying chosen surnames, connected or not)

Every strategy reports boundary people, i.e. members with a direct
relative in another partition, so exporters can draw links between
partitions. Each strategy has a preview that returns counts only.
"""

from collections import deque
from dataclasses import dataclass, field
import logging

import jellyfish
import networkx as nx

from generations import ANCESTORS, DESCENDANTS, BoundaryPerson, GenerationAssignment, assign_generations
from models import FamilyEdge, FamilyTree, Person, PersonNotFoundError
from settings import BranchSplitSettings, CollectionSplitSettings, GenerationSplitSettings, SurnameSplitSettings

logger = logging.getLogger(__name__)

UNCOLLECTED = "Uncollected"


@dataclass(frozen=True)
class GenerationRange:
    start: int  # inclusive
    end: int  # inclusive
    label: str

    def contains(self, generation: int) -> bool:
        return self.start <= generation <= self.end


@dataclass
class Partition:
    """One bucket of people produced by a split."""

    label: str
    kind: str  # generation, branch, lineage, ancestors, descendants, collection
    person_ids: list[str] = field(default_factory=list)
    # person id -> adjacent partition labels or crossing relation types
    boundary: dict[str, list[str]] = field(default_factory=dict)
    generation_range: tuple[int, int] | None = None
    # members of other partitions shown alongside this one
    guest_ids: list[str] = field(default_factory=list)

    @property
    def person_count(self) -> int:
        return len(self.person_ids)

    def as_tuple(self) -> tuple[str, int, frozenset[str]]:
        return (self.label, self.person_count, frozenset(self.person_ids))


@dataclass
class SplitResult:
    partitions: list[Partition] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total_people(self) -> int:
        """Distinct people across all partitions."""
        return len({pid for p in self.partitions for pid in p.person_ids})

    def get(self, label: str) -> Partition | None:
        for partition in self.partitions:
            if partition.label == label:
                return partition
        return None


def _crossing_relations(tree: FamilyTree, person_id: str, members: set[str]) -> list[str]:
    """Relation types linking a member to someone outside `members`."""
    crossing = []
    father = tree.father(person_id)
    if father and father not in members:
        crossing.append("paternal")
    mother = tree.mother(person_id)
    if mother and mother not in members:
        crossing.append("maternal")
    if any(c not in members for c in tree.children(person_id)):
        crossing.append("descendants")
    if any(s not in members for s in tree.spouses(person_id)):
        crossing.append("spouse-family")
    return crossing


def find_crossing_people(tree: FamilyTree, person_ids: list[str]) -> dict[str, list[str]]:
    """Map each member with a parent, child or spouse outside the set to the crossing relation types."""
    members = set(person_ids)
    boundary = {}
    for pid in person_ids:
        crossing = _crossing_relations(tree, pid, members)
        if crossing:
            boundary[pid] = crossing
    return boundary


# ============================================================================
# Generation ranges
# ============================================================================


@dataclass
class GenerationSplitPreview:
    ranges: list[GenerationRange]
    people_counts: dict[str, int]
    boundary_count: int
    total_people: int


def format_generation_label(start: int, end: int, side: str) -> str:
    """Human-readable label for a range on the ancestor or descendant side of the root."""
    if start == 0 and end == 0:
        return "Root"

    low, high = sorted((abs(start), abs(end)))
    noun = "Ancestors" if side == ANCESTORS else "Descendants"

    if low == high:
        return f"{noun} gen {low}"
    if low == 0:
        return f"Root to {noun.lower()} gen {high}"
    return f"{noun} gen {low}-{high}"


def create_generation_ranges(
    bounds: tuple[int, int], generations_per_partition: int, direction: str = ANCESTORS
) -> list[GenerationRange]:
    """
    Cut [min, max] into contiguous bands of `generations_per_partition`.

    Bands are anchored at the root: 0..N-1, N..2N-1 and so on upward, and
    -1..-N, -N-1..-2N downward. Returned in ascending generation order.
    """
    min_gen, max_gen = bounds
    width = max(int(generations_per_partition), 1)
    forward_side = direction
    backward_side = DESCENDANTS if direction == ANCESTORS else ANCESTORS

    ranges: list[GenerationRange] = []
    for start in range(0, max_gen + 1, width):
        end = min(start + width - 1, max_gen)
        ranges.append(GenerationRange(start, end, format_generation_label(start, end, forward_side)))

    below: list[GenerationRange] = []
    for end in range(-1, min_gen - 1, -width):
        start = max(end - width + 1, min_gen)
        below.append(GenerationRange(start, end, format_generation_label(start, end, backward_side)))

    return list(reversed(below)) + ranges


def _range_for(generation: int, ranges: list[GenerationRange]) -> GenerationRange | None:
    for generation_range in ranges:
        if generation_range.contains(generation):
            return generation_range
    return None


def assign_people_to_ranges(assignment: GenerationAssignment, ranges: list[GenerationRange]) -> None:
    """Fill `assignment.by_range` with the people of each range, in traversal order."""
    assignment.by_range = {r.label: [] for r in ranges}
    for person_id, generation in assignment.generation_map.items():
        generation_range = _range_for(generation, ranges)
        if generation_range is not None:
            assignment.by_range[generation_range.label].append(person_id)


def get_people_in_range(assignment: GenerationAssignment, generation_range: GenerationRange) -> list[str]:
    return [pid for pid, gen in assignment.generation_map.items() if generation_range.contains(gen)]


def find_boundary_people(
    tree: FamilyTree, assignment: GenerationAssignment, ranges: list[GenerationRange]
) -> dict[str, BoundaryPerson]:
    """
    Find people on the first or last generation of their range who have a
    parent or child in a different range.
    """
    boundary: dict[str, BoundaryPerson] = {}

    for person_id, generation in assignment.generation_map.items():
        own_range = _range_for(generation, ranges)
        if own_range is None or generation not in (own_range.start, own_range.end):
            continue

        adjacent: list[str] = []
        for relative_id in tree.parents(person_id) + tree.children(person_id):
            relative_gen = assignment.generation_map.get(relative_id)
            if relative_gen is None:
                continue
            other = _range_for(relative_gen, ranges)
            if other is not None and other.label != own_range.label and other.label not in adjacent:
                adjacent.append(other.label)

        if adjacent:
            order = {r.label: i for i, r in enumerate(ranges)}
            adjacent.sort(key=order.__getitem__)
            boundary[person_id] = BoundaryPerson(person_id, own_range.label, adjacent)

    return boundary


def get_crossing_edges(
    tree: FamilyTree,
    assignment: GenerationAssignment,
    range_a: GenerationRange,
    range_b: GenerationRange,
) -> list[FamilyEdge]:
    """Edges with one endpoint in each of two ranges."""
    crossing = []
    for edge in tree.edges:
        from_gen = assignment.generation_map.get(edge.from_id)
        to_gen = assignment.generation_map.get(edge.to_id)
        if from_gen is None or to_gen is None:
            continue
        if (range_a.contains(from_gen) and range_b.contains(to_gen)) or (
            range_b.contains(from_gen) and range_a.contains(to_gen)
        ):
            crossing.append(edge)
    return crossing


def _generation_ranges_for(
    tree: FamilyTree,
    options: GenerationSplitSettings | None,
    custom_ranges: list[GenerationRange] | None,
    root_id: str | None,
) -> tuple[GenerationAssignment, list[GenerationRange]]:
    options = options or GenerationSplitSettings()
    assignment = assign_generations(tree, options.direction, root_id)
    ranges = custom_ranges or create_generation_ranges(
        assignment.bounds, options.generations_per_partition, options.direction
    )
    return assignment, sorted(ranges, key=lambda r: r.start)


def split_by_generation(
    tree: FamilyTree,
    options: GenerationSplitSettings | None = None,
    custom_ranges: list[GenerationRange] | None = None,
    root_id: str | None = None,
) -> tuple[SplitResult, GenerationAssignment]:
    """
    Split a tree into bands of generations.

    Returns the split and the filled-in GenerationAssignment. Ranges with
    nobody in them produce no partition.
    """
    assignment, ranges = _generation_ranges_for(tree, options, custom_ranges, root_id)
    assign_people_to_ranges(assignment, ranges)
    assignment.boundary_people = find_boundary_people(tree, assignment, ranges)

    result = SplitResult()
    for generation_range in ranges:
        people = assignment.by_range.get(generation_range.label, [])
        if not people:
            continue
        boundary = {
            pid: bp.adjacent_ranges
            for pid, bp in assignment.boundary_people.items()
            if bp.range_label == generation_range.label
        }
        result.partitions.append(
            Partition(
                label=generation_range.label,
                kind="generation",
                person_ids=people,
                boundary=boundary,
                generation_range=(generation_range.start, generation_range.end),
            )
        )

    unplaced = len(assignment.generation_map) - result.total_people
    if unplaced:
        result.warnings.append(f"{unplaced} people fall outside every generation range")

    logger.info(
        "Generation split: %d partitions, %d people, %d boundary people",
        len(result.partitions),
        result.total_people,
        len(assignment.boundary_people),
    )
    return result, assignment


def preview_generation_split(
    tree: FamilyTree,
    options: GenerationSplitSettings | None = None,
    custom_ranges: list[GenerationRange] | None = None,
    root_id: str | None = None,
) -> GenerationSplitPreview:
    assignment, ranges = _generation_ranges_for(tree, options, custom_ranges, root_id)

    people_counts = {r.label: len(get_people_in_range(assignment, r)) for r in ranges}
    boundary = find_boundary_people(tree, assignment, ranges)

    return GenerationSplitPreview(
        ranges=ranges,
        people_counts=people_counts,
        boundary_count=len(boundary),
        total_people=sum(people_counts.values()),
    )


# ============================================================================
# Branches
# ============================================================================


@dataclass(frozen=True)
class BranchDefinition:
    kind: str  # paternal, maternal, descendant, ancestor
    anchor_id: str
    label: str
    # chosen child for a descendant branch, named ancestor for an ancestor branch
    start_id: str | None = None


@dataclass
class BranchSplitPreview:
    branches: list[tuple[str, int, int]]  # (label, people, boundary people)
    total_people: int
    overlap_count: int
    warnings: list[str]


def build_branch_definitions(anchor_id: str, options: BranchSplitSettings | None = None) -> list[BranchDefinition]:
    options = options or BranchSplitSettings()
    branches = []
    if options.include_paternal:
        branches.append(BranchDefinition("paternal", anchor_id, "paternal"))
    if options.include_maternal:
        branches.append(BranchDefinition("maternal", anchor_id, "maternal"))
    if options.include_descendants:
        branches.append(BranchDefinition("descendant", anchor_id, "descendants"))
    return branches


def _branch_starts(tree: FamilyTree, branch: BranchDefinition) -> list[str]:
    if branch.kind == "paternal":
        father = tree.father(branch.anchor_id)
        return [father] if father else []
    if branch.kind == "maternal":
        mother = tree.mother(branch.anchor_id)
        return [mother] if mother else []
    if branch.kind == "descendant":
        if branch.start_id is not None:
            return [branch.start_id] if branch.start_id in tree else []
        return tree.children(branch.anchor_id)
    if branch.kind == "ancestor":
        return [branch.start_id] if branch.start_id in tree else []
    return []


def collect_branch(
    tree: FamilyTree,
    start_ids: list[str],
    upward: bool,
    max_generations: int | None = None,
    include_spouses: bool = False,
) -> tuple[list[str], int]:
    """
    Breadth-first walk from `start_ids` (generation 1) through both parents
    of every person (upward) or all children (downward).

    Returns the collected ids in visiting order and the deepest generation
    reached. Spouses, when included, are added without following their own
    relatives.
    """
    collected: list[str] = []
    visited: set[str] = set()
    deepest = 0
    queue = deque((sid, 1) for sid in start_ids)

    while queue:
        person_id, generation = queue.popleft()
        if person_id in visited:
            continue
        visited.add(person_id)
        collected.append(person_id)
        deepest = max(deepest, generation)

        if max_generations is not None and generation >= max_generations:
            continue
        next_ids = tree.parents(person_id) if upward else tree.children(person_id)
        queue.extend((nid, generation + 1) for nid in next_ids if nid not in visited)

    if include_spouses:
        for person_id in list(collected):
            for spouse_id in tree.spouses(person_id):
                if spouse_id not in visited:
                    visited.add(spouse_id)
                    collected.append(spouse_id)

    return collected, deepest


def _sub_branches(
    tree: FamilyTree, branch: BranchDefinition, start_id: str, depth: int, cap: int | None, warnings: list[str]
) -> list[tuple[BranchDefinition, int | None]]:
    """One paternal and one maternal sub-branch above the branch's start person."""
    if depth <= 0 or (cap is not None and cap <= 1):
        return []

    sub_cap = cap - 1 if cap is not None else None
    subs = []
    for kind in ("paternal", "maternal"):
        sub = BranchDefinition(kind, start_id, f"{branch.label}-{kind}")
        if _branch_starts(tree, sub):
            subs.append((sub, sub_cap))
            subs.extend(_sub_branches(tree, sub, _branch_starts(tree, sub)[0], depth - 1, sub_cap, warnings))
        else:
            warnings.append(f"Sub-branch {sub.label} skipped: no {kind} parent recorded for {tree.name_of(start_id)}")
    return subs


def split_by_branch(
    tree: FamilyTree,
    anchor_id: str,
    options: BranchSplitSettings | None = None,
    branches: list[BranchDefinition] | None = None,
) -> SplitResult:
    """
    Split the family around `anchor_id` into branches.

    Paternal and maternal branches hold the whole ancestral fan above the
    father or mother; descendant branches hold everyone below the anchor's
    children (or one chosen child). With `recursion_depth`, every ancestral
    branch also yields paternal and maternal sub-branches one generation
    further up. Branches whose starting person is missing are skipped and
    reported in `warnings`.

    Raises:
        PersonNotFoundError: if the anchor is not in the tree
    """
    if anchor_id not in tree:
        raise PersonNotFoundError(anchor_id)
    options = options or BranchSplitSettings()
    if branches is None:
        branches = build_branch_definitions(anchor_id, options)

    result = SplitResult()
    planned: list[tuple[BranchDefinition, int | None]] = []

    for branch in branches:
        starts = _branch_starts(tree, branch)
        if not starts:
            result.warnings.append(f"Branch {branch.label} skipped: no starting person for {tree.name_of(branch.anchor_id)}")
            continue
        planned.append((branch, options.max_generations))
        if branch.kind != "descendant":
            planned.extend(
                _sub_branches(tree, branch, starts[0], options.recursion_depth, options.max_generations, result.warnings)
            )

    for branch, cap in planned:
        person_ids, deepest = collect_branch(
            tree,
            _branch_starts(tree, branch),
            upward=branch.kind != "descendant",
            max_generations=cap,
            include_spouses=options.include_spouses,
        )
        result.partitions.append(
            Partition(
                label=branch.label,
                kind="branch",
                person_ids=person_ids,
                boundary=find_crossing_people(tree, person_ids),
                generation_range=(1, deepest),
            )
        )

    for warning in result.warnings:
        logger.warning(warning)
    logger.info("Branch split around %s: %d branches", anchor_id, len(result.partitions))
    return result


def preview_branch_split(
    tree: FamilyTree,
    anchor_id: str,
    options: BranchSplitSettings | None = None,
    branches: list[BranchDefinition] | None = None,
) -> BranchSplitPreview:
    result = split_by_branch(tree, anchor_id, options, branches)

    seen: dict[str, int] = {}
    for partition in result.partitions:
        for pid in partition.person_ids:
            seen[pid] = seen.get(pid, 0) + 1

    return BranchSplitPreview(
        branches=[(p.label, p.person_count, len(p.boundary)) for p in result.partitions],
        total_people=len(seen),
        overlap_count=sum(1 for count in seen.values() if count > 1),
        warnings=list(result.warnings),
    )


# ============================================================================
# Lineage extraction and ancestor/descendant pair
# ============================================================================


@dataclass
class LineageExtraction:
    path_found: bool
    lineage_ids: list[str] = field(default_factory=list)
    partition: Partition | None = None

    @property
    def generation_count(self) -> int:
        return len(self.lineage_ids)

    @property
    def total_count(self) -> int:
        return self.partition.person_count if self.partition else 0


def _descent_chain(tree: FamilyTree, ancestor_id: str, descendant_id: str) -> list[str] | None:
    """Shortest parent->child chain from ancestor to descendant."""
    previous: dict[str, str | None] = {ancestor_id: None}
    queue = deque([ancestor_id])
    while queue:
        current = queue.popleft()
        if current == descendant_id:
            chain = []
            node: str | None = current
            while node is not None:
                chain.append(node)
                node = previous[node]
            return list(reversed(chain))
        for child_id in tree.children(current):
            if child_id not in previous:
                previous[child_id] = current
                queue.append(child_id)
    return None


def extract_lineage(
    tree: FamilyTree,
    start_id: str,
    end_id: str,
    include_spouses: bool = True,
    include_siblings: bool = False,
) -> LineageExtraction:
    """
    Extract the direct line between an older and a younger person.

    The people may be given in either order; the chain is always returned
    oldest first. Returns `path_found=False` when no parent->child chain
    joins them.
    """
    if start_id not in tree or end_id not in tree:
        return LineageExtraction(path_found=False)

    chain = _descent_chain(tree, start_id, end_id)
    if chain is None:
        chain = _descent_chain(tree, end_id, start_id)
    if chain is None:
        return LineageExtraction(path_found=False)

    members = list(chain)
    included = set(members)

    def add(person_id: str) -> None:
        if person_id not in included:
            included.add(person_id)
            members.append(person_id)

    for person_id in chain:
        if include_siblings:
            for parent_id in tree.parents(person_id):
                for sibling_id in tree.children(parent_id):
                    add(sibling_id)
        if include_spouses:
            for spouse_id in tree.spouses(person_id):
                add(spouse_id)

    partition = Partition(
        label=f"{tree.name_of(chain[0])} to {tree.name_of(chain[-1])}",
        kind="lineage",
        person_ids=members,
        boundary=find_crossing_people(tree, members),
        generation_range=(1, len(chain)),
    )
    return LineageExtraction(path_found=True, lineage_ids=chain, partition=partition)


@dataclass
class AncestorDescendantPreview:
    ancestor_count: int
    descendant_count: int
    ancestor_generations: int
    descendant_generations: int
    total_unique_people: int


def split_ancestor_descendant(
    tree: FamilyTree,
    root_id: str,
    include_spouses: bool = True,
    max_ancestor_generations: int | None = None,
    max_descendant_generations: int | None = None,
) -> SplitResult:
    """
    Split into the root's ancestors and the root's descendants.

    The root appears in both partitions.

    Raises:
        PersonNotFoundError: if the root is not in the tree
    """
    if root_id not in tree:
        raise PersonNotFoundError(root_id)

    result = SplitResult()
    for label, upward, cap in (
        ("ancestors", True, max_ancestor_generations),
        ("descendants", False, max_descendant_generations),
    ):
        starts = tree.parents(root_id) if upward else tree.children(root_id)
        collected, deepest = collect_branch(tree, starts, upward, cap, include_spouses=False)
        person_ids = [root_id] + [pid for pid in collected if pid != root_id]
        if include_spouses:
            for pid in list(person_ids):
                person_ids.extend(s for s in tree.spouses(pid) if s not in person_ids)
        result.partitions.append(
            Partition(
                label=label,
                kind=label,
                person_ids=person_ids,
                boundary=find_crossing_people(tree, person_ids),
                generation_range=(0, deepest),
            )
        )
    return result


def preview_ancestor_descendant(
    tree: FamilyTree,
    root_id: str,
    include_spouses: bool = True,
    max_ancestor_generations: int | None = None,
    max_descendant_generations: int | None = None,
) -> AncestorDescendantPreview:
    result = split_ancestor_descendant(
        tree, root_id, include_spouses, max_ancestor_generations, max_descendant_generations
    )
    ancestors, descendants = result.partitions
    return AncestorDescendantPreview(
        ancestor_count=ancestors.person_count,
        descendant_count=descendants.person_count,
        ancestor_generations=ancestors.generation_range[1],
        descendant_generations=descendants.generation_range[1],
        total_unique_people=result.total_people,
    )


# ============================================================================
# Collections
# ============================================================================


@dataclass
class BridgePerson:
    person_id: str
    collection: str
    related_collections: list[str] = field(default_factory=list)


@dataclass
class CollectionSplitResult(SplitResult):
    bridges: dict[str, BridgePerson] = field(default_factory=dict)
    adjacency: nx.Graph = field(default_factory=nx.Graph)


@dataclass
class CollectionSplitPreview:
    collections: list[tuple[str, int, int]]  # (name, people, bridge people)
    total_people: int
    total_bridge_people: int


def choose_collection(candidates: set[str] | list[str], priority: list[str] | None = None) -> str | None:
    """
    Pick one collection from several: the first in `priority`, otherwise
    the alphabetically first.
    """
    candidates = set(candidates)
    if not candidates:
        return None
    for name in priority or []:
        if name in candidates:
            return name
    return sorted(candidates)[0]


def _ordered_labels(labels: set[str], priority: list[str]) -> list[str]:
    tagged = labels - {UNCOLLECTED}
    ordered = [name for name in priority if name in tagged]
    ordered += sorted(tagged - set(ordered))
    if UNCOLLECTED in labels:
        ordered.append(UNCOLLECTED)
    return ordered


def _direct_relatives(tree: FamilyTree, person_id: str) -> list[str]:
    return tree.parents(person_id) + tree.spouses(person_id) + tree.children(person_id)


def assign_collections(tree: FamilyTree, options: CollectionSplitSettings | None = None) -> dict[str, str]:
    """
    Map every person to one bucket label.

    Untagged people go to UNCOLLECTED, unless `assign_uncollected` is set
    and their direct relatives carry tags, in which case they join one of
    those via `choose_collection`.
    """
    options = options or CollectionSplitSettings()
    buckets = {pid: person.collection or UNCOLLECTED for pid, person in tree.nodes.items()}

    if options.assign_uncollected:
        adopted = {}
        for pid, bucket in buckets.items():
            if bucket != UNCOLLECTED:
                continue
            tags = {buckets[r] for r in _direct_relatives(tree, pid)} - {UNCOLLECTED}
            if tags:
                adopted[pid] = choose_collection(tags, options.priority)
        buckets.update(adopted)

    return buckets


def find_bridge_people(tree: FamilyTree, buckets: dict[str, str]) -> dict[str, BridgePerson]:
    """People whose parents, spouses or children sit in a different tagged bucket."""
    bridges = {}
    for pid, bucket in buckets.items():
        if bucket == UNCOLLECTED:
            continue
        others = {buckets[r] for r in _direct_relatives(tree, pid)} - {bucket, UNCOLLECTED}
        if others:
            bridges[pid] = BridgePerson(pid, bucket, sorted(others))
    return bridges


def build_collection_graph(buckets: dict[str, str], bridges: dict[str, BridgePerson]) -> nx.Graph:
    """
    Build the collection adjacency graph.

    Nodes are bucket labels with a `person_count`; an edge's `weight` is the
    number of bridge people (on either side) linking the two buckets.
    """
    G = nx.Graph()
    for bucket in buckets.values():
        if bucket not in G:
            G.add_node(bucket, person_count=0)
        G.nodes[bucket]["person_count"] += 1

    for bridge in bridges.values():
        for other in bridge.related_collections:
            if G.has_edge(bridge.collection, other):
                G.edges[bridge.collection, other]["weight"] += 1
            else:
                G.add_edge(bridge.collection, other, weight=1)
    return G


def split_by_collection(tree: FamilyTree, options: CollectionSplitSettings | None = None) -> CollectionSplitResult:
    """
    Split people by their collection tag.

    When `collections` is set only those buckets are produced. With
    `include_bridge_people`, each partition also lists as guests the
    bridge people of other buckets who are directly related to a member.
    """
    options = options or CollectionSplitSettings()
    buckets = assign_collections(tree, options)
    bridges = find_bridge_people(tree, buckets)

    members: dict[str, list[str]] = {}
    for pid, bucket in buckets.items():
        members.setdefault(bucket, []).append(pid)

    labels = _ordered_labels(set(members), options.priority)
    if options.collections:
        labels = [label for label in labels if label in options.collections]

    result = CollectionSplitResult(bridges=bridges, adjacency=build_collection_graph(buckets, bridges))
    for label in labels:
        person_ids = members[label]
        boundary = {pid: bridges[pid].related_collections for pid in person_ids if pid in bridges}

        guests: list[str] = []
        if options.include_bridge_people:
            for pid in person_ids:
                for relative_id in _direct_relatives(tree, pid):
                    if buckets[relative_id] != label and relative_id in bridges and relative_id not in guests:
                        guests.append(relative_id)

        result.partitions.append(
            Partition(label=label, kind="collection", person_ids=person_ids, boundary=boundary, guest_ids=guests)
        )

    logger.info(
        "Collection split: %d collections, %d bridge people",
        len(result.partitions),
        len(bridges),
    )
    return result


def preview_collection_split(tree: FamilyTree, options: CollectionSplitSettings | None = None) -> CollectionSplitPreview:
    result = split_by_collection(tree, options)
    return CollectionSplitPreview(
        collections=[(p.label, p.person_count, len(p.boundary)) for p in result.partitions],
        total_people=result.total_people,
        total_bridge_people=sum(len(p.boundary) for p in result.partitions),
    )


# ============================================================================
# Surnames
# ============================================================================


@dataclass
class SurnameSplitPreview:
    surnames: list[tuple[str, int]]  # (surname, people)
    total_people: int
    partition_count: int


def surname_of(person: Person) -> str | None:
    """Recorded surname, else the last word of a multi-word name."""
    if person.surname:
        return person.surname
    parts = person.name.split()
    if len(parts) >= 2 and not parts[-1].isdigit() and len(parts[-1]) > 1:
        return parts[-1]
    return None


def maiden_name(tree: FamilyTree, person_id: str) -> str | None:
    """
    The surname a person was born with, taken from their father, when it
    differs from the surname they are recorded under.
    """
    father_id = tree.father(person_id)
    if father_id is None:
        return None
    birth_surname = surname_of(tree.nodes[father_id])
    if birth_surname and birth_surname != surname_of(tree.nodes[person_id]):
        return birth_surname
    return None


def surname_key(surname: str, handle_variants: bool = True) -> str:
    """Matching key: Soundex code with variants (Smith = Smythe), else the lower-cased name."""
    if handle_variants:
        return jellyfish.soundex(surname)
    return surname.lower()


def list_surnames(tree: FamilyTree) -> list[tuple[str, int]]:
    """Surnames in the tree with their counts, most common first, then alphabetical."""
    counts: dict[str, int] = {}
    for person in tree.nodes.values():
        surname = surname_of(person)
        if surname:
            counts[surname] = counts.get(surname, 0) + 1
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def _surname_members(tree: FamilyTree, surname: str, options: SurnameSplitSettings) -> list[str]:
    key = surname_key(surname, options.handle_variants)
    members = []
    for pid, person in tree.nodes.items():
        names = [surname_of(person)]
        if options.include_maiden_names:
            names.append(maiden_name(tree, pid))
        if any(name and surname_key(name, options.handle_variants) == key for name in names):
            members.append(pid)
    return members


def _with_spouses(tree: FamilyTree, person_ids: list[str]) -> list[str]:
    result = list(person_ids)
    for pid in person_ids:
        result.extend(s for s in tree.spouses(pid) if s not in result)
    return result


def split_by_surname(tree: FamilyTree, options: SurnameSplitSettings | None = None) -> SplitResult:
    """
    Extract everyone carrying the selected surnames, connected or not.

    With no surnames selected every surname in the tree is used. A person
    matches on their recorded surname or, with `include_maiden_names`, on
    their birth surname; `handle_variants` matches similar spellings.
    Spouses of matching people are added with `include_spouses`. With
    `separate_partitions` each surname gets its own partition, otherwise
    all matches share one partition labelled with the surnames joined by
    ", ". Surnames nobody carries are skipped and reported in `warnings`.
    """
    options = options or SurnameSplitSettings()
    surnames = options.surnames or [name for name, _ in list_surnames(tree)]

    result = SplitResult()
    matched: list[tuple[str, list[str]]] = []
    for surname in surnames:
        members = _surname_members(tree, surname, options)
        if members:
            matched.append((surname, members))
        else:
            result.warnings.append(f"Surname {surname} matched nobody")

    if options.separate_partitions:
        groups = matched
    else:
        combined: list[str] = []
        for _, members in matched:
            combined.extend(pid for pid in members if pid not in combined)
        groups = [(", ".join(name for name, _ in matched), combined)] if combined else []

    for label, members in groups:
        person_ids = _with_spouses(tree, members) if options.include_spouses else members
        result.partitions.append(
            Partition(
                label=label,
                kind="surname",
                person_ids=person_ids,
                boundary=find_crossing_people(tree, person_ids),
            )
        )

    for warning in result.warnings:
        logger.warning(warning)
    logger.info("Surname split: %d partitions, %d people", len(result.partitions), result.total_people)
    return result


def preview_surname_split(tree: FamilyTree, options: SurnameSplitSettings | None = None) -> SurnameSplitPreview:
    result = split_by_surname(tree, options)
    return SurnameSplitPreview(
        surnames=[(p.label, p.person_count) for p in result.partitions],
        total_people=result.total_people,
        partition_count=len(result.partitions),
    )
