"""
Command-line entry point.

1) Load people from a GEDCOM file.
2) Build a family tree snapshot (around a root person where one is needed).
3) Run one query: relationship, generations, a split (or its preview),
   reference numbering, lineage tracking, validation or a partition chart.
"""

import argparse
import logging
from pathlib import Path

from generations import assign_generations
from graph import build_family_tree
from kinship import calculate_relationship, format_relationship
from lineage import LINEAGE_TYPES, assign_lineage, format_lineage_type, suggest_lineage_name
from models import FamilyTree, PersonNotFoundError
from numbering import assign_numbers, describe_system, format_numbering_result
from parsing import load_people
from plotting import plot_partition
from settings import NUMBERING_SYSTEMS, Settings
from splitting import (
    preview_branch_split,
    preview_collection_split,
    preview_generation_split,
    preview_surname_split,
    split_by_branch,
    split_by_collection,
    split_by_generation,
    split_by_surname,
)
from validation import validate_tree

logger = logging.getLogger(__name__)

MAX_LISTED = 10


def _override(current, **overrides):
    """Re-validate a settings object with the non-None overrides applied."""
    values = current.model_dump()
    values.update({k: v for k, v in overrides.items() if v is not None})
    return type(current)(**values)


def _print_partitions(result) -> None:
    for partition in result.partitions:
        print(f"  {partition.label}: {partition.person_count} people, {len(partition.boundary)} boundary people")
    for warning in result.warnings:
        print(f"  Warning: {warning}")


# ============================================================================
# Commands
# ============================================================================


def cmd_relationship(args, tree: FamilyTree, settings: Settings) -> int:
    result = calculate_relationship(tree, args.person_a, args.person_b)
    if result is None:
        print("Person not found")
        return 1
    print(format_relationship(tree, result))
    return 0


def cmd_generations(args, tree: FamilyTree, settings: Settings) -> int:
    direction = args.direction or settings.generation.direction
    assignment = assign_generations(tree, direction)
    print(f"Generations relative to {tree.root.name} ({assignment.direction}), bounds {assignment.bounds}")
    for generation in range(assignment.min_generation, assignment.max_generation + 1):
        print(f"  {generation:+d}: {len(assignment.people_at(generation))} people")
    return 0


def cmd_split_generations(args, tree: FamilyTree, settings: Settings) -> int:
    options = _override(settings.generation, generations_per_partition=args.width, direction=args.direction)
    if args.preview:
        preview = preview_generation_split(tree, options)
        print(f"Preview: {len(preview.ranges)} ranges, {preview.total_people} people")
        for label, count in preview.people_counts.items():
            print(f"  {label}: {count} people")
        print(f"  Boundary people: {preview.boundary_count}")
        return 0

    result, _ = split_by_generation(tree, options)
    print(f"Split into {len(result.partitions)} generation ranges")
    _print_partitions(result)
    return 0


def cmd_split_branches(args, tree: FamilyTree, settings: Settings) -> int:
    options = _override(
        settings.branch,
        max_generations=args.max_generations,
        recursion_depth=args.depth,
        include_descendants=True if args.descendants else None,
        include_spouses=False if args.no_spouses else None,
    )
    if args.preview:
        preview = preview_branch_split(tree, args.anchor, options)
        print(f"Preview: {len(preview.branches)} branches, {preview.total_people} people, {preview.overlap_count} in more than one")
        for label, count, boundary in preview.branches:
            print(f"  {label}: {count} people, {boundary} boundary people")
        for warning in preview.warnings:
            print(f"  Warning: {warning}")
        return 0

    result = split_by_branch(tree, args.anchor, options)
    print(f"Split into {len(result.partitions)} branches around {tree.name_of(args.anchor)}")
    _print_partitions(result)
    return 0


def cmd_split_collections(args, tree: FamilyTree, settings: Settings) -> int:
    options = _override(
        settings.collection,
        collections=args.collection,
        priority=args.priority,
        assign_uncollected=True if args.assign_uncollected else None,
    )
    if args.preview:
        preview = preview_collection_split(tree, options)
        print(f"Preview: {len(preview.collections)} collections, {preview.total_people} people")
        for name, count, bridges in preview.collections:
            print(f"  {name}: {count} people, {bridges} bridge people")
        return 0

    result = split_by_collection(tree, options)
    print(f"Split into {len(result.partitions)} collections")
    _print_partitions(result)
    for a, b, weight in result.adjacency.edges(data="weight"):
        print(f"  {a} <-> {b}: {weight} bridge people")
    return 0


def cmd_split_surnames(args, tree: FamilyTree, settings: Settings) -> int:
    options = _override(
        settings.surname,
        surnames=args.surname,
        include_spouses=False if args.no_spouses else None,
        include_maiden_names=False if args.no_maiden_names else None,
        handle_variants=False if args.no_variants else None,
        separate_partitions=False if args.combined else None,
    )
    if args.preview:
        preview = preview_surname_split(tree, options)
        print(f"Preview: {preview.partition_count} partitions, {preview.total_people} people")
        for name, count in preview.surnames:
            print(f"  {name}: {count} people")
        return 0

    result = split_by_surname(tree, options)
    print(f"Split into {len(result.partitions)} surname partitions")
    _print_partitions(result)
    return 0


def cmd_number(args, tree: FamilyTree, settings: Settings) -> int:
    system = _override(settings.numbering, system=args.system).system
    stats = assign_numbers(tree, system)
    print(describe_system(system))
    for result in stats.results:
        print(f"  {format_numbering_result(result, system)}")
    print(f"Assigned {stats.total_assigned} numbers")
    return 0


def cmd_lineage(args, tree: FamilyTree, settings: Settings) -> int:
    name = args.name or suggest_lineage_name(tree.root)
    stats = assign_lineage(tree, name, lineage_type=args.type)
    print(f"{name}: {format_lineage_type(stats.lineage_type)} from {stats.root_name}")
    for assignment in stats.assignments:
        print(f"  gen {assignment.generation}: {' > '.join(assignment.path_from_root)}")
    print(f"{stats.total_members} members over {stats.max_generation} generations")
    return 0


def cmd_validate(args, tree: FamilyTree, settings: Settings) -> int:
    warnings = validate_tree(tree)
    if not warnings:
        print("No validation issues found")
        return 0
    print(f"Found {len(warnings)} validation warnings:")
    for w in warnings[:MAX_LISTED]:
        print(f"  - {w}")
    if len(warnings) > MAX_LISTED:
        print(f"  ... and {len(warnings) - MAX_LISTED} more")
    return 0


def cmd_plot(args, tree: FamilyTree, settings: Settings) -> int:
    options = _override(settings.generation, generations_per_partition=args.width)
    result, _ = split_by_generation(tree, options)
    partition = result.get(args.partition) if args.partition else result.partitions[0]
    if partition is None:
        print(f"No partition named {args.partition!r}; choose from: {[p.label for p in result.partitions]}")
        return 1
    plot_partition(tree, partition, args.output)
    if args.output:
        print(f"Chart saved to {args.output}")
    return 0


# ============================================================================
# Main
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kingraph", description="Family relationship graph tools")
    parser.add_argument("gedcom", type=Path, help="GEDCOM file to load")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--surname-collections", action="store_true", help="Use surnames as collection tags")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("relationship", help="How PERSON_B is related to PERSON_A")
    p.add_argument("person_a")
    p.add_argument("person_b")
    p.set_defaults(func=cmd_relationship)

    p = sub.add_parser("generations", help="Generation numbers around a root")
    p.add_argument("root")
    p.add_argument("--direction", choices=["ancestors", "descendants", "up", "down"])
    p.set_defaults(func=cmd_generations)

    p = sub.add_parser("split-generations", help="Split into generation ranges")
    p.add_argument("root")
    p.add_argument("--width", type=int, help="Generations per partition")
    p.add_argument("--direction", choices=["ancestors", "descendants", "up", "down"])
    p.add_argument("--preview", action="store_true")
    p.set_defaults(func=cmd_split_generations)

    p = sub.add_parser("split-branches", help="Split into paternal/maternal/descendant branches")
    p.add_argument("anchor")
    p.add_argument("--max-generations", type=int)
    p.add_argument("--depth", type=int, help="Sub-branch recursion depth")
    p.add_argument("--descendants", action="store_true", help="Include a descendant branch")
    p.add_argument("--no-spouses", action="store_true")
    p.add_argument("--preview", action="store_true")
    p.set_defaults(func=cmd_split_branches)

    p = sub.add_parser("split-collections", help="Split by collection tag")
    p.add_argument("--collection", action="append", help="Only this collection (repeatable)")
    p.add_argument("--priority", action="append", help="Tie-break order (repeatable)")
    p.add_argument("--assign-uncollected", action="store_true")
    p.add_argument("--preview", action="store_true")
    p.set_defaults(func=cmd_split_collections)

    p = sub.add_parser("split-surnames", help="Split by surname, connected or not")
    p.add_argument("--surname", action="append", help="Only this surname (repeatable; default: all)")
    p.add_argument("--no-spouses", action="store_true")
    p.add_argument("--no-maiden-names", action="store_true")
    p.add_argument("--no-variants", action="store_true", help="Match exact spellings only")
    p.add_argument("--combined", action="store_true", help="One partition for all surnames")
    p.add_argument("--preview", action="store_true")
    p.set_defaults(func=cmd_split_surnames)

    p = sub.add_parser("number", help="Assign reference numbers")
    p.add_argument("root", nargs="?", help="Default: the configured numbering root, else the first person")
    p.add_argument("--system", choices=NUMBERING_SYSTEMS)
    p.set_defaults(func=cmd_number)

    p = sub.add_parser("lineage", help="Tag descendants with a lineage name")
    p.add_argument("root")
    p.add_argument("name", nargs="?")
    p.add_argument("--type", choices=LINEAGE_TYPES, default="all")
    p.set_defaults(func=cmd_lineage)

    p = sub.add_parser("validate", help="Check references and dates")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("plot", help="Chart one generation partition")
    p.add_argument("root")
    p.add_argument("--width", type=int)
    p.add_argument("--partition", help="Partition label (default: the first)")
    p.add_argument("-o", "--output", type=Path, help="png, svg or pdf; displays when omitted")
    p.set_defaults(func=cmd_plot)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = Settings()

    print(f"Parsing GEDCOM file: {args.gedcom}")
    people = load_people(args.gedcom, "surname" if args.surname_collections else None)
    print(f"  Found {len(people)} persons")
    if not people:
        return 1

    root_id = getattr(args, "root", None) or getattr(args, "anchor", None)
    if root_id is None and args.command == "number":
        root_id = settings.numbering.root_id

    try:
        if root_id:
            tree = build_family_tree(people, root_id)
        else:
            tree = build_family_tree(people, people[0].id, connected_only=False)
        return args.func(args, tree, settings)
    except PersonNotFoundError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
