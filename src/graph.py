"""Family tree snapshots and their NetworkX views."""

from collections.abc import Iterable
import logging

import networkx as nx

from models import FamilyEdge, FamilyTree, Person, PersonNotFoundError

logger = logging.getLogger(__name__)


def derive_edges(nodes: dict[str, Person]) -> list[FamilyEdge]:
    """
    Derive parent->child and spouse edges from person fields.

    Only edges whose endpoints both resolve are emitted. A spouse pair is
    emitted once, from whichever partner is met first.
    """
    edges: list[FamilyEdge] = []
    seen_couples: set[frozenset[str]] = set()

    for person in nodes.values():
        for parent_id in (person.father_id, person.mother_id):
            if parent_id and parent_id in nodes:
                edges.append(FamilyEdge(parent_id, person.id, "parent"))

        # Children that list no parent back are still reachable through the parent
        for child_id in person.child_ids:
            child = nodes.get(child_id)
            if child and person.id not in (child.father_id, child.mother_id):
                edges.append(FamilyEdge(person.id, child_id, "parent"))

        for spouse_id in person.spouse_ids:
            couple = frozenset((person.id, spouse_id))
            if spouse_id in nodes and couple not in seen_couples:
                seen_couples.add(couple)
                edges.append(FamilyEdge(person.id, spouse_id, "spouse"))

    return edges


def build_graph(people: Iterable[Person]) -> nx.DiGraph:
    """Build a NetworkX directed graph from person records."""
    G = nx.DiGraph()
    nodes = {p.id: p for p in people}

    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for person in nodes.values():
        G.add_node(
            person.id,
            person_name=person.name,
            sex=person.sex,
            birth_date=person.birth_date,
            death_date=person.death_date,
            given_name=person.given_name,
            surname=person.surname,
            collection=person.collection,
        )

    for edge in derive_edges(nodes):
        relationship_type = "PARENT_OF" if edge.kind == "parent" else "SPOUSE_OF"
        G.add_edge(edge.from_id, edge.to_id, relationship_type=relationship_type)

    return G


def build_family_tree(
    people: Iterable[Person], root_id: str, connected_only: bool = True
) -> FamilyTree:
    """
    Build a FamilyTree snapshot around `root_id`.

    With `connected_only`, only the people connected to the root through any
    chain of parent, child or spouse links are kept; otherwise every person
    given is included.
    """
    people = list(people)
    index = {p.id: p for p in people}
    if root_id not in index:
        raise PersonNotFoundError(root_id)

    if connected_only:
        undirected = build_graph(people).to_undirected()
        component = nx.node_connected_component(undirected, root_id)
        index = {pid: p for pid, p in index.items() if pid in component}

    tree = FamilyTree(root_id=root_id, nodes=index, edges=derive_edges(index))
    logger.debug(
        "Built tree rooted at %s with %d people and %d edges",
        root_id,
        len(tree.nodes),
        len(tree.edges),
    )
    return tree


def build_family_trees(people: Iterable[Person]) -> list[FamilyTree]:
    """
    Split people into one tree per connected family.

    Each tree is rooted at its first member in input order; trees are
    returned largest first.
    """
    people = list(people)
    order = {p.id: i for i, p in enumerate(people)}
    undirected = build_graph(people).to_undirected()

    trees = []
    for component in nx.connected_components(undirected):
        root_id = min(component, key=order.__getitem__)
        members = {p.id: p for p in people if p.id in component}
        trees.append(FamilyTree(root_id=root_id, nodes=members, edges=derive_edges(members)))

    trees.sort(key=lambda t: (-len(t.nodes), order[t.root_id]))
    return trees


def get_partition_subgraph(G: nx.DiGraph, person_ids: Iterable[str]) -> nx.DiGraph:
    """
    Extract the subgraph induced by one partition's people.

    Identifiers missing from `G` are ignored.
    """
    return G.subgraph(pid for pid in person_ids if pid in G).copy()


def build_union_layout_graph(tree: FamilyTree, person_ids: Iterable[str] | None = None) -> nx.DiGraph:
    """
    Build a layout graph using the union-node model for family tree rendering.

    Creates "family nodes" (union nodes) that connect a parent pair to their
    children, so that:
    - Spouses naturally sit on the same generation
    - All children of a couple hang from the same union node
    - Fewer edge crossings than direct parent->child edges

    Args:
        tree: The snapshot to draw from
        person_ids: Restrict the layout to these people (default: whole tree)

    Returns:
        A new graph with person and family nodes suitable for hierarchical layout
    """
    members = set(tree.nodes) if person_ids is None else {p for p in person_ids if p in tree}
    H = nx.DiGraph()

    for pid in tree.nodes:
        if pid not in members:
            continue
        person = tree.nodes[pid]
        H.add_node(
            pid,
            node_type="person",
            person_name=person.name,
            sex=person.sex,
            given_name=person.given_name,
            surname=person.surname,
            birth_date=person.birth_date,
            death_date=person.death_date,
        )

    def family_node(parents: tuple[str, ...]) -> str:
        fam_id = "FAM_" + "_".join(parents)
        if fam_id not in H:
            H.add_node(fam_id, node_type="family", spouses=parents)
            for parent_id in parents:
                H.add_edge(parent_id, fam_id, edge_type="spouse_to_family")
        return fam_id

    # Couples first so childless marriages still get a union node
    for edge in tree.edges:
        if edge.kind == "spouse" and edge.from_id in members and edge.to_id in members:
            family_node(tuple(sorted((edge.from_id, edge.to_id))))

    for pid in tree.nodes:
        if pid not in members:
            continue
        parents = tuple(sorted(p for p in tree.parents(pid) if p in members))
        if parents:
            H.add_edge(family_node(parents), pid, edge_type="family_to_child")

    return H
