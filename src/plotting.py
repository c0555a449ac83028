"""Rendering one partition of a family tree with Graphviz."""

import logging
from pathlib import Path

import pydot

from graph import build_union_layout_graph
from models import FamilyTree
from parsing import parse_date_string
from splitting import Partition

logger = logging.getLogger(__name__)

FILL_BY_SEX = {"M": "lightblue", "F": "lightpink"}


def _years(birth_date: str | None, death_date: str | None) -> str:
    birth = parse_date_string(birth_date)
    death = parse_date_string(death_date)
    return f"{birth[:4] if birth else ''}-{death[:4] if death else ''}"


def build_partition_dot(tree: FamilyTree, partition: Partition) -> pydot.Dot:
    """
    Build a hierarchical chart of one partition using the union-node model.

    - Parents appear above children (ancestors at top)
    - Spouses are aligned horizontally on the same rank
    - Children hang from a family point shared by their parents
    - Boundary people get a double outline and a line naming where their
      relatives continue
    - Guests from other partitions are drawn dashed
    """
    guests = [pid for pid in partition.guest_ids if pid not in partition.person_ids]
    H = build_union_layout_graph(tree, list(partition.person_ids) + guests)

    P = pydot.Dot(graph_type="digraph", label=partition.label, labelloc="t")
    P.set("rankdir", "TB")
    P.set("splines", "ortho")
    P.set("nodesep", "0.4")
    P.set("ranksep", "0.6")

    spouse_pairs: list[tuple] = []

    for node, data in H.nodes(data=True):
        if data.get("node_type") == "family":
            P.add_node(pydot.Node(str(node), shape="point", width="0.1", height="0.1", label=""))
            spouses = data.get("spouses", ())
            if len(spouses) == 2:
                spouse_pairs.append(spouses)
            continue

        lines = [data.get("given_name") or data.get("person_name") or "", data.get("surname") or ""]
        lines.append(_years(data.get("birth_date"), data.get("death_date")))

        style = "rounded,filled"
        peripheries = "1"
        crossing = partition.boundary.get(node)
        if crossing:
            peripheries = "2"
            lines.append("-> " + ", ".join(crossing))
        if node in guests:
            style = "rounded,filled,dashed"

        label = "\n".join(line for line in lines if line)
        P.add_node(
            pydot.Node(
                str(node),
                label=label,
                shape="box",
                style=style,
                fillcolor=FILL_BY_SEX.get(data.get("sex"), "lightgray"),
                peripheries=peripheries,
                fontsize="10",
            )
        )

    for u, v, data in H.edges(data=True):
        if data.get("edge_type") == "spouse_to_family":
            P.add_edge(pydot.Edge(str(u), str(v), dir="none", color="darkgray"))
        elif data.get("edge_type") == "family_to_child":
            P.add_edge(pydot.Edge(str(u), str(v), color="darkgray"))

    # rank=same subgraphs align spouse pairs horizontally
    for i, (a, b) in enumerate(spouse_pairs):
        sg = pydot.Subgraph(f"couple_{i}", rank="same")
        sg.add_node(pydot.Node(str(a)))
        sg.add_node(pydot.Node(str(b)))
        P.add_subgraph(sg)

    return P


def plot_partition(tree: FamilyTree, partition: Partition, output_path: Path | None = None) -> None:
    """
    Render a partition chart.

    Args:
        tree: The snapshot the partition was cut from
        partition: The partition to draw
        output_path: Where to save the image (png, svg or pdf by extension).
            If None, displays interactively.
    """
    P = build_partition_dot(tree, partition)

    if output_path:
        ext = output_path.suffix.lower().lstrip(".")
        if ext not in ("png", "svg", "pdf"):
            ext = "png"
        P.write(str(output_path), format=ext)
        logger.info("Chart of %s saved to %s", partition.label, output_path)
        return

    # Save to temporary file and display
    import tempfile

    import matplotlib.image as mpimg
    import matplotlib.pyplot as plt

    with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
        image_path = Path(f.name)
    try:
        P.write(str(image_path), format="png")
        img = mpimg.imread(str(image_path))
    finally:
        image_path.unlink(missing_ok=True)

    plt.figure(figsize=(20, 16))
    plt.title(partition.label)
    plt.imshow(img)
    plt.axis("off")
    plt.tight_layout()
    plt.show()
