"""
Resolución de aristas
=====================
Aristas estructurales de la familia, todas ancladas en la cabeza:

- cabeza ── cónyuge           marriage
- cabeza → hijo               parent-child (via="head")
- cónyuge → hijo              parent-child (via="spouse", discontinua)
- padre → cabeza              ancestor
- hermano → cabeza            sibling
- otro → cabeza               other

Sin cabeza no hay aristas.
"""

from typing import List

from family_models import EdgeKind, EdgeStyle, GraphEdge, RelationshipRole
from role_classifier import ClassifiedFamily, person_node_id


MARRIAGE_LABEL = "Matrimonio"
CHILD_LABEL = "Hijo/a"
PARENT_LABEL = "Padre/Madre"
SIBLING_LABEL = "Hermano/a"
OTHER_LABEL = "Otro"

STYLES = {
    EdgeKind.MARRIAGE: EdgeStyle(stroke_width=3),
    EdgeKind.PARENT_CHILD: EdgeStyle(stroke_width=2),
    EdgeKind.ANCESTOR: EdgeStyle(stroke_width=2),
    EdgeKind.SIBLING: EdgeStyle(stroke_width=1.5, dashed=True),
    EdgeKind.OTHER: EdgeStyle(stroke_width=1, dashed=True),
}


def edge_id(kind: EdgeKind, source: str, target: str) -> str:
    return f"{kind.value}:{source}->{target}"


def make_edge(kind: EdgeKind, source: str, target: str, label: str, via: str = None,
              style: EdgeStyle = None) -> GraphEdge:
    return GraphEdge(
        id=edge_id(kind, source, target),
        source=source,
        target=target,
        kind=kind,
        label=label,
        via=via,
        style=style or STYLES[kind].model_copy(),
    )


def resolve_edges(classified: ClassifiedFamily) -> List[GraphEdge]:
    """Aristas estructurales para una familia clasificada"""
    head_id = classified.head_node_id
    if head_id is None:
        return []

    edges = []
    spouse_id = classified.spouse_node_id

    if spouse_id is not None:
        edges.append(make_edge(EdgeKind.MARRIAGE, head_id, spouse_id, MARRIAGE_LABEL))

    for child in classified.children:
        child_id = person_node_id(RelationshipRole.CHILD, child)
        edges.append(make_edge(EdgeKind.PARENT_CHILD, head_id, child_id, CHILD_LABEL, via="head"))
        if spouse_id is not None:
            edges.append(make_edge(
                EdgeKind.PARENT_CHILD, spouse_id, child_id, CHILD_LABEL, via="spouse",
                style=EdgeStyle(stroke_width=2, dashed=True),
            ))

    for parent in classified.parents:
        parent_id = person_node_id(RelationshipRole.PARENT, parent)
        edges.append(make_edge(EdgeKind.ANCESTOR, parent_id, head_id, PARENT_LABEL))

    for sibling in classified.siblings:
        sibling_id = person_node_id(RelationshipRole.SIBLING, sibling)
        edges.append(make_edge(EdgeKind.SIBLING, sibling_id, head_id, SIBLING_LABEL))

    for other in classified.others:
        other_id = person_node_id(RelationshipRole.OTHER, other)
        edges.append(make_edge(EdgeKind.OTHER, other_id, head_id, other.relationship_label or OTHER_LABEL))

    return edges
