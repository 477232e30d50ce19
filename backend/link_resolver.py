"""
Vínculos entre familias
=======================
Para cada vínculo de la familia actual (como origen o como relacionada):

1. Ancla: el nodo de la persona que justifica el vínculo (miembroVinculo);
   si no está en esta familia, la cabeza; sin cabeza, se omite el vínculo.
2. Familia vinculada: el lado del vínculo que no es la familia actual.
3. Si la familia vinculada está precargada (vista expandida): un nodo externo
   por persona y UNA arista cross-family-link hacia su contraparte
   (la cabeza, o el primer miembro). Si no: un nodo agregado de familia.
4. Cada familia vinculada se dibuja una sola vez por construcción; los
   vínculos siguientes reutilizan sus nodos.
"""

from typing import Optional, List, Dict

from family_models import (
    EdgeKind,
    EdgeStyle,
    FamilyLink,
    FamilyRecord,
    FamilySummary,
    GraphDraft,
    GraphEdge,
    GraphNode,
    NodeKind,
    Person,
)
from layout_engine import LayoutEngine
from role_classifier import ClassifiedFamily, person_node_id


LINK_STYLE = EdgeStyle(stroke_width=2, dashed=True, animated=True)


def external_node_id(family_id: int, person: Person) -> str:
    return f"ext-{family_id}-{person.key}"


def placeholder_node_id(family_id: int) -> str:
    return f"family-{family_id}"


def unique_links(family: FamilyRecord) -> List[FamilyLink]:
    """
    Vínculos de la familia sin repetir.

    El mismo vínculo puede venir en vinculosOrigen de una familia y en
    vinculosRelacionados de la otra; se identifica por par de familias
    sin orden + id.
    """
    seen = set()
    result = []
    for link in family.links():
        key = link.pair_key()
        if key in seen:
            continue
        seen.add(key)
        result.append(link)
    return result


def find_counterpart(linked: FamilyRecord) -> Optional[Person]:
    """Cabeza de la familia vinculada si está entre sus miembros; si no, el primer miembro"""
    if linked.head_of_family_id is not None:
        for person in linked.members:
            if person.id == linked.head_of_family_id:
                return person
    if linked.members:
        return linked.members[0]
    people = linked.people()
    return people[0] if people else None


class LinkResolver:
    """
    Uso:
        resolver = LinkResolver(layout)
        resolver.resolve(family, classified, draft, related={10: family_b})
    """

    def __init__(self, layout: LayoutEngine):
        self.layout = layout

    def resolve(
        self,
        family: FamilyRecord,
        classified: ClassifiedFamily,
        draft: GraphDraft,
        related: Optional[Dict[int, FamilyRecord]] = None
    ) -> List[GraphEdge]:
        """Agrega al borrador los nodos de familias vinculadas y devuelve las aristas creadas"""
        related = related or {}
        attached: Dict[int, str] = {}  # familia vinculada → nodo destino de sus aristas
        edges = []

        for link in unique_links(family):
            other_id = link.other_family_id(family.id)
            if other_id is None or other_id == family.id:
                print(f"⚠️ Vínculo {link.id} ignorado: no conecta la familia {family.id} con otra")
                continue

            anchor_id = self._anchor_node_id(link, classified)
            if anchor_id is None:
                print(f"⚠️ Vínculo {link.id} ignorado: la familia {family.id} no tiene cabeza")
                continue
            if not draft.has_node(anchor_id):
                print(f"⚠️ Vínculo {link.id} ignorado: el nodo ancla {anchor_id} no está en el grafo")
                continue
            anchor = draft.get_node(anchor_id)

            target_id = attached.get(other_id)
            if target_id is None:
                slot = len(attached)
                linked = related.get(other_id)
                if linked is not None and linked.people():
                    target_id = self._attach_preloaded(linked, anchor, slot, draft)
                else:
                    summary = self._summary_for(other_id, link, family.id, linked)
                    target_id = self._attach_placeholder(summary, anchor, slot, draft)
                attached[other_id] = target_id

            edge = GraphEdge(
                id=f"{EdgeKind.CROSS_FAMILY_LINK.value}:{link.id}:{anchor_id}->{target_id}",
                source=anchor_id,
                target=target_id,
                kind=EdgeKind.CROSS_FAMILY_LINK,
                label=link.label,
                style=LINK_STYLE.model_copy(),
            )
            draft.add_edge(edge)
            edges.append(edge)

        return edges

    # ==================== Ancla ====================

    def _anchor_node_id(self, link: FamilyLink, classified: ClassifiedFamily) -> Optional[str]:
        if link.connecting_member_id is not None:
            found = classified.find_member(link.connecting_member_id)
            if found is not None:
                role, person = found
                return person_node_id(role, person)
        return classified.head_node_id

    # ==================== Familia vinculada ====================

    def _attach_preloaded(self, linked: FamilyRecord, anchor: GraphNode, slot: int, draft: GraphDraft) -> str:
        """Nodos externos para todas las personas; devuelve el id de la contraparte"""
        people = linked.people()
        positions = self.layout.linked_row(anchor.position, len(people), slot)
        summary = linked.summary()

        for person, position in zip(people, positions):
            draft.add_node(GraphNode(
                id=external_node_id(linked.id, person),
                kind=NodeKind.PERSON,
                position=position,
                label=person.full_name,
                person=person,
                family=summary,
                external=True,
                external_family_id=linked.id,
                href=person.href,
            ))

        counterpart = find_counterpart(linked)
        return external_node_id(linked.id, counterpart)

    def _attach_placeholder(self, summary: FamilySummary, anchor: GraphNode, slot: int, draft: GraphDraft) -> str:
        position = self.layout.linked_row(anchor.position, 1, slot)[0]
        node = draft.add_node(GraphNode(
            id=placeholder_node_id(summary.id),
            kind=NodeKind.FAMILY_PLACEHOLDER,
            position=position,
            label=summary.display_name,
            family=summary,
            external=True,
            external_family_id=summary.id,
            href=summary.href,
        ))
        return node.id

    @staticmethod
    def _summary_for(other_id: int, link: FamilyLink, family_id: int,
                     linked: Optional[FamilyRecord]) -> FamilySummary:
        if linked is not None:
            return linked.summary()
        nested = link.other_family(family_id)
        if nested is not None and nested.id == other_id:
            return nested
        return FamilySummary(id=other_id)
