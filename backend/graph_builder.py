"""
Construcción del grafo familiar
===============================
Función pura: FamilyRecord (+ familias vinculadas precargadas) → Graph.

Flujo:
    FamilyRecord → RoleClassifier → LayoutEngine → edge_resolver → LinkResolver → Graph

- Sin concurrencia: misma entrada, mismo grafo (ids de nodos y aristas).
- El modo de vista es un parámetro: en COMPACT las familias vinculadas
  se ignoran y cada vínculo produce un nodo agregado.
- Familia sin miembros ni visitas: grafo de ejemplo de 3 nodos
  (o grafo vacío con EmptyFamilyPolicy.SIGNAL).
"""

from typing import Optional, List, Dict

from family_models import (
    EdgeKind,
    EmptyFamilyPolicy,
    FamilyRecord,
    Graph,
    GraphDraft,
    GraphNode,
    NodeKind,
    Person,
    RelationshipRole,
    ViewMode,
)
from edge_resolver import CHILD_LABEL, MARRIAGE_LABEL, make_edge, resolve_edges
from graph_errors import GraphBuildError
from layout_engine import LayoutEngine
from link_resolver import LinkResolver
from role_classifier import RoleClassifier, get_classifier, person_node_id
from validators import GraphValidator


# ==================== Grafo de ejemplo ====================

SAMPLE_PEOPLE = (
    (RelationshipRole.HEAD, Person(id=1, first_name="Cabeza", last_name="de Familia",
                                   relationship_label="Cabeza de Familia")),
    (RelationshipRole.SPOUSE, Person(id=2, first_name="Esposo/a", last_name="de Familia",
                                     relationship_label="Esposo/a")),
    (RelationshipRole.CHILD, Person(id=3, first_name="Hijo/a", last_name="de Familia",
                                    relationship_label="Hijo/a")),
)


def sample_node_id(role: RelationshipRole) -> str:
    return f"sample-{role.value}"


def build_sample_graph(family_id: Optional[int] = None, view_mode: ViewMode = ViewMode.COMPACT,
                       layout: Optional[LayoutEngine] = None) -> Graph:
    """Grafo ilustrativo para familias vacías: cabeza, cónyuge e hijo"""
    layout = layout or LayoutEngine()
    positions = {
        RelationshipRole.HEAD: layout.head_position(),
        RelationshipRole.SPOUSE: layout.spouse_position(),
        RelationshipRole.CHILD: layout.child_positions(1, has_spouse=True)[0],
    }

    draft = GraphDraft()
    for role, person in SAMPLE_PEOPLE:
        draft.add_node(GraphNode(
            id=sample_node_id(role),
            kind=NodeKind.PERSON,
            position=positions[role],
            label=person.full_name,
            role=role,
            person=person.model_copy(),
        ))

    head = sample_node_id(RelationshipRole.HEAD)
    draft.add_edge(make_edge(EdgeKind.MARRIAGE, head, sample_node_id(RelationshipRole.SPOUSE), MARRIAGE_LABEL))
    draft.add_edge(make_edge(EdgeKind.PARENT_CHILD, head, sample_node_id(RelationshipRole.CHILD),
                             CHILD_LABEL, via="head"))

    return draft.to_graph(family_id=family_id, view_mode=view_mode, is_sample=True)


# ==================== Orquestador ====================

class GraphBuilder:
    """
    Uso:
        builder = GraphBuilder()
        graph = builder.build(family, related_families=[b, c], view_mode=ViewMode.EXPANDED)
    """

    def __init__(self, classifier: Optional[RoleClassifier] = None, layout: Optional[LayoutEngine] = None):
        self.classifier = classifier or get_classifier()
        self.layout = layout or LayoutEngine()
        self.links = LinkResolver(self.layout)
        self.validator = GraphValidator()

    def build(
        self,
        family: FamilyRecord,
        related_families: Optional[List[FamilyRecord]] = None,
        view_mode: ViewMode = ViewMode.COMPACT,
        empty_policy: EmptyFamilyPolicy = EmptyFamilyPolicy.SAMPLE
    ) -> Graph:
        """
        Construir el grafo completo.

        Raises:
            GraphBuildError: cualquier fallo inesperado o invariante roto
        """
        try:
            graph = self._build(family, related_families, view_mode, empty_policy)
        except GraphBuildError:
            raise
        except Exception as e:
            raise GraphBuildError(f"Error construyendo el grafo de la familia {family.id}: {e}") from e

        return self.validator.ensure_valid(graph)

    def _build(
        self,
        family: FamilyRecord,
        related_families: Optional[List[FamilyRecord]],
        view_mode: ViewMode,
        empty_policy: EmptyFamilyPolicy
    ) -> Graph:
        if family.is_empty():
            if empty_policy == EmptyFamilyPolicy.SIGNAL:
                return Graph(family_id=family.id, view_mode=view_mode, is_empty=True)
            return build_sample_graph(family.id, view_mode, self.layout)

        classified = self.classifier.classify(family.people(), family.head_of_family_id)

        draft = GraphDraft()
        for role, person, position in self.layout.arrange(classified):
            draft.add_node(GraphNode(
                id=person_node_id(role, person),
                kind=NodeKind.PERSON,
                position=position,
                label=person.full_name,
                role=role,
                person=person,
                href=person.href,
            ))

        for edge in resolve_edges(classified):
            draft.add_edge(edge)

        related = self._related_index(family, related_families, view_mode)
        self.links.resolve(family, classified, draft, related)

        return draft.to_graph(family_id=family.id, view_mode=view_mode)

    @staticmethod
    def _related_index(
        family: FamilyRecord,
        related_families: Optional[List[FamilyRecord]],
        view_mode: ViewMode
    ) -> Dict[int, FamilyRecord]:
        """Familias vinculadas disponibles: solo en vista expandida"""
        if view_mode != ViewMode.EXPANDED:
            return {}
        index: Dict[int, FamilyRecord] = {}
        for related in list(family.related_families) + list(related_families or []):
            if related.id != family.id:
                index.setdefault(related.id, related)
        return index


def build_family_graph(
    family: FamilyRecord,
    related_families: Optional[List[FamilyRecord]] = None,
    view_mode: ViewMode = ViewMode.COMPACT,
    empty_policy: EmptyFamilyPolicy = EmptyFamilyPolicy.SAMPLE,
    classifier: Optional[RoleClassifier] = None
) -> Graph:
    """Atajo funcional de GraphBuilder().build(...)"""
    return GraphBuilder(classifier=classifier).build(family, related_families, view_mode, empty_policy)
