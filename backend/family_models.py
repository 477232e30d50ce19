"""
Modelos de datos del grafo familiar
===================================

Entrada (formato del API de familias, claves en español):
- Person        - miembro o visita de una familia
- FamilyRecord  - familia con miembros, visitas y vínculos
- FamilyLink    - vínculo entre dos familias (tipoVinculo)

Salida (consumida por el lienzo interactivo):
- GraphNode / GraphEdge / Graph

Los campos de entrada aceptan tanto el alias del API ("nombres")
como el nombre Python ("first_name").
"""

from enum import Enum
from typing import Optional, List, Dict, Any, Tuple

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from utils.date_utils import calculate_age, average_age


# ==================== Enums ====================

class PersonType(str, Enum):
    MEMBER = "member"    # Miembro
    VISITOR = "visitor"  # Visita


class RelationshipRole(str, Enum):
    """Rol de una persona dentro de su familia (prioridad de arriba a abajo)"""
    HEAD = "head"        # Cabeza de familia
    SPOUSE = "spouse"    # Esposo/a, cónyuge
    CHILD = "child"      # Hijo/a
    PARENT = "parent"    # Padre/Madre
    SIBLING = "sibling"  # Hermano/a
    OTHER = "other"      # Cualquier otro parentesco


class NodeKind(str, Enum):
    PERSON = "person"
    FAMILY_PLACEHOLDER = "family-placeholder"


class EdgeKind(str, Enum):
    MARRIAGE = "marriage"
    PARENT_CHILD = "parent-child"
    ANCESTOR = "ancestor"
    SIBLING = "sibling"
    OTHER = "other"
    CROSS_FAMILY_LINK = "cross-family-link"


class ViewMode(str, Enum):
    """Vista compacta (familias vinculadas como un solo nodo) o expandida"""
    COMPACT = "compact"
    EXPANDED = "expanded"


class EmptyFamilyPolicy(str, Enum):
    """Qué devolver cuando la familia no tiene miembros ni visitas"""
    SAMPLE = "sample"  # Grafo ilustrativo de 3 nodos
    SIGNAL = "signal"  # Grafo vacío marcado con is_empty=True


# ==================== Entrada ====================

class PersonRef(BaseModel):
    """Referencia corta a una persona (jefeFamilia, miembroVinculo)"""
    id: int
    first_name: Optional[str] = Field(None, alias="nombres")
    last_name: Optional[str] = Field(None, alias="apellidos")

    class Config:
        extra = "ignore"
        populate_by_name = True


class Person(BaseModel):
    """Miembro o visita de una familia"""
    id: int
    first_name: Optional[str] = Field(None, alias="nombres")
    last_name: Optional[str] = Field(None, alias="apellidos")
    birth_date: Optional[str] = Field(None, alias="fechaNacimiento")
    status: Optional[str] = Field(None, alias="estado")
    photo: Optional[str] = Field(None, alias="foto")
    relationship_label: Optional[str] = Field(None, alias="parentescoFamiliar", description="Parentesco en texto libre")
    email: Optional[str] = Field(None, alias="correo")
    phone: Optional[str] = Field(None, alias="telefono")
    person_type: PersonType = Field(PersonType.MEMBER, description="Se asigna según la colección de origen")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @property
    def key(self) -> str:
        """Clave única dentro de una familia: los ids de miembros y visitas pueden coincidir"""
        if self.person_type == PersonType.VISITOR:
            return f"v{self.id}"
        return str(self.id)

    @property
    def identity(self) -> Tuple[str, int]:
        return (self.person_type.value, self.id)

    @computed_field
    @property
    def full_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else "Sin nombre"

    @computed_field
    @property
    def age(self) -> Optional[int]:
        return calculate_age(self.birth_date)

    @computed_field
    @property
    def href(self) -> str:
        if self.person_type == PersonType.VISITOR:
            return f"/visitas/{self.id}"
        return f"/miembros/{self.id}"


class FamilySummary(BaseModel):
    """Resumen de familia (como viene anidado en los vínculos)"""
    id: int
    surname: Optional[str] = Field(None, alias="apellido")
    name: Optional[str] = Field(None, alias="nombre")
    status: Optional[str] = Field(None, alias="estado")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @computed_field
    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"Familia {self.surname or self.id}"

    @computed_field
    @property
    def href(self) -> str:
        return f"/familias/{self.id}"


class FamilyLink(BaseModel):
    """Vínculo entre dos familias"""
    id: int
    link_type: Optional[str] = Field(None, alias="tipoVinculo", description="Categoría en texto libre")
    description: Optional[str] = Field(None, alias="descripcion")
    origin_family_id: Optional[int] = Field(None, alias="familiaOrigenId")
    related_family_id: Optional[int] = Field(None, alias="familiaRelacionadaId")
    origin_family: Optional[FamilySummary] = Field(None, alias="familiaOrigen")
    related_family: Optional[FamilySummary] = Field(None, alias="familiaRelacionada")
    connecting_member_id: Optional[int] = Field(None, alias="miembroVinculoId")
    connecting_member: Optional[PersonRef] = Field(None, alias="miembroVinculo")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @model_validator(mode="after")
    def _fill_ids_from_nested(self):
        if self.origin_family_id is None and self.origin_family is not None:
            self.origin_family_id = self.origin_family.id
        if self.related_family_id is None and self.related_family is not None:
            self.related_family_id = self.related_family.id
        if self.connecting_member_id is None and self.connecting_member is not None:
            self.connecting_member_id = self.connecting_member.id
        return self

    @property
    def label(self) -> str:
        return self.link_type or "Vínculo"

    def touches(self, family_id: int) -> bool:
        return family_id in (self.origin_family_id, self.related_family_id)

    def other_family_id(self, family_id: int) -> Optional[int]:
        """Id de la familia del otro lado del vínculo"""
        if self.origin_family_id == family_id:
            return self.related_family_id
        if self.related_family_id == family_id:
            return self.origin_family_id
        return None

    def other_family(self, family_id: int) -> Optional[FamilySummary]:
        if self.origin_family_id == family_id:
            return self.related_family
        return self.origin_family

    def pair_key(self) -> Tuple[int, int, int]:
        """Par de familias sin orden + id del vínculo (A→B y B→A son el mismo)"""
        a = self.origin_family_id or 0
        b = self.related_family_id or 0
        return (min(a, b), max(a, b), self.id)


class FamilyRecord(BaseModel):
    """Familia completa tal como la devuelve GET /api/familias/{id}"""
    id: int
    surname: Optional[str] = Field(None, alias="apellido")
    name: Optional[str] = Field(None, alias="nombre")
    status: Optional[str] = Field(None, alias="estado")
    head_of_family: Optional[PersonRef] = Field(None, alias="jefeFamilia")
    head_of_family_id: Optional[int] = Field(None, alias="jefeFamiliaId")
    members: List[Person] = Field(..., alias="miembros")
    visitors: List[Person] = Field(..., alias="visitas")
    origin_links: List[FamilyLink] = Field(default_factory=list, alias="vinculosOrigen")
    related_links: List[FamilyLink] = Field(default_factory=list, alias="vinculosRelacionados")
    related_families: List["FamilyRecord"] = Field(
        default_factory=list,
        description="Familias vinculadas ya cargadas (solo en vista expandida)"
    )

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("origin_links", "related_links", "related_families", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @model_validator(mode="after")
    def _normalize(self):
        # El tipo de persona lo decide la colección, no el payload
        for person in self.members:
            person.person_type = PersonType.MEMBER
        for person in self.visitors:
            person.person_type = PersonType.VISITOR

        if self.head_of_family_id is None and self.head_of_family is not None:
            self.head_of_family_id = self.head_of_family.id

        # En vinculosOrigen esta familia es el origen; en vinculosRelacionados, la relacionada
        for link in self.origin_links:
            if link.origin_family_id is None:
                link.origin_family_id = self.id
        for link in self.related_links:
            if link.related_family_id is None:
                link.related_family_id = self.id
        return self

    def people(self) -> List[Person]:
        """Miembros seguidos de visitas"""
        return list(self.members) + list(self.visitors)

    def links(self) -> List[FamilyLink]:
        return list(self.origin_links) + list(self.related_links)

    def is_empty(self) -> bool:
        return not self.members and not self.visitors

    def summary(self) -> FamilySummary:
        return FamilySummary(id=self.id, surname=self.surname, name=self.name, status=self.status)

    def statistics(self) -> Dict[str, Any]:
        """Estadísticas de la familia (como las calcula la ruta de familias)"""
        active_members = len([m for m in self.members if m.status == "Activo"])
        active_visitors = len([v for v in self.visitors if v.status == "Activa"])
        people = self.people()
        return {
            "total_members": len(self.members),
            "total_visitors": len(self.visitors),
            "total_people": len(people),
            "active_members": active_members,
            "active_visitors": active_visitors,
            "active_people": active_members + active_visitors,
            "average_age": average_age([p.birth_date for p in people]),
        }


FamilyRecord.model_rebuild()


# ==================== Salida ====================

class Position(BaseModel):
    x: float
    y: float


class EdgeStyle(BaseModel):
    """Metadatos puramente visuales"""
    stroke_width: float = 2
    dashed: bool = False
    animated: bool = False


class GraphNode(BaseModel):
    id: str
    kind: NodeKind
    position: Position
    label: str
    role: Optional[RelationshipRole] = None
    person: Optional[Person] = None
    family: Optional[FamilySummary] = None
    external: bool = False
    external_family_id: Optional[int] = None
    href: Optional[str] = Field(None, description="Referencia opaca para el click del lienzo")


class GraphEdge(BaseModel):
    id: str
    source: str
    target: str
    kind: EdgeKind
    label: str
    via: Optional[str] = Field(None, description="Sub-etiqueta: desde qué progenitor sale la arista")
    style: EdgeStyle = Field(default_factory=EdgeStyle)


class Graph(BaseModel):
    family_id: Optional[int] = None
    view_mode: ViewMode = ViewMode.COMPACT
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)
    is_sample: bool = False
    is_empty: bool = False

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def edge_ids(self) -> List[str]:
        return [e.id for e in self.edges]

    def edges_of_kind(self, kind: EdgeKind) -> List[GraphEdge]:
        return [e for e in self.edges if e.kind == kind]


class GraphDraft:
    """
    Acumulador de nodos/aristas durante una construcción.

    No valida: los invariantes (ids únicos, sin aristas colgantes)
    se comprueban al final con GraphValidator.
    """

    def __init__(self):
        self.nodes: List[GraphNode] = []
        self.edges: List[GraphEdge] = []
        self._index: Dict[str, GraphNode] = {}

    def add_node(self, node: GraphNode) -> GraphNode:
        self.nodes.append(node)
        self._index.setdefault(node.id, node)
        return node

    def add_edge(self, edge: GraphEdge) -> GraphEdge:
        self.edges.append(edge)
        return edge

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._index.get(node_id)

    def to_graph(self, **meta) -> Graph:
        return Graph(nodes=list(self.nodes), edges=list(self.edges), **meta)
