"""
Clasificador de roles
=====================
Reparte las personas de una familia en seis grupos disjuntos:
cabeza, cónyuge, hijos, padres, hermanos y otros.

Prioridad (el primero que coincide gana, la persona sale del resto):
1. Cabeza   - id explícito del jefe de familia, o primer parentesco "cabeza",
              o la primera persona de la lista
2. Cónyuge  - primer parentesco de esposo/a
3. Hijos    - todos los parentescos de hijo/a
4. Padres   - todos los parentescos de padre/madre
5. Hermanos - todos los parentescos de hermano/a
6. Otros    - el resto

El parentesco es texto libre: se compara sin mayúsculas ni acentos
("Cónyuge" == "conyuge"). Fuera de este módulo solo se usa RelationshipRole.
"""

import unicodedata
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Iterator, Tuple

from family_models import Person, PersonType, RelationshipRole


def fold_label(label: Optional[str]) -> str:
    """Minúsculas y sin diacríticos"""
    if not label:
        return ""
    # Texto UTF-8 leído como latin-1: "CÃ³nyuge" → "Cónyuge"
    try:
        label = label.encode("latin-1").decode("utf-8")
    except (UnicodeEncodeError, UnicodeDecodeError):
        pass
    decomposed = unicodedata.normalize("NFKD", label)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def person_node_id(role: RelationshipRole, person: Person) -> str:
    """Id determinista del nodo: "spouse-2", "child-v7" (visita 7)"""
    return f"{role.value}-{person.key}"


@dataclass
class ClassifiedFamily:
    """Resultado de la clasificación: seis particiones disjuntas"""
    head: Optional[Person] = None
    spouse: Optional[Person] = None
    children: List[Person] = field(default_factory=list)
    parents: List[Person] = field(default_factory=list)
    siblings: List[Person] = field(default_factory=list)
    others: List[Person] = field(default_factory=list)

    def partitions(self) -> Dict[RelationshipRole, List[Person]]:
        return {
            RelationshipRole.HEAD: [self.head] if self.head else [],
            RelationshipRole.SPOUSE: [self.spouse] if self.spouse else [],
            RelationshipRole.CHILD: self.children,
            RelationshipRole.PARENT: self.parents,
            RelationshipRole.SIBLING: self.siblings,
            RelationshipRole.OTHER: self.others,
        }

    def iter_people(self) -> Iterator[Tuple[RelationshipRole, Person]]:
        for role, people in self.partitions().items():
            for person in people:
                yield role, person

    def role_of(self, person: Person) -> Optional[RelationshipRole]:
        for role, candidate in self.iter_people():
            if candidate.identity == person.identity:
                return role
        return None

    @property
    def head_node_id(self) -> Optional[str]:
        if self.head is None:
            return None
        return person_node_id(RelationshipRole.HEAD, self.head)

    @property
    def spouse_node_id(self) -> Optional[str]:
        if self.spouse is None:
            return None
        return person_node_id(RelationshipRole.SPOUSE, self.spouse)

    def find_member(self, person_id: int) -> Optional[Tuple[RelationshipRole, Person]]:
        """Buscar por id: primero entre miembros, luego entre visitas"""
        matches = [(role, p) for role, p in self.iter_people() if p.id == person_id]
        for role, person in matches:
            if person.person_type == PersonType.MEMBER:
                return role, person
        return matches[0] if matches else None

    def __len__(self):
        return sum(len(people) for people in self.partitions().values())


class RoleClassifier:
    """
    Interfaz del clasificador.

    Las subclases solo deciden el rol de un parentesco; el reparto
    por prioridad es común.
    """

    # Orden de prioridad de los grupos que dependen del parentesco
    LABEL_ROLES = (
        RelationshipRole.SPOUSE,
        RelationshipRole.CHILD,
        RelationshipRole.PARENT,
        RelationshipRole.SIBLING,
    )

    def matches(self, label: Optional[str], role: RelationshipRole) -> bool:
        raise NotImplementedError

    def role_for_label(self, label: Optional[str]) -> RelationshipRole:
        """Rol que tendría una persona solo por su parentesco"""
        for role in (RelationshipRole.HEAD,) + self.LABEL_ROLES:
            if self.matches(label, role):
                return role
        return RelationshipRole.OTHER

    def classify(self, people: List[Person], head_of_family_id: Optional[int] = None) -> ClassifiedFamily:
        result = ClassifiedFamily()
        remaining = list(people)
        if not remaining:
            return result

        result.head = self._pick_head(remaining, head_of_family_id)
        remaining = [p for p in remaining if p is not result.head]

        spouse = next((p for p in remaining if self.matches(p.relationship_label, RelationshipRole.SPOUSE)), None)
        if spouse is not None:
            result.spouse = spouse
            remaining = [p for p in remaining if p is not spouse]

        for role, bucket in (
            (RelationshipRole.CHILD, result.children),
            (RelationshipRole.PARENT, result.parents),
            (RelationshipRole.SIBLING, result.siblings),
        ):
            matched = [p for p in remaining if self.matches(p.relationship_label, role)]
            bucket.extend(matched)
            remaining = [p for p in remaining if not any(p is m for m in matched)]

        result.others = remaining
        return result

    def _pick_head(self, people: List[Person], head_of_family_id: Optional[int]) -> Person:
        if head_of_family_id is not None:
            # jefeFamilia referencia a un miembro
            by_id = [p for p in people if p.id == head_of_family_id]
            for person in by_id:
                if person.person_type == PersonType.MEMBER:
                    return person
            if by_id:
                return by_id[0]

        for person in people:
            if self.matches(person.relationship_label, RelationshipRole.HEAD):
                return person

        return people[0]


class LabelRoleClassifier(RoleClassifier):
    """Clasificación por subcadenas del parentesco (español e inglés)"""

    TERMS = {
        RelationshipRole.HEAD: ("head", "cabeza", "jefe"),
        RelationshipRole.SPOUSE: ("spouse", "esposo", "esposa", "conyuge", "husband", "wife"),
        RelationshipRole.CHILD: ("child", "hijo", "hija", "daughter"),
        RelationshipRole.PARENT: ("parent", "padre", "madre", "father", "mother"),
        RelationshipRole.SIBLING: ("sibling", "hermano", "hermana", "brother", "sister"),
    }

    def matches(self, label: Optional[str], role: RelationshipRole) -> bool:
        folded = fold_label(label)
        if not folded:
            return False
        return any(term in folded for term in self.TERMS.get(role, ()))


_default_classifier: Optional[RoleClassifier] = None

def get_classifier() -> RoleClassifier:
    """Clasificador por defecto"""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = LabelRoleClassifier()
    return _default_classifier
