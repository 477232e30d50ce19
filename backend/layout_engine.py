"""
Motor de posicionamiento
========================
Coordenadas deterministas por grupo de parentesco.

           padres (BASE_Y - LEVEL_HEIGHT)
  hermanos ... CABEZA ── cónyuge              otros (BASE_Y + LEVEL_HEIGHT/2)
           hijos (BASE_Y + LEVEL_HEIGHT)
           familias vinculadas (una fila por familia, debajo del ancla)

Solo el orden y las proporciones entre constantes son contractuales:
LEVEL_HEIGHT > SPOUSE_OFFSET > CHILD_SPACING > SIBLING_STEP
"""

from typing import List, Tuple

from family_models import Person, Position, RelationshipRole
from role_classifier import ClassifiedFamily


# Constantes espaciales (píxeles)
CENTER_X = 400
BASE_Y = 300
LEVEL_HEIGHT = 220    # Distancia vertical entre generaciones
SPOUSE_OFFSET = 200   # Separación horizontal cabeza-cónyuge
CHILD_SPACING = 180   # Separación horizontal entre hijos
SIBLING_STEP = 160    # Paso horizontal de los hermanos de la cabeza
OTHER_STEP = 160      # Paso horizontal de "otros"


class LayoutEngine:
    """
    Uso:
        engine = LayoutEngine()
        for role, person, position in engine.arrange(classified):
            ...
    """

    def __init__(self, center_x: float = CENTER_X, base_y: float = BASE_Y):
        self.center_x = center_x
        self.base_y = base_y

    # ==================== Núcleo ====================

    def head_position(self) -> Position:
        return Position(x=self.center_x, y=self.base_y)

    def spouse_position(self) -> Position:
        return Position(x=self.center_x + SPOUSE_OFFSET, y=self.base_y)

    def child_positions(self, count: int, has_spouse: bool) -> List[Position]:
        """Centrados bajo el punto medio cabeza-cónyuge (o bajo la cabeza)"""
        center = self.center_x + SPOUSE_OFFSET / 2 if has_spouse else self.center_x
        return self._centered_row(count, center, self.base_y + LEVEL_HEIGHT, CHILD_SPACING)

    def parent_positions(self, count: int) -> List[Position]:
        return self._centered_row(count, self.center_x, self.base_y - LEVEL_HEIGHT, SPOUSE_OFFSET)

    def sibling_positions(self, count: int) -> List[Position]:
        """A la izquierda de la cabeza, cada uno un paso más lejos"""
        return [
            Position(x=self.center_x - (i + 1) * SIBLING_STEP, y=self.base_y)
            for i in range(count)
        ]

    def other_positions(self, count: int) -> List[Position]:
        """Extremo derecho, a media altura entre la cabeza y los hijos"""
        start = self.center_x + 2 * SPOUSE_OFFSET
        return [
            Position(x=start + i * OTHER_STEP, y=self.base_y + LEVEL_HEIGHT / 2)
            for i in range(count)
        ]

    def arrange(self, classified: ClassifiedFamily) -> List[Tuple[RelationshipRole, Person, Position]]:
        """Posición de cada persona clasificada, en orden de prioridad"""
        placed = []

        if classified.head is not None:
            placed.append((RelationshipRole.HEAD, classified.head, self.head_position()))
        if classified.spouse is not None:
            placed.append((RelationshipRole.SPOUSE, classified.spouse, self.spouse_position()))

        groups = (
            (RelationshipRole.CHILD, classified.children,
             self.child_positions(len(classified.children), classified.spouse is not None)),
            (RelationshipRole.PARENT, classified.parents, self.parent_positions(len(classified.parents))),
            (RelationshipRole.SIBLING, classified.siblings, self.sibling_positions(len(classified.siblings))),
            (RelationshipRole.OTHER, classified.others, self.other_positions(len(classified.others))),
        )
        for role, people, positions in groups:
            placed.extend((role, person, pos) for person, pos in zip(people, positions))

        return placed

    # ==================== Familias vinculadas ====================

    def linked_row(self, anchor: Position, count: int, slot: int) -> List[Position]:
        """
        Fila de nodos externos (o el nodo agregado) debajo del ancla.

        Args:
            anchor: posición del nodo ancla
            count: nodos en la fila
            slot: orden de aparición de la familia vinculada (0, 1, ...)
        """
        y = anchor.y + LEVEL_HEIGHT * (2 + slot)
        return self._centered_row(count, anchor.x, y, CHILD_SPACING)

    # ==================== Utilidades ====================

    @staticmethod
    def _centered_row(count: int, center_x: float, y: float, spacing: float) -> List[Position]:
        start = center_x - (count - 1) * spacing / 2
        return [Position(x=start + i * spacing, y=y) for i in range(count)]
