"""
🧪 MÓDULO D: Posicionamiento
============================

Solo se verifican orden relativo y proporciones, no píxeles exactos.
"""

import pytest

from family_models import Person, Position, RelationshipRole
from layout_engine import (
    BASE_Y,
    CENTER_X,
    CHILD_SPACING,
    LEVEL_HEIGHT,
    SIBLING_STEP,
    SPOUSE_OFFSET,
    LayoutEngine,
)


def _people(*labels):
    return [Person(id=i + 1, relationship_label=label) for i, label in enumerate(labels)]


class TestConstants:

    @pytest.mark.critical
    @pytest.mark.unit
    def test_D1_constant_ordering(self):
        """D-1: LEVEL_HEIGHT > SPOUSE_OFFSET > CHILD_SPACING > SIBLING_STEP"""
        assert LEVEL_HEIGHT > SPOUSE_OFFSET > CHILD_SPACING > SIBLING_STEP > 0


class TestCore:

    @pytest.mark.critical
    @pytest.mark.unit
    def test_D2_head_and_spouse(self, layout):
        """D-2: Cabeza en el centro, cónyuge a SPOUSE_OFFSET en la misma fila"""
        head = layout.head_position()
        spouse = layout.spouse_position()

        assert (head.x, head.y) == (CENTER_X, BASE_Y)
        assert spouse.y == head.y
        assert spouse.x - head.x == SPOUSE_OFFSET

    @pytest.mark.critical
    @pytest.mark.unit
    def test_D3_children_centered_between_parents(self, layout):
        """D-3: Hijos una generación abajo, centrados entre cabeza y cónyuge"""
        positions = layout.child_positions(3, has_spouse=True)

        assert all(p.y == BASE_Y + LEVEL_HEIGHT for p in positions)
        xs = [p.x for p in positions]
        assert xs == sorted(xs)
        assert xs[1] - xs[0] == CHILD_SPACING
        assert sum(xs) / len(xs) == CENTER_X + SPOUSE_OFFSET / 2

    @pytest.mark.high
    @pytest.mark.unit
    def test_D4_children_centered_on_head_without_spouse(self, layout):
        positions = layout.child_positions(2, has_spouse=False)
        assert sum(p.x for p in positions) / 2 == CENTER_X

        single = layout.child_positions(1, has_spouse=False)
        assert single[0].x == CENTER_X

    @pytest.mark.high
    @pytest.mark.unit
    def test_D5_parents_above(self, layout):
        """D-5: Padres una generación arriba, separados por SPOUSE_OFFSET"""
        positions = layout.parent_positions(2)

        assert all(p.y == BASE_Y - LEVEL_HEIGHT for p in positions)
        assert positions[1].x - positions[0].x == SPOUSE_OFFSET
        assert (positions[0].x + positions[1].x) / 2 == CENTER_X

    @pytest.mark.high
    @pytest.mark.unit
    def test_D6_siblings_to_the_left(self, layout):
        """D-6: Hermanos a la izquierda de la cabeza, cada vez más lejos"""
        positions = layout.sibling_positions(3)

        assert all(p.y == BASE_Y for p in positions)
        assert [CENTER_X - p.x for p in positions] == [SIBLING_STEP, 2 * SIBLING_STEP, 3 * SIBLING_STEP]

    @pytest.mark.high
    @pytest.mark.unit
    def test_D7_others_far_right(self, layout):
        """D-7: Otros a la derecha del cónyuge, a media altura"""
        positions = layout.other_positions(2)

        assert all(p.y == BASE_Y + LEVEL_HEIGHT / 2 for p in positions)
        assert all(p.x > layout.spouse_position().x for p in positions)
        assert positions[0].x < positions[1].x


class TestArrange:

    @pytest.mark.high
    @pytest.mark.unit
    def test_arrange_covers_everyone(self, layout, classifier):
        people = _people("Cabeza", "Esposa", "Hijo", "Hija", "Padre", "Hermano", None)
        classified = classifier.classify(people)

        placed = layout.arrange(classified)

        assert len(placed) == len(people)
        roles = [role for role, _, _ in placed]
        assert roles[:2] == [RelationshipRole.HEAD, RelationshipRole.SPOUSE]
        assert roles.count(RelationshipRole.CHILD) == 2

    @pytest.mark.medium
    @pytest.mark.unit
    def test_linked_rows_stack_below_anchor(self, layout):
        anchor = Position(x=600, y=BASE_Y)

        first = layout.linked_row(anchor, 3, slot=0)
        second = layout.linked_row(anchor, 1, slot=1)

        assert all(p.y > anchor.y + LEVEL_HEIGHT for p in first)
        assert second[0].y > first[0].y
        assert second[0].x == anchor.x
        assert first[1].x == anchor.x

    @pytest.mark.medium
    @pytest.mark.unit
    def test_custom_origin(self):
        engine = LayoutEngine(center_x=0, base_y=0)
        assert engine.head_position() == Position(x=0, y=0)
        assert engine.parent_positions(1)[0] == Position(x=0, y=-LEVEL_HEIGHT)
