"""
Validadores del grafo familiar
==============================
Comprobaciones antes y después de construir el grafo.

Categorías:
- S: Forma del registro (faltan colecciones, tipos incorrectos)
- P: Personas (duplicados, fechas imposibles)
- L: Vínculos entre familias (auto-vínculo, vínculo ajeno)
- G: Invariantes del grafo (ids únicos, aristas colgantes)

Los ERROR abortan la operación; los WARNING solo se registran.
"""

from datetime import date
from typing import Optional, List, Dict, Any, Tuple
from dataclasses import dataclass
from enum import Enum

from pydantic import ValidationError

from family_models import FamilyRecord, Graph, NodeKind
from graph_errors import DataShapeError, GraphBuildError
from utils.date_utils import resolve_date


class ValidationLevel(str, Enum):
    ERROR = "error"      # Bloquea la operación
    WARNING = "warning"  # Advertencia, se permite


@dataclass
class ValidationResult:
    """Resultado de una validación"""
    valid: bool
    level: ValidationLevel
    code: str
    message: str

    def __str__(self):
        icon = "❌" if self.level == ValidationLevel.ERROR else "⚠️"
        return f"{icon} [{self.code}] {self.message}"


def _error(code: str, message: str) -> ValidationResult:
    return ValidationResult(valid=False, level=ValidationLevel.ERROR, code=code, message=message)


def _warning(code: str, message: str) -> ValidationResult:
    return ValidationResult(valid=True, level=ValidationLevel.WARNING, code=code, message=message)


class FamilyValidator:
    """
    Validador de registros de familia.

    Uso:
        validator = FamilyValidator()
        results = validator.validate_payload_shape(payload)
        family = validator.parse(payload)   # DataShapeError si no es válido
    """

    REQUIRED_COLLECTIONS = ("miembros", "visitas")
    LINK_COLLECTIONS = ("vinculosOrigen", "vinculosRelacionados")

    # ==================== S: Forma ====================

    def validate_payload_shape(self, payload: Any) -> List[ValidationResult]:
        """S1-S4: El registro debe traer id y las colecciones de miembros y visitas"""
        results = []

        if not isinstance(payload, dict):
            results.append(_error("S1_NOT_AN_OBJECT", f"Se esperaba un objeto, llegó {type(payload).__name__}"))
            return results

        if payload.get("id") is None:
            results.append(_error("S2_MISSING_ID", "El registro de familia no tiene id"))

        for key in self.REQUIRED_COLLECTIONS:
            if key not in payload or payload[key] is None:
                results.append(_error("S3_MISSING_COLLECTION", f"Falta la colección '{key}'"))
            elif not isinstance(payload[key], list):
                results.append(_error("S4_NOT_A_LIST", f"'{key}' debe ser una lista"))

        for key in self.LINK_COLLECTIONS:
            value = payload.get(key)
            if value is not None and not isinstance(value, list):
                results.append(_error("S4_NOT_A_LIST", f"'{key}' debe ser una lista"))

        return results

    # ==================== P: Personas ====================

    def validate_people(self, family: FamilyRecord, today: Optional[date] = None) -> List[ValidationResult]:
        """P1-P2: Personas repetidas y fechas de nacimiento futuras"""
        results = []
        today = today or date.today()

        seen = set()
        for person in family.people():
            if person.identity in seen:
                results.append(_warning(
                    "P1_DUPLICATE_PERSON",
                    f"{person.person_type.value} {person.id} aparece más de una vez en la familia {family.id}"
                ))
            seen.add(person.identity)

            born = resolve_date(person.birth_date)
            if born is not None and born > today:
                results.append(_warning(
                    "P2_BIRTH_IN_FUTURE",
                    f"{person.full_name}: fecha de nacimiento {person.birth_date} en el futuro"
                ))

        return results

    # ==================== L: Vínculos ====================

    def validate_links(self, family: FamilyRecord) -> List[ValidationResult]:
        """L1-L2: Vínculos consigo misma o que no tocan a esta familia"""
        results = []

        for link in family.links():
            if not link.touches(family.id):
                results.append(_warning(
                    "L2_FOREIGN_LINK",
                    f"Vínculo {link.id} no involucra a la familia {family.id}"
                ))
            elif link.origin_family_id == link.related_family_id:
                results.append(_warning(
                    "L1_SELF_LINK",
                    f"Vínculo {link.id}: una familia no puede vincularse consigo misma"
                ))

        return results

    # ==================== Completa ====================

    def parse(self, payload: Any) -> FamilyRecord:
        """
        Validar y convertir un payload del API en FamilyRecord.

        Raises:
            DataShapeError: faltan colecciones o los tipos no corresponden
        """
        family_id = payload.get("id") if isinstance(payload, dict) else None

        errors = [r for r in self.validate_payload_shape(payload) if r.level == ValidationLevel.ERROR]
        if errors:
            raise DataShapeError(family_id, [r.message for r in errors])

        try:
            family = FamilyRecord.model_validate(payload)
        except ValidationError as e:
            details = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise DataShapeError(family_id, details) from e

        warnings = self.validate_people(family) + self.validate_links(family)
        if warnings:
            print(f"⚠️ Familia {family.id}: {format_validation_results(warnings)}")

        return family


class GraphValidator:
    """Invariantes de un grafo ya construido"""

    def validate_graph(self, graph: Graph) -> List[ValidationResult]:
        """G1-G4"""
        results = []

        node_ids = set()
        for node in graph.nodes:
            if node.id in node_ids:
                results.append(_error("G1_DUPLICATE_NODE", f"Id de nodo repetido: {node.id}"))
            node_ids.add(node.id)

        edge_ids = set()
        for edge in graph.edges:
            if edge.id in edge_ids:
                results.append(_error("G3_DUPLICATE_EDGE", f"Id de arista repetido: {edge.id}"))
            edge_ids.add(edge.id)

            for end in (edge.source, edge.target):
                if end not in node_ids:
                    results.append(_error("G2_DANGLING_EDGE", f"Arista {edge.id} apunta a nodo inexistente {end}"))

        placeholders: Dict[int, int] = {}
        for node in graph.nodes:
            if node.kind == NodeKind.FAMILY_PLACEHOLDER and node.external_family_id is not None:
                placeholders[node.external_family_id] = placeholders.get(node.external_family_id, 0) + 1
        for family_id, count in placeholders.items():
            if count > 1:
                results.append(_error("G4_DUPLICATE_PLACEHOLDER", f"{count} nodos para la familia {family_id}"))

        return results

    def check(self, graph: Graph) -> Tuple[bool, List[ValidationResult]]:
        results = self.validate_graph(graph)
        errors = [r for r in results if r.level == ValidationLevel.ERROR]
        return len(errors) == 0, results

    def ensure_valid(self, graph: Graph) -> Graph:
        """Raises GraphBuildError si el grafo rompe algún invariante"""
        is_valid, results = self.check(graph)
        if not is_valid:
            raise GraphBuildError(format_validation_results(results))
        return graph


# ==================== Utilidades ====================

def format_validation_results(results: List[ValidationResult]) -> str:
    """Formatear resultados para el log"""
    if not results:
        return "✅ Sin observaciones"
    return "\n".join(str(r) for r in results)


def parse_family_record(payload: Any) -> FamilyRecord:
    """Atajo: FamilyValidator().parse(payload)"""
    return FamilyValidator().parse(payload)
