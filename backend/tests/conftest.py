"""
Configuración de pytest y fixtures
==================================
"""

import asyncio
import sys
import os
import pytest

# Agregar backend al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from family_models import FamilyRecord
from graph_builder import GraphBuilder
from layout_engine import LayoutEngine
from role_classifier import LabelRoleClassifier
from graph_errors import DataFetchError
from validators import FamilyValidator, GraphValidator
from utils.date_utils import DateResolver, get_resolver


# ==================== Markers ====================

def pytest_configure(config):
    """Registro de markers propios"""
    config.addinivalue_line("markers", "critical: Critical priority tests")
    config.addinivalue_line("markers", "high: High priority tests")
    config.addinivalue_line("markers", "medium: Medium priority tests")
    config.addinivalue_line("markers", "low: Low priority tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "unit: Unit tests")


# ==================== Fixtures ====================

@pytest.fixture(scope="session")
def validator():
    """Family validator instance"""
    return FamilyValidator()


@pytest.fixture(scope="session")
def graph_validator():
    return GraphValidator()


@pytest.fixture(scope="session")
def date_resolver() -> DateResolver:
    return get_resolver()


@pytest.fixture
def classifier():
    return LabelRoleClassifier()


@pytest.fixture
def layout():
    return LayoutEngine()


@pytest.fixture
def builder():
    return GraphBuilder()


def _person(person_id, parentesco=None, nombres=None, apellidos="Pérez", **extra):
    data = {
        "id": person_id,
        "nombres": nombres or f"Persona{person_id}",
        "apellidos": apellidos,
        "estado": "Activo",
        "parentescoFamiliar": parentesco,
    }
    data.update(extra)
    return data


def _family(family_id, miembros=None, visitas=None, jefe_id=None, apellido="Pérez",
            vinculos_origen=None, vinculos_relacionados=None):
    data = {
        "id": family_id,
        "apellido": apellido,
        "nombre": None,
        "estado": "Activa",
        "miembros": miembros or [],
        "visitas": visitas or [],
        "vinculosOrigen": vinculos_origen or [],
        "vinculosRelacionados": vinculos_relacionados or [],
    }
    if jefe_id is not None:
        data["jefeFamilia"] = {"id": jefe_id, "nombres": "Jefe", "apellidos": apellido}
    return data


def _link(link_id, origen_id, relacionada_id, tipo="Familia política", miembro_id=None):
    data = {
        "id": link_id,
        "tipoVinculo": tipo,
        "descripcion": None,
        "familiaOrigenId": origen_id,
        "familiaRelacionadaId": relacionada_id,
        "familiaOrigen": {"id": origen_id, "apellido": f"Origen{origen_id}", "estado": "Activa"},
        "familiaRelacionada": {"id": relacionada_id, "apellido": f"Rel{relacionada_id}", "estado": "Activa"},
    }
    if miembro_id is not None:
        data["miembroVinculoId"] = miembro_id
        data["miembroVinculo"] = {"id": miembro_id, "nombres": "Vinculo", "apellidos": "X"}
    return data


@pytest.fixture
def person_data():
    """Fábrica de personas en formato del API"""
    return _person


@pytest.fixture
def family_data():
    """Fábrica de familias en formato del API"""
    return _family


@pytest.fixture
def link_data():
    """Fábrica de vínculos en formato del API"""
    return _link


@pytest.fixture
def nuclear_family():
    """Cabeza 1, cónyuge 2, hijo 3"""
    return FamilyRecord.model_validate(_family(
        100,
        miembros=[
            _person(1, "Cabeza de Familia"),
            _person(2, "Esposa"),
            _person(3, "Hijo"),
        ],
        jefe_id=1,
    ))


@pytest.fixture
def gonzalez_family_data():
    """Familia con todos los grupos de parentesco para pruebas completas"""
    return _family(
        200,
        apellido="González",
        jefe_id=10,
        miembros=[
            _person(11, "Esposo/a", nombres="Ana"),
            _person(10, None, nombres="Carlos"),
            _person(12, "Hijo/a", nombres="Luis"),
            _person(13, "Hija", nombres="Marta"),
            _person(14, "Padre", nombres="José"),
            _person(15, "Madre", nombres="Rosa"),
            _person(16, "Hermano/a", nombres="Pedro"),
        ],
        visitas=[
            _person(12, "Sobrino/a", nombres="Tomás"),
            _person(17, None, nombres="Lucía"),
        ],
    )


# ==================== API de familias simulado ====================

def _in_event_loop():
    """¿Se está ejecutando dentro del hilo del event loop?"""
    try:
        asyncio.get_running_loop()
        return True
    except RuntimeError:
        return False


class FakeFamilyClient:
    """
    Sustituto de FamilyAPIClient sin red.

    Las familias se guardan como payloads del API y pasan por el mismo
    FamilyValidator; las que no existen responden como un 404.
    `blocking_calls` cuenta las llamadas hechas desde el event loop.
    """

    def __init__(self, families=None, errors=None):
        self.families = {f["id"]: f for f in (families or [])}
        self.errors = errors or {}
        self.validator = FamilyValidator()
        self.calls = []
        self.blocking_calls = 0

    def get_family(self, family_id):
        self.calls.append(family_id)
        if _in_event_loop():
            self.blocking_calls += 1
        if family_id in self.errors:
            raise self.errors[family_id]
        payload = self.families.get(family_id)
        if payload is None:
            raise DataFetchError(family_id, "HTTP 404: Familia no encontrada", 404)
        return self.validator.parse(payload)

    def ping(self):
        if _in_event_loop():
            self.blocking_calls += 1
        return True


@pytest.fixture
def linked_families_data():
    """Familia 1 vinculada con 20 (cargable) y 30 (no existe)"""
    family_a = _family(
        1,
        jefe_id=1,
        miembros=[_person(1, "Cabeza"), _person(2, "Esposa"), _person(3, "Hijo")],
        vinculos_origen=[_link(7, 1, 20, tipo="Cuñados", miembro_id=2)],
        vinculos_relacionados=[_link(8, 30, 1, tipo="Compadres")],
    )
    family_b = _family(
        20,
        apellido="Rojas",
        jefe_id=10,
        miembros=[_person(10, "Cabeza"), _person(11, "Esposa")],
    )
    return [family_a, family_b]


@pytest.fixture
def fake_client(linked_families_data):
    return FakeFamilyClient(linked_families_data)


@pytest.fixture
def fake_client_class():
    return FakeFamilyClient
