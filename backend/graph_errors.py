"""
Errores del servicio de grafo familiar
======================================

- DataFetchError  - respuesta no exitosa al pedir una familia
- DataShapeError  - registro recibido sin colecciones obligatorias
- GraphBuildError - fallo inesperado al clasificar/posicionar/resolver
"""

from typing import Optional, List


class GraphServiceError(Exception):
    """Base de todos los errores del servicio"""


class DataFetchError(GraphServiceError):
    """Fallo al obtener una familia del API externo"""

    def __init__(self, family_id: int, message: str, status_code: Optional[int] = None):
        self.family_id = family_id
        self.status_code = status_code
        super().__init__(f"Familia {family_id}: {message}")


class DataShapeError(GraphServiceError):
    """Registro de familia con forma inválida (faltan miembros/visitas)"""

    def __init__(self, family_id: Optional[int], details: List[str]):
        self.family_id = family_id
        self.details = details
        super().__init__(f"Familia {family_id}: datos inválidos ({'; '.join(details)})")


class GraphBuildError(GraphServiceError):
    """Fallo durante la construcción del grafo"""
