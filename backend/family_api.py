"""
Cliente del API de familias
===========================
Lee familias de la aplicación de congregación (GET /api/familias/{id}).

Configuración (.env):
- FAMILY_API_URL        - URL base del API (por defecto http://localhost:3000)
- FAMILY_API_TIMEOUT    - timeout por petición en segundos (por defecto 10)
- FAMILY_API_CHURCH_ID  - iglesiaId con el que se filtran las consultas
- FAMILY_API_TOKEN      - token Bearer opcional

Carga:
- La familia principal primero; si falla, el error sube (DataFetchError).
- En vista expandida, una petición concurrente por cada familia vinculada;
  se espera a todas y las que fallan simplemente no se precargan.
"""

import os
import asyncio
import threading
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Callable

import requests
from dotenv import load_dotenv

from family_models import FamilyRecord, ViewMode
from graph_errors import DataFetchError
from validators import FamilyValidator

# Cargar variables de entorno desde .env
load_dotenv()


class FamilyAPIClient:
    """
    Cliente HTTP (requests) del API de familias.

    Uso:
        client = FamilyAPIClient()
        family = client.get_family(12)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        church_id: Optional[str] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        session_factory: Optional[Callable[[], requests.Session]] = None
    ):
        self.base_url = (base_url or os.getenv("FAMILY_API_URL", "http://localhost:3000")).rstrip("/")
        self.timeout = timeout if timeout is not None else float(os.getenv("FAMILY_API_TIMEOUT", "10"))
        self.church_id = church_id or os.getenv("FAMILY_API_CHURCH_ID")
        self.token = token or os.getenv("FAMILY_API_TOKEN")
        self.validator = FamilyValidator()

        if session is not None:
            session_factory = lambda: session
        self._session_factory = session_factory or requests.Session
        self._local = threading.local()

        print(f"🔧 Family API: {self.base_url} (timeout {self.timeout}s, iglesia {self.church_id or '-'})")

    @property
    def session(self) -> requests.Session:
        """Sesión del hilo actual: las cargas concurrentes corren en hilos distintos"""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            if self.token:
                session.headers["Authorization"] = f"Bearer {self.token}"
            self._local.session = session
        return session

    def _params(self) -> Dict[str, str]:
        if self.church_id:
            return {"iglesiaId": str(self.church_id)}
        return {}

    def fetch_family_payload(self, family_id: int) -> Dict[str, Any]:
        """
        JSON crudo de una familia.

        Raises:
            DataFetchError: error de red, respuesta no exitosa o cuerpo no-JSON
        """
        url = f"{self.base_url}/api/familias/{family_id}"
        try:
            response = self.session.get(url, params=self._params(), timeout=self.timeout)
        except requests.RequestException as e:
            raise DataFetchError(family_id, f"error de red: {e}") from e

        if not response.ok:
            message = response.reason or "respuesta no exitosa"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = body.get("error", message)
            raise DataFetchError(family_id, f"HTTP {response.status_code}: {message}", response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise DataFetchError(family_id, "la respuesta no es JSON", response.status_code) from e

    def get_family(self, family_id: int) -> FamilyRecord:
        """
        Obtener y validar una familia.

        Raises:
            DataFetchError: ver fetch_family_payload
            DataShapeError: el registro no trae miembros/visitas
        """
        payload = self.fetch_family_payload(family_id)
        return self.validator.parse(payload)

    def ping(self) -> bool:
        """¿Responde el API?"""
        try:
            response = self.session.get(self.base_url, timeout=self.timeout)
            return response.status_code < 500
        except requests.RequestException as e:
            print(f"⚠️ Family API no responde: {e}")
            return False


# ==================== Carga asíncrona ====================

@dataclass
class FamilyBundle:
    """Familia principal + familias vinculadas que se pudieron cargar"""
    family: FamilyRecord
    view_mode: ViewMode
    related_families: List[FamilyRecord] = field(default_factory=list)
    failed_family_ids: List[int] = field(default_factory=list)


def related_family_ids(family: FamilyRecord) -> List[int]:
    """Ids únicos de las familias del otro lado de cada vínculo, en orden de aparición"""
    ids = []
    for link in family.links():
        other_id = link.other_family_id(family.id)
        if other_id is not None and other_id != family.id and other_id not in ids:
            ids.append(other_id)
    return ids


async def load_family_bundle(
    client: FamilyAPIClient,
    family_id: int,
    view_mode: ViewMode = ViewMode.COMPACT
) -> FamilyBundle:
    """
    Cargar la familia principal y, en vista expandida, sus familias vinculadas.

    Raises:
        DataFetchError / DataShapeError: solo por la familia principal
    """
    print(f"📥 Cargando familia {family_id} ({view_mode.value})")
    family = await asyncio.to_thread(client.get_family, family_id)
    bundle = FamilyBundle(family=family, view_mode=view_mode)

    if view_mode != ViewMode.EXPANDED:
        return bundle

    ids = related_family_ids(family)
    if not ids:
        return bundle

    results = await asyncio.gather(
        *(asyncio.to_thread(client.get_family, other_id) for other_id in ids),
        return_exceptions=True
    )

    for other_id, result in zip(ids, results):
        if isinstance(result, Exception):
            print(f"⚠️ Familia vinculada {other_id} no disponible: {result}")
            bundle.failed_family_ids.append(other_id)
        elif isinstance(result, BaseException):
            raise result
        else:
            bundle.related_families.append(result)

    print(f"✅ Familia {family_id}: {len(bundle.related_families)}/{len(ids)} familias vinculadas precargadas")
    return bundle


# Singleton instance
_client_instance: Optional[FamilyAPIClient] = None

def get_family_client() -> FamilyAPIClient:
    """Obtener la instancia del cliente"""
    global _client_instance
    if _client_instance is None:
        _client_instance = FamilyAPIClient()
    return _client_instance
