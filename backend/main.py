from dotenv import load_dotenv
load_dotenv()  # Cargar variables de entorno PRIMERO

"""
Árbol Familiar API
==================
Backend FastAPI del grafo de relaciones familiares.

Recibe familias del API de la congregación (miembros, visitas, vínculos)
y devuelve un grafo posicionado {nodes, edges} para el lienzo interactivo.

Endpoints:
- GET  /api/v1/familias/{id}/grafo         - cargar familia y construir su grafo
- GET  /api/v1/familias/{id}/estadisticas  - totales y edad promedio
- POST /api/v1/grafo                       - construir desde registros enviados
"""

import asyncio
from typing import Optional, List, Dict, Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Módulos locales
from family_models import EmptyFamilyPolicy, ViewMode
from graph_builder import GraphBuilder
from graph_errors import DataFetchError, DataShapeError, GraphBuildError
from graph_service import GraphService
from validators import FamilyValidator


# ==================== Pydantic Models ====================

class GraphBuildRequest(BaseModel):
    """
    Construcción sin llamar al API de familias.

    Los registros llevan el mismo formato que GET /api/familias/{id}.
    """
    family: Dict[str, Any] = Field(..., description="Familia principal")
    related_families: List[Dict[str, Any]] = Field(default_factory=list, description="Familias vinculadas precargadas")
    view_mode: ViewMode = Field(ViewMode.COMPACT, description="compact | expanded")
    empty_policy: EmptyFamilyPolicy = Field(EmptyFamilyPolicy.SAMPLE, description="sample | signal")

    class Config:
        extra = "ignore"


# ==================== FastAPI App ====================

app = FastAPI(
    title="Árbol Familiar API",
    description="Grafo de relaciones familiares para la gestión de congregaciones",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Servicio de grafo (carga + construcción)
service: Optional[GraphService] = None

# Validador de registros enviados por POST
validator = FamilyValidator()

# Constructor para POST /api/v1/grafo
builder = GraphBuilder()


@app.on_event("startup")
async def startup():
    """Inicialización al arrancar"""
    global service
    if service is None:
        service = GraphService()
    print("✅ Servicio de grafo familiar listo!")


def _to_http(e: Exception) -> HTTPException:
    """Errores del dominio → respuestas HTTP"""
    if isinstance(e, DataFetchError):
        status = 404 if e.status_code == 404 else 502
        return HTTPException(status, str(e))
    if isinstance(e, DataShapeError):
        return HTTPException(422, {"error": "Datos de familia inválidos", "details": e.details})
    return HTTPException(500, "No se pudo construir el árbol familiar")


# ==================== Health ====================

@app.get("/")
async def root():
    return {
        "service": "Árbol Familiar API",
        "version": "1.0.0",
        "status": "running",
        "view_modes": [m.value for m in ViewMode],
    }


@app.get("/health")
async def health():
    """Health check"""
    upstream_ok = False
    if service:
        upstream_ok = await asyncio.to_thread(service.client.ping)

    return {
        "status": "healthy" if upstream_ok else "degraded",
        "family_api": "reachable" if upstream_ok else "unreachable",
    }


# ==================== Grafo ====================

@app.get("/api/v1/familias/{family_id}/grafo")
async def get_family_graph(
    family_id: int,
    view: ViewMode = Query(ViewMode.COMPACT, description="compact | expanded"),
    empty: EmptyFamilyPolicy = Query(EmptyFamilyPolicy.SAMPLE, description="sample | signal")
):
    """
    Cargar la familia y construir su grafo.

    En vista expandida se precargan las familias vinculadas; las que
    no se puedan obtener aparecen como un nodo agregado.
    """
    if not service:
        raise HTTPException(500, "Service not available")

    print(f"📥 GET /api/v1/familias/{family_id}/grafo?view={view.value}")

    try:
        graph = await service.load_and_build(family_id, view, empty)
    except (DataFetchError, DataShapeError, GraphBuildError) as e:
        raise _to_http(e)

    return graph.model_dump(mode="json")


@app.post("/api/v1/grafo")
async def build_graph(payload: GraphBuildRequest):
    """Construir el grafo a partir de registros ya cargados"""
    try:
        family = validator.parse(payload.family)
        related = [validator.parse(r) for r in payload.related_families]
        graph = builder.build(family, related, payload.view_mode, payload.empty_policy)
    except (DataShapeError, GraphBuildError) as e:
        print(f"❌ POST /api/v1/grafo: {e}")
        raise _to_http(e)

    return graph.model_dump(mode="json")


# ==================== Estadísticas ====================

@app.get("/api/v1/familias/{family_id}/estadisticas")
async def get_family_statistics(family_id: int):
    """Totales de miembros/visitas, activos y edad promedio"""
    if not service:
        raise HTTPException(500, "Service not available")

    try:
        family = await asyncio.to_thread(service.client.get_family, family_id)
    except (DataFetchError, DataShapeError) as e:
        raise _to_http(e)

    return {
        "family": family.summary().model_dump(mode="json"),
        **family.statistics(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
