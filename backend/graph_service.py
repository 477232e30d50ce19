"""
Servicio de grafo familiar
==========================
Carga (asíncrona) + construcción (síncrona) en un solo paso.

Cada carga o cambio de vista reconstruye el grafo completo.
Si algo falla, el grafo anterior se descarta: `current_graph` queda en None.
"""

from typing import Optional

from family_api import FamilyAPIClient, FamilyBundle, get_family_client, load_family_bundle
from family_models import EmptyFamilyPolicy, Graph, ViewMode
from graph_builder import GraphBuilder
from graph_errors import DataFetchError, DataShapeError, GraphBuildError


class GraphService:
    """
    Uso:
        service = GraphService()
        graph = await service.load_and_build(12, ViewMode.EXPANDED)
        graph = await service.toggle_view()
    """

    def __init__(self, client: Optional[FamilyAPIClient] = None, builder: Optional[GraphBuilder] = None):
        self.client = client or get_family_client()
        self.builder = builder or GraphBuilder()
        self.current_graph: Optional[Graph] = None
        self.current_family_id: Optional[int] = None
        self.view_mode: ViewMode = ViewMode.COMPACT
        self.last_bundle: Optional[FamilyBundle] = None

    async def load_and_build(
        self,
        family_id: int,
        view_mode: ViewMode = ViewMode.COMPACT,
        empty_policy: EmptyFamilyPolicy = EmptyFamilyPolicy.SAMPLE
    ) -> Graph:
        """
        Cargar la familia y construir su grafo desde cero.

        Raises:
            DataFetchError: no se pudo obtener la familia principal
            DataShapeError: la familia principal llegó sin miembros/visitas
            GraphBuildError: fallo inesperado (mensaje genérico)
        """
        self.current_family_id = family_id
        self.view_mode = view_mode

        try:
            bundle = await load_family_bundle(self.client, family_id, view_mode)
            graph = self.builder.build(bundle.family, bundle.related_families, view_mode, empty_policy)
        except (DataFetchError, DataShapeError, GraphBuildError) as e:
            self._clear()
            print(f"❌ Grafo de la familia {family_id}: {e}")
            raise
        except Exception as e:
            self._clear()
            print(f"❌ Error inesperado en la familia {family_id}: {e}")
            raise GraphBuildError("No se pudo construir el árbol familiar") from e

        self.last_bundle = bundle
        self.current_graph = graph
        print(f"✅ Grafo de la familia {family_id}: {len(graph.nodes)} nodos, {len(graph.edges)} aristas")
        return graph

    async def toggle_view(self, empty_policy: EmptyFamilyPolicy = EmptyFamilyPolicy.SAMPLE) -> Graph:
        """Compacta ⟷ expandida: recarga y reconstruye todo"""
        if self.current_family_id is None:
            raise GraphBuildError("No hay familia cargada")
        new_mode = ViewMode.COMPACT if self.view_mode == ViewMode.EXPANDED else ViewMode.EXPANDED
        return await self.load_and_build(self.current_family_id, new_mode, empty_policy)

    def _clear(self):
        self.current_graph = None
        self.last_bundle = None
