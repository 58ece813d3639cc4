"""
Read-only endpoint catalogs.

An empty lookup is a normal outcome: the matcher turns it into
NoEndpointCandidate, never the catalog.
"""
import logging
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from ..interaction.intent_types import CrudAction
from ..models import EndpointDescriptor

logger = logging.getLogger(__name__)


class EndpointCatalog:
    """
    Endpoints of one ERP, grouped by module and action.

    Usage:
        catalog.lookup("CLINICO", CrudAction.READ)
    """

    def __init__(
        self,
        erp_id: str,
        endpoints: Dict[str, Dict[CrudAction, List[EndpointDescriptor]]],
        company_name: str = "",
        base_url: str = "",
    ):
        self.erp_id = erp_id
        self.company_name = company_name
        self.base_url = base_url.rstrip("/")
        self._endpoints: Mapping[str, Mapping[CrudAction, tuple]] = MappingProxyType({
            module.upper(): MappingProxyType({action: tuple(eps) for action, eps in sections.items()})
            for module, sections in endpoints.items()
        })

    @property
    def modules(self) -> List[str]:
        return list(self._endpoints.keys())

    @property
    def endpoint_count(self) -> int:
        return sum(1 for _ in self)

    def lookup(self, module: str, action: CrudAction) -> List[EndpointDescriptor]:
        """Endpoints for (module, action); empty list if none."""
        sections = self._endpoints.get((module or "").upper())
        if not sections:
            return []
        return list(sections.get(action, ()))

    def get_by_id(self, endpoint_id: int) -> Optional[EndpointDescriptor]:
        for endpoint in self:
            if endpoint.id == endpoint_id:
                return endpoint
        return None

    def build_url(self, endpoint: EndpointDescriptor) -> str:
        """Absolute URL for an endpoint (the route alone without a base URL)."""
        return f"{self.base_url}{endpoint.route}"

    def __iter__(self) -> Iterator[EndpointDescriptor]:
        for sections in self._endpoints.values():
            for endpoints in sections.values():
                yield from endpoints


class CatalogRegistry:
    """Catalogs keyed by ERP id. Unknown ERPs resolve to an empty catalog."""

    def __init__(self, catalogs: Optional[Mapping[str, EndpointCatalog]] = None):
        self._catalogs: Dict[str, EndpointCatalog] = dict(catalogs or {})

    def register(self, catalog: EndpointCatalog) -> None:
        self._catalogs[catalog.erp_id] = catalog

    def get(self, erp_id: str) -> EndpointCatalog:
        catalog = self._catalogs.get(erp_id)
        if catalog is None:
            logger.warning(f"No catalog registered for ERP '{erp_id}'")
            return EndpointCatalog(erp_id=erp_id, endpoints={})
        return catalog

    @property
    def erp_ids(self) -> List[str]:
        return sorted(self._catalogs)

    def __contains__(self, erp_id: str) -> bool:
        return erp_id in self._catalogs
