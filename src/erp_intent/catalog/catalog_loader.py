"""
Loads endpoint catalogs from JSON.

Catalog format (one file per ERP, named ``<erp_id>.json``):

    {
      "empresa": {"nombre": "...", "baseUrl": "https://..."},
      "modulos": [
        {"nombre": "CLINICO",
         "crear": [...], "leer": [...], "actualizar": [...], "eliminar": [...]}
      ]
    }

Each endpoint: ``id, endpoint, nombreReferencia, descripcion, metodo,
parametros[]`` plus optional ``intencion`` and ``tipoSalida``. Each parameter:
``nombre, tipo, obligatorio`` and, for objects, ``estructura.propiedades[]``.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import ConfigurationError
from ..interaction.intent_types import CrudAction
from ..models import EndpointDescriptor, EndpointParameter, EndpointProperty, ParamType
from .endpoint_catalog import EndpointCatalog

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_DIR = Path(__file__).parent.parent / "data" / "catalogs"

CRUD_SECTIONS = {
    "crear": CrudAction.CREATE,
    "leer": CrudAction.READ,
    "actualizar": CrudAction.UPDATE,
    "eliminar": CrudAction.DELETE,
}


def _parse_property(data: Dict[str, Any]) -> EndpointProperty:
    return EndpointProperty(
        name=data["nombre"],
        type=ParamType.parse(data.get("tipo", "string")),
        required=not data.get("opcional", True),
    )


def _parse_parameter(data: Dict[str, Any]) -> EndpointParameter:
    param_type = ParamType.parse(data.get("tipo", "string"))
    structure = data.get("estructura") or {}
    properties = [_parse_property(p) for p in structure.get("propiedades", [])]
    if structure.get("esObjeto") and param_type is not ParamType.OBJECT:
        param_type = ParamType.OBJECT
    return EndpointParameter(
        name=data["nombre"],
        type=param_type,
        required=bool(data.get("obligatorio", False)) and not data.get("opcional", False),
        properties=properties,
    )


def _parse_endpoint(data: Dict[str, Any]) -> EndpointDescriptor:
    return EndpointDescriptor(
        id=int(data["id"]),
        route=data["endpoint"],
        http_method=(data.get("metodo") or "GET").upper(),
        human_name=data.get("nombreReferencia", ""),
        description=data.get("descripcion", ""),
        parameters=[_parse_parameter(p) for p in data.get("parametros", [])],
        intent=data.get("intencion"),
        output_type=data.get("tipoSalida") or data.get("tipo_salida"),
    )


def parse_catalog(data: Dict[str, Any], erp_id: str) -> EndpointCatalog:
    """
    Build a catalog from parsed JSON.

    :param data: Parsed catalog document
    :param erp_id: ERP identifier the catalog belongs to
    :raises ConfigurationError: if the document is malformed
    """
    if not isinstance(data, dict) or "modulos" not in data:
        raise ConfigurationError(f"Catalog '{erp_id}' must contain a 'modulos' list")

    company = data.get("empresa") or {}
    endpoints: Dict[str, Dict[CrudAction, List[EndpointDescriptor]]] = {}
    try:
        for module in data["modulos"]:
            name = module["nombre"].upper()
            sections = endpoints.setdefault(name, {})
            for key, action in CRUD_SECTIONS.items():
                sections.setdefault(action, []).extend(
                    _parse_endpoint(ep) for ep in module.get(key, [])
                )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed catalog '{erp_id}': {e}") from e

    return EndpointCatalog(
        erp_id=erp_id,
        company_name=company.get("nombre", erp_id),
        base_url=company.get("baseUrl", ""),
        endpoints=endpoints,
    )


def load_catalog(path: Path, erp_id: Optional[str] = None) -> EndpointCatalog:
    """
    Load one catalog file.

    :param path: JSON file
    :param erp_id: Defaults to the file stem
    :raises ConfigurationError: if the file is missing or not valid JSON
    """
    path = Path(path)
    erp_id = erp_id or path.stem
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Catalog file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Catalog file {path} is not valid JSON: {e}") from e

    catalog = parse_catalog(data, erp_id)
    logger.info(f"Loaded catalog '{erp_id}' from {path} ({catalog.endpoint_count} endpoints)")
    return catalog


def load_catalog_dir(directory: Optional[Path] = None) -> Dict[str, EndpointCatalog]:
    """
    Load every ``*.json`` catalog in a directory, keyed by file stem.

    :param directory: Defaults to the packaged sample catalogs
    """
    directory = Path(directory) if directory else DEFAULT_CATALOG_DIR
    if not directory.is_dir():
        raise ConfigurationError(f"Catalog directory not found: {directory}")
    return {path.stem: load_catalog(path) for path in sorted(directory.glob("*.json"))}
