"""
Resolution layer: endpoint selection, parameter extraction and typed payloads.
"""
from .endpoint_matcher import EndpointMatcher, EndpointScore
from .module_resolver import ModuleNameResolver, ModuleResolution
from .parameter_extractor import ParameterExtractor, parameter_kind
from .payload import ObjectValue, Payload, Primitive
from .relevance import TopicalRelevanceScorer

__all__ = [
    "EndpointMatcher",
    "EndpointScore",
    "ModuleNameResolver",
    "ModuleResolution",
    "ParameterExtractor",
    "parameter_kind",
    "ObjectValue",
    "Payload",
    "Primitive",
    "TopicalRelevanceScorer",
]
