from conservation_watch.adapters.base import AdapterFactory, AdapterRegistry, JsonSourceAdapter, SourceAdapter
from conservation_watch.adapters.court_listener import CourtListenerAdapter
from conservation_watch.adapters.federal_register import FederalRegisterAdapter
from conservation_watch.adapters.open_states import OpenStatesAdapter
from conservation_watch.adapters.regulations_gov import RegulationsGovAdapter

__all__ = [
    "AdapterFactory",
    "AdapterRegistry",
    "CourtListenerAdapter",
    "FederalRegisterAdapter",
    "JsonSourceAdapter",
    "OpenStatesAdapter",
    "RegulationsGovAdapter",
    "SourceAdapter",
]
