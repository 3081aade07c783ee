"""
Fact Store Module
"""
from .fact_store import FactStore
from .loader import (
    LoadError,
    LoadReport,
    load_fact_store,
    load_fact_store_from_path,
    load_fact_store_with_report,
)
from .payload import DashboardPayload
from .records import Dimension, FactRecord

__all__ = [
    "Dimension",
    "FactRecord",
    "FactStore",
    "DashboardPayload",
    "LoadError",
    "LoadReport",
    "load_fact_store",
    "load_fact_store_from_path",
    "load_fact_store_with_report",
]
