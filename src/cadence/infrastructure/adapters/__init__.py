# Infrastructure Adapters Package
from .json_store import InMemoryRecordStore, JsonRecordStore
from .yaml_catalog import InMemoryCatalog, YamlCatalog

__all__ = ["JsonRecordStore", "InMemoryRecordStore", "YamlCatalog", "InMemoryCatalog"]
