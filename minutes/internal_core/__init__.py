from .config import EditorConfig, load_config
from .kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

__all__ = [
    "EditorConfig",
    "load_config",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
]
