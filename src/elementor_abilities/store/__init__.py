"""
elementor_abilities.store - Document store backends.
"""

from elementor_abilities.store.base import DocumentStore, PostRecord, TemplateRecord
from elementor_abilities.store.memory import JsonFileStore, MemoryStore
from elementor_abilities.store.wpcli import WPCLIStore

__all__ = [
    "DocumentStore",
    "JsonFileStore",
    "MemoryStore",
    "PostRecord",
    "TemplateRecord",
    "WPCLIStore",
]
