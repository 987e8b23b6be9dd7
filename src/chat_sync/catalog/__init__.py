"""Cached read-only catalogs of remote scopes and projects."""

from chat_sync.catalog.projects import ProjectCatalog
from chat_sync.catalog.scopes import ScopeCatalog

__all__ = ["ProjectCatalog", "ScopeCatalog"]
