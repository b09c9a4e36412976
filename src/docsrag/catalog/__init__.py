"""Collection catalog."""

from docsrag.catalog.models import CollectionDescriptor, CollectionKind
from docsrag.catalog.ops import CollectionCatalog

__all__ = ["CollectionCatalog", "CollectionDescriptor", "CollectionKind"]
