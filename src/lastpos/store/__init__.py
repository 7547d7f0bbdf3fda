"""Store layer.

One :class:`NamespaceStore` per tracked namespace, each owning its Redis
connection handle.
"""

from lastpos.store.namespace import NamespaceStore

__all__ = ["NamespaceStore"]
