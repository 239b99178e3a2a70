"""Generation-time extensions for reatchify.

Extensions are Python classes that hook into a generation run: they see
the resolved configuration before any file is rendered, may rewrite every
generated file, and are told about the result or the failure.

Public API:
    - :class:`Extension` -- base class all extensions subclass.
    - :class:`HookRunner` -- runs hooks across loaded extensions in order.
    - :class:`ExtensionManager` -- entry-point discovery and registration.
"""

from reatchify.extensions.base import Extension
from reatchify.extensions.hooks import HookRunner
from reatchify.extensions.manager import ENTRY_POINT_GROUP, ExtensionManager

__all__ = [
    "ENTRY_POINT_GROUP",
    "Extension",
    "ExtensionManager",
    "HookRunner",
]
