"""Bundled implementation of a site's extension system."""

from cv.extension.system import ExtensionSystem

__all__ = ["ExtensionSystem"]
