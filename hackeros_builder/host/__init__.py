"""Host inspection module.

This module decides whether the running system may build a given track.
"""

from hackeros_builder.host.compat import is_compatible

__all__ = ["is_compatible"]
