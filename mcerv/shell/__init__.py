"""Public entry points for the command shell.

This package-level module provides a stable import surface for higher layers
(`mcerv_cli`) without exposing private helpers.
"""

from mcerv.shell import api as _api

# Re-export the public API defined by api without duplicating symbol lists.
for _name in _api.__all__:
    globals()[_name] = getattr(_api, _name)

__all__ = list(_api.__all__)
