"""Command line client for the GeoSeis statistics service.

The Typer application lives in ``cli.app`` and is not re-exported here, so
``cli.app`` keeps resolving to the module and its attributes stay patchable.
"""

__all__ = []
