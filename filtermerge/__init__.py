"""Merge filter package.

Submodules are imported explicitly (``filtermerge.merge``, ``filtermerge.registry``)
so that logger configuration only happens when a component is actually used.
"""

__all__: list[str] = []
