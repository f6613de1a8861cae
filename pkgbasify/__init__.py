"""Convert a FreeBSD base system installed from distribution sets to pkgbase.

Core design goals:
- Nothing on the host changes until the package install starts
- Package set chosen from the components already on disk
- Local edits to configuration files carried over by three-way merge
- Best-effort completion once the install has begun
"""

__all__ = []
