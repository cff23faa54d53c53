"""Voxel chunk storage, chunk meshing, debug geometry, camera maths and protocol varint codecs."""

__version__ = "0.1.0"
__all__ = ["camera", "debug_geometry", "mesher", "varint", "world"]