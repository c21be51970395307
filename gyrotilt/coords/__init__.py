"""Rotation representations used by the tilt integrator."""

from gyrotilt.coords.rotations import (
    rotation_matrix_to_euler,
    rotation_vector_to_matrix,
)

__all__ = [
    "rotation_matrix_to_euler",
    "rotation_vector_to_matrix",
]
