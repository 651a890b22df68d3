"""GeneralPose3 - rigid transform plus per-axis scale for scene nodes.

A point p in the node's local space maps to the parent space as

    rotate(ang, scale * p) + lin

so composing parent * child gives

    lin   = parent.lin + rotate(parent.ang, parent.scale * child.lin)
    ang   = parent.ang * child.ang
    scale = parent.scale * child.scale

The scale composition is exact only when the child rotation keeps the
parent's scale axes aligned (uniform scale, or rotation about a scaled
axis); shear is not represented. SceneNode therefore composes world
transforms with as_matrix().
"""

import math
import numpy
from navbench.util import qmul, qrot, qinv


class GeneralPose3:
    """Rotation quaternion [x, y, z, w], translation and per-axis scale."""

    __slots__ = ('ang', 'lin', 'scale')

    def __init__(self, ang=None, lin=None, scale=None):
        self.ang = numpy.array([0.0, 0.0, 0.0, 1.0] if ang is None else ang, dtype=numpy.float64)
        self.lin = numpy.array([0.0, 0.0, 0.0] if lin is None else lin, dtype=numpy.float64)
        self.scale = numpy.array([1.0, 1.0, 1.0] if scale is None else scale, dtype=numpy.float64)

    @staticmethod
    def identity() -> 'GeneralPose3':
        return GeneralPose3()

    def copy(self) -> 'GeneralPose3':
        return GeneralPose3(self.ang, self.lin, self.scale)

    def __repr__(self):
        return f"GeneralPose3(ang={self.ang}, lin={self.lin}, scale={self.scale})"

    def __mul__(self, other: 'GeneralPose3') -> 'GeneralPose3':
        if not isinstance(other, GeneralPose3):
            raise TypeError("Can only multiply GeneralPose3 with GeneralPose3")
        return GeneralPose3(
            ang=qmul(self.ang, other.ang),
            lin=self.lin + qrot(self.ang, self.scale * other.lin),
            scale=self.scale * other.scale,
        )

    def transform_point(self, point) -> numpy.ndarray:
        return self.transform_points(point)[0]

    def transform_points(self, points) -> numpy.ndarray:
        """Map an (N, 3) array of local points to the parent space."""
        points = numpy.asarray(points, dtype=numpy.float64).reshape(-1, 3)
        return qrot(self.ang, points * self.scale) + self.lin

    def inverse_transform_point(self, point) -> numpy.ndarray:
        point = numpy.asarray(point, dtype=numpy.float64)
        return qrot(qinv(self.ang), point - self.lin) / self.scale

    def as_matrix(self) -> numpy.ndarray:
        """4x4 matrix T * R * S, acting on column vectors."""
        x, y, z, w = self.ang
        rot = numpy.array([
            [1 - 2*(y*y + z*z), 2*(x*y - z*w), 2*(x*z + y*w)],
            [2*(x*y + z*w), 1 - 2*(x*x + z*z), 2*(y*z - x*w)],
            [2*(x*z - y*w), 2*(y*z + x*w), 1 - 2*(x*x + y*y)],
        ])
        mat = numpy.eye(4)
        mat[:3, :3] = rot * self.scale
        mat[:3, 3] = self.lin
        return mat

    # --- Factory methods ---

    @staticmethod
    def translation(x: float, y: float, z: float) -> 'GeneralPose3':
        return GeneralPose3(lin=[x, y, z])

    @staticmethod
    def scaling(sx: float, sy: float = None, sz: float = None) -> 'GeneralPose3':
        """Scale-only pose; a single argument scales uniformly."""
        return GeneralPose3(scale=[sx, sx if sy is None else sy, sx if sz is None else sz])

    @staticmethod
    def rotation(axis, angle: float) -> 'GeneralPose3':
        """Rotation by angle (radians) about axis; the axis need not be unit length."""
        axis = numpy.asarray(axis, dtype=numpy.float64)
        axis = axis / numpy.linalg.norm(axis)
        half = angle * 0.5
        return GeneralPose3(ang=numpy.append(axis * math.sin(half), math.cos(half)))

    @staticmethod
    def rotateX(angle: float) -> 'GeneralPose3':
        return GeneralPose3.rotation([1.0, 0.0, 0.0], angle)

    @staticmethod
    def rotateY(angle: float) -> 'GeneralPose3':
        return GeneralPose3.rotation([0.0, 1.0, 0.0], angle)

    @staticmethod
    def rotateZ(angle: float) -> 'GeneralPose3':
        return GeneralPose3.rotation([0.0, 0.0, 1.0], angle)
