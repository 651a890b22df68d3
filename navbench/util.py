import numpy

def qmul(q1: numpy.ndarray, q2: numpy.ndarray) -> numpy.ndarray:
    """Multiply two quaternions."""
    x1, y1, z1, w1 = q1
    x2, y2, z2, w2 = q2
    return numpy.array([
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2,
        w1*w2 - x1*x2 - y1*y2 - z1*z2
    ])

def qrot(q: numpy.ndarray, v: numpy.ndarray) -> numpy.ndarray:
    """Rotate vector v by quaternion q.

    v may be a single vector (3,) or a batch of vectors (N, 3).
    """
    u = numpy.asarray(q[:3], dtype=numpy.float64)
    w = float(q[3])
    v = numpy.asarray(v, dtype=numpy.float64)
    t = 2.0 * numpy.cross(u, v)
    return v + w * t + numpy.cross(u, t)

def qinv(q: numpy.ndarray) -> numpy.ndarray:
    """Compute the inverse of a quaternion."""
    return numpy.array([-q[0], -q[1], -q[2], q[3]])

def transform_points(matrix: numpy.ndarray, points) -> numpy.ndarray:
    """Apply a 4x4 affine matrix to an (N, 3) array of points."""
    points = numpy.asarray(points, dtype=numpy.float64).reshape(-1, 3)
    return points @ matrix[:3, :3].T + matrix[:3, 3]
