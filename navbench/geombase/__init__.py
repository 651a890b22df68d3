"""
Geometric base classes.

- GeneralPose3 - pose (translation + rotation + scale) used by scene nodes
"""

from .general_pose3 import GeneralPose3

__all__ = [
    'GeneralPose3',
]
