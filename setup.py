#!/usr/bin/env python3

from setuptools import setup
import os

directory = os.path.dirname(os.path.realpath(__file__))


if __name__ == "__main__":
    setup(
        name="navbench",
        packages=[
            "navbench",
            "navbench.geombase",
            "navbench.mesh",
            "navbench.loaders",
            "navbench.backends",
            "navbench.backends.grid",
            "navbench.backends.trigraph",
        ],
        python_requires='>=3.10.0',
        version="0.1.0",
        license="MIT",
        description="Side-by-side benchmark and path cross-check of two navmesh backends",
        long_description=open(os.path.join(
            directory, "README.md"), "r", encoding="utf8").read(),
        long_description_content_type="text/markdown",
        keywords=["navmesh", "pathfinding", "benchmark"],
        classifiers=[],
        install_requires=[
            "numpy",
            "scipy",
            "matplotlib",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": [
                "navbench=navbench.__main__:main",
            ],
        },
        zip_safe=False,
    )
