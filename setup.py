#!/usr/bin/env python
"""setup.py script for py_fdc library"""

from setuptools import setup, find_packages

setup(
    name="py_fdc",
    version="1.0.0",
    description="Mortar fire direction library: grid geodesy, firing table interpolation, "
                "multi-gun synchronization and FPF sector analysis",
    python_requires=">=3.9",
    packages=find_packages(include=["py_fdc", "py_fdc.*"]),
    install_requires=[
        "typing_extensions>=4.12.0",
        "tomli>=2.0.0; python_version<'3.11'",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "pyfdc=py_fdc.__main__:main",
        ],
    },
)
