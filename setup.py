# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="assetversioner",
    version="0.1.0",
    description="Content-addressable versioning of static assets for cache busting",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["assetversioner*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'assetversioner=assetversioner.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
