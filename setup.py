"""
Setup script for spatialfileio package
Windowed reads of gridded rasters and filtered reads of lidar point clouds
"""
from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="spatialfileio",
    version="0.1.0",
    description="Bounded window extraction from ASCII grids and GeoTIFFs, and classified point subsets from LAS/LAZ",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: GIS",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    package_dir={"": "src"},
    # package directories carry no __init__.py
    packages=find_namespace_packages(where="src", include=["spatialfileio*"]),
    python_requires=">=3.10",
    install_requires=[
        # Core scientific stack
        "numpy>=1.20",
        "scipy>=1.7,<2.0",
        # Geospatial
        "rasterio>=1.2,<2.0",
        "affine>=2.4,<3.0",
        "laspy[lazrs]>=2.0,<3.0",
        # Storage
        "h5py>=3.1,<4.0",
    ],
    extras_require={
        "dev": [
            "black>=22.0",
            "isort>=5.0",
            "pytest>=7.0",
            "pytest-cov>=3.0",
        ],
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "spatialfileio=spatialfileio.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
