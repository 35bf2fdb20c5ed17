"""
Setup script for rastergrid package
Immutable raster grid model for reprojecting, masking and rasterizing geospatial data
"""
from setuptools import setup, find_packages
from pathlib import Path

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="rastergrid",
    version="0.1.0",
    description="Raster grid model: construct, substitute, crop, reproject, mask and rasterize gridded geodata",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Education",
        "Topic :: Scientific/Engineering :: GIS",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        # Core scientific stack
        "numpy>=1.20",
        "pandas>=1.3,<3.0",
        # Geospatial
        "geopandas>=0.11",
        "shapely>=1.7,<3.0",
        "fiona>=1.8,<2.0",
        "rasterio>=1.2,<2.0",
        "affine>=2.4,<3.0",
        "pyproj>=3.0,<4.0",
        # Plotting
        "matplotlib>=3.5",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rastergrid=rastergrid.workflow:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
