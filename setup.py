"""Setup script for appmetrics."""

from setuptools import find_packages, setup

setup(
    name="appmetrics",
    version="0.1.0",
    description="Startup wiring for runtime metrics, health checks and a filtered management reporter",
    author="appmetrics Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pandas>=2.0",
        "pyyaml>=6.0",
        "pydantic>=2.0",
        "click>=8.1",
        "psutil>=5.9",
        "pyformance>=0.4",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "appmetrics=appmetrics.cli:cli",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
