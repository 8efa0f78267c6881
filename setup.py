"""
Setup script for fhir-goal-service package.

This setup script is used for local development and testing.
"""

from setuptools import setup, find_packages

setup(
    name="fhir-goal-service",
    version="0.1.0",
    description="Maps care plan goal records onto FHIR Goal resources",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "fhir.resources>=8.0.0",
        "python-dateutil>=2.8.2",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black",
            "isort",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
)
