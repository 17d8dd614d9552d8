"""Setup configuration for itrunner."""

from setuptools import setup, find_packages

setup(
    name="itrunner",
    version="0.1.0",
    description="Integration test runner: build, start dependencies, wait, test, tear down",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
        "structlog>=24.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "itrunner=itrunner.cli:main",
        ],
    },
)
