"""Setup script for the internet-monitor package."""

from setuptools import find_packages, setup

setup(
    name="internet-monitor",
    version="0.1.0",
    description="Internet connectivity watchdog with automatic network recovery for AllStarLink nodes",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "python-dotenv",
        "paho-mqtt>=2.0.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
            "black",
            "isort",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "internet-monitor=inetmon.network_monitor:main",
        ],
    },
)
