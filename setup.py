"""Setup script for the frigo package."""

from setuptools import find_packages, setup

setup(
    name="frigo",
    version="0.1.0",
    description="Cold-storage facility telemetry and back-office services",
    author="Frigo Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "python-dotenv",
        "paho-mqtt>=2.0.0",
        "aiohttp",
        "rich",
        "firebase-admin",
        "google-cloud-firestore",
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
            "frigo-display=frigo.display:main",
            "frigo-poller=frigo.telemetry:main",
            "frigo-live=frigo.live:main",
        ],
    },
)
