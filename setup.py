"""Setup script for Catalog Sync Service"""

from setuptools import setup
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file, 'r') as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

setup(
    name="catalog-sync",
    version="0.1.0",
    description="Periodic product catalog sync with a searchable store and HTTP API",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=[
        "cli",
        "config",
        "database",
        "main",
        "models",
        "repository",
        "scraper",
        "service",
        "sync",
    ],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "postgres": ["asyncpg>=0.29"],
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.25",
        ],
    },
    entry_points={
        'console_scripts': [
            'catalog-sync=cli:run',
        ],
    },
)
