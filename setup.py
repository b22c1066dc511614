"""Setup script for the campaigndb database toolkit."""

from setuptools import setup, find_packages

setup(
    name="campaigndb",
    version="1.0.0",
    description="SQLite lifecycle toolkit for the campaign manager: migrations, seeds, backups and monitoring",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "typer>=0.9.0",
        "rich>=13.0.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "campaigndb=campaigndb.cli.main:main",
        ],
    },
)
