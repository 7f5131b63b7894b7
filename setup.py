from setuptools import setup, find_packages

setup(
    name="locator-core",
    version="1.0.0",
    description="Describe DOM nodes with portable fingerprints and relocate them after the tree changes",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml>=5.4",
        "jsonschema>=4.0.0",
        "lxml>=4.9",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    package_data={
        "locator_core": ["schemas/*.json"],
    },
    entry_points={
        "console_scripts": [
            "locator-core=locator_core.cli:main",
        ],
    },
)
