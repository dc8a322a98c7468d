from setuptools import setup, find_packages

setup(
    name="logokit",
    version="0.1.0",
    description="logokit - add svgl logos to your project",
    author="Ty",
    license="GPLv3",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    install_requires=[
        "requests>=2.31.0",
        "typer>=0.12.0",
        "rich>=13.7.0",
        "pydantic>=2.6",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "logokit=logokit.main:main",
        ],
    },
)
