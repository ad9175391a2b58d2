from setuptools import setup, find_packages

setup(
    name="connect-four-engine",
    version="0.2.0",
    description="Connect Four game engine with random, greedy and minimax opponents",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "filelock",  # Locking for the JSON game history file
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "connect-four=connect_four.interfaces.cli:main",
        ],
    },
)
