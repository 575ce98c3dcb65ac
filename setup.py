from setuptools import find_packages, setup

setup(
    name="notifywatch",
    version="0.1.0",
    description="Dump inotify events for a single file or directory",
    author="Araray Velho",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click",
        "toml",
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "notifywatch=notifywatch.cli:main"
        ]
    },
)
