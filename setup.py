from setuptools import setup, find_packages

setup(
    name="pr-merger",
    version="1.0.0",
    description="Merge labeled GitHub pull requests once their check runs pass",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pr-merger=pr_merger.cli:main",
        ],
    },
)
