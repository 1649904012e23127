"""Setup configuration for biblint."""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="biblint",
    version="0.1.0",
    description="A Python library and CLI for parsing and validating BibTeX bibliographies",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["examples"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Developers",
        "Topic :: Text Processing :: Markup :: LaTeX",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        # Core dependencies
        "python-dotenv>=1.0.0",
        # Macro tables and LaTeX decoding
        "bibtexparser>=1.4.0,<2",
    ],
    extras_require={
        "dev": [
            # Development dependencies
            "pytest>=7.0.0",
            "black>=22.0.0",
            "mypy>=0.990",
            "flake8>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "biblint=biblint.cli:main",
        ],
    },
)
