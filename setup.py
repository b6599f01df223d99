#!/usr/bin/env python
from setuptools import find_packages, setup

extras_require = {
    "test": [  # `test` GitHub Action jobs uses this
        "pytest>=8.0,<9.0",  # Core testing package
        "pytest-xdist>=3.6.1,<4",  # Multi-process runner
        "pytest-cov>=4.0.0,<5",  # Coverage analyzer plugin
        "pytest-mock",  # For creating mocks
        "hypothesis>=6.2.0,<7.0",  # Strategy-based fuzzer
    ],
    "lint": [
        "black>=24.10.0,<25",  # Auto-formatter and linter
        "mypy>=1.13.0,<2",  # Static type analyzer
        "types-PyYAML",  # Needed due to mypy typeshed
        "types-requests",  # Needed due to mypy typeshed
        "types-setuptools",  # Needed due to mypy typeshed
        "flake8>=7.1.1,<8",  # Style linter
        "flake8-breakpoint>=1.1.0,<2",  # Detect breakpoints left in code
        "flake8-print>=4.0.1,<5",  # Detect print statements left in code
        "flake8-pydantic",  # For detecting issues with Pydantic models
        "isort>=5.13.2,<6",  # Import sorting linter
        "mdformat>=0.7.18",  # Auto-formatter for markdown
        "mdformat-gfm>=0.3.5",  # Needed for formatting GitHub-flavored markdown
    ],
    "release": [  # `release` GitHub Action job uses this
        "setuptools",  # Installation tool
        "wheel",  # Packaging tool
        "twine==3.8.0",  # Package upload tool
    ],
    "dev": [
        "pre-commit",  # Ensure that linters are run prior to committing
        "pytest-watch",  # `ptw` test watcher/runner
        "ipdb",  # Debugger (Must use `export PYTHONBREAKPOINT=ipdb.set_trace`)
    ],
}

# NOTE: `pip install -e .[dev]` to install package
extras_require["dev"] = (
    extras_require["test"]
    + extras_require["lint"]
    + extras_require["release"]
    + extras_require["dev"]
)

with open("./README.md") as readme:
    long_description = readme.read()


setup(
    name="eth-flashbot",
    version="0.1.0",
    description="Client for simulating and sending bundles to Flashbots relays",
    long_description=long_description,
    long_description_content_type="text/markdown",
    include_package_data=True,
    install_requires=[
        "click>=8.1.6,<9",
        "pydantic>=2.6.4,<3",
        "pydantic-settings>=2.5.2,<3",
        "PyYAML>=5.0,<7",
        "requests>=2.28.1,<3",
        "yarl>=1.9,<2",
        # ** Dependencies maintained by Ethereum Foundation **
        "eth-account>=0.13,<0.14",
        "eth-utils>=5,<6",
        "rlp>=4,<5",
        "web3>=7,<8",
        # ** Dependencies maintained by ApeWorX **
        "eth_pydantic_types>=0.1.3,<0.3",
    ],
    entry_points={
        "console_scripts": ["flashbot=flashbot._cli:cli"],
    },
    python_requires=">=3.9,<4",
    extras_require=extras_require,
    license="Apache-2.0",
    zip_safe=False,
    keywords="ethereum flashbots mev",
    packages=find_packages("src"),
    package_dir={"": "src"},
    package_data={"flashbot": ["py.typed"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Natural Language :: English",
        "Operating System :: MacOS",
        "Operating System :: POSIX",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
