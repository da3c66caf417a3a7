# Copyright 2021-present Kensho Technologies, LLC.
import codecs
import os
import re

from setuptools import find_packages, setup


#  https://packaging.python.org/guides/single-sourcing-package-version/
#  #single-sourcing-the-version


def read_file(filename: str) -> str:
    """Read package file as text to get name and version."""
    # intentionally *not* adding an encoding option to open
    # see here:
    # https://github.com/pypa/virtualenv/issues/201#issuecomment-3145690
    here = os.path.abspath(os.path.dirname(__file__))
    with codecs.open(os.path.join(here, "graphql_collections", filename), "r") as f:
        return f.read()


def find_version() -> str:
    """Only define version in one place."""
    version_file = read_file("__init__.py")
    version_match = re.search(r'^__version__ = ["\']([^"\']*)["\']', version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


def find_name() -> str:
    """Only define name in one place."""
    name_file = read_file("__init__.py")
    name_match = re.search(r'^__package_name__ = ["\']([^"\']*)["\']', name_file, re.M)
    if name_match:
        return name_match.group(1)
    raise RuntimeError("Unable to find name string.")


def find_long_description() -> str:
    """Return the content of the README.rst file."""
    return read_file("../README.rst")


setup(
    name=find_name(),
    version=find_version(),
    description="Generate a read-only GraphQL schema from collections of records.",
    long_description=find_long_description(),
    long_description_content_type="text/x-rst",
    author="Kensho Technologies, LLC.",
    license="Apache 2.0",
    packages=find_packages(exclude=["examples*", "*.tests", "*.tests.*", "tests*"]),
    install_requires=[
        "arrow>=1.0.0,<2",
        "graphql-core>=3.2.0,<3.3",
        "sqlalchemy>=1.4.0,<3",
    ],
    extras_require={
        "test": ["pytest>=6.0.0"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Topic :: Database :: Front-Ends",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="graphql schema generation collections orm sql",
    python_requires=">=3.8",
)
