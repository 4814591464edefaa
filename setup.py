#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import re
import setuptools

with open("README.md", "r") as f:
    long_description = f.read()

with open("requirements.txt") as f:
    requirements = [r for r in f.read().split("\n") if r.strip() != ""]

with open("gdscorr/__init__.py") as f:
    version = re.search(r'__version__ = "(.+)"', f.read()).group(1)

included_files = {"gdscorr": [
    "data/meta/gene_map_exclusions.csv",
]}

setuptools.setup(
    name="gdscorr",
    version=version,
    author="Emanuel Goncalves",
    author_email="eg14@sanger.ac.uk",
    long_description=long_description,
    description="GDSC data-set assembly and gene-expression ~ drug-response correlation analysis",
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests"]),
    include_package_data=True,
    package_data=included_files,
    install_requires=requirements,
    extras_require={"test": ["pytest"]},
    python_requires=">=3.9",
    classifiers=(
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ),
)
