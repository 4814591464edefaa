#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import os
from importlib import resources


# - Paths
dpath = str(resources.files("gdscorr") / "data")
rpath = os.path.join(os.getcwd(), "reports")


def data_file(file_path):
    """
    Resolve a data file: absolute paths are kept, relative paths are looked up in the package data folder.

    """
    if os.path.isabs(file_path):
        return file_path

    return os.path.join(dpath, file_path)
