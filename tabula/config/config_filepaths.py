##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
This module stores constants representing file paths that will be needed for
Tabula's configuration.
"""

import os


CONFIG_FILENAME: str = "tabula.yaml"
USER_HOME: str = os.path.expanduser("~")
TABULA_HOME: str = os.path.join(USER_HOME, ".tabula")
DEFAULT_SQLITE_PATH: str = os.path.join(TABULA_HOME, "tabula.db")
