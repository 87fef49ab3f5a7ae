##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
The `abstracts` package provides ABC classes that can be used throughout
Tabula's codebase.

Modules:
    factory: Contains `TabulaBaseFactory`, used to manage pluggable components in Tabula.
"""

from tabula.abstracts.factory import TabulaBaseFactory


__all__ = ["TabulaBaseFactory"]
