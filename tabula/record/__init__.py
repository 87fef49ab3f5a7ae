##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
The `record` package provides rows that save and load themselves.

Modules:
    record_manager.py: The `RecordManager` bundling a `CrudHelper` and a `SchemaHelper`.
    record.py: The `Record` class and its existence/synchronization state machine.
"""

from tabula.record.record import Record
from tabula.record.record_manager import RecordManager


__all__ = ["Record", "RecordManager"]
