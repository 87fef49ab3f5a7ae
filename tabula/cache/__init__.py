##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
The `cache` package provides a write-back cache of entities.

Modules:
    cached_entry.py: The `CachedEntry` class, a value and its synchronization flag.
    cache.py: The `Cache` class, tracking pending and synchronized entries.
"""

from tabula.cache.cache import Cache
from tabula.cache.cached_entry import CachedEntry


__all__ = ["Cache", "CachedEntry"]
