##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Module of all Tabula-specific exception types.
"""

# Pylint complains that these exceptions are no different from Exception
# but we don't care, we just need new names for exceptions here
# pylint: disable=W0235

__all__ = (
    "ConfigurationError",
    "SchemaError",
    "MappingError",
    "DecodeError",
    "IntegrityError",
    "ExecutorNotSupportedError",
)


class ConfigurationError(Exception):
    """
    Exception to signal that an entity type does not satisfy the
    mapping contract (e.g. it is not a `Row` subclass or one of its
    primary keys is not a declared column).
    """

    def __init__(self, message):
        super().__init__(message)


class SchemaError(Exception):
    """
    Exception to signal that the metadata of an entity type could not
    be resolved (e.g. no table was declared anywhere in its hierarchy).
    """

    def __init__(self, message):
        super().__init__(message)


class MappingError(Exception):
    """
    Exception to signal that a storage row holds a column that has no
    definition on the entity being hydrated.
    """

    def __init__(self, message):
        super().__init__(message)


class DecodeError(Exception):
    """
    Exception to signal that a table type received a storage value it
    cannot decode (e.g. non-JSON text given to a JSON column).
    """

    def __init__(self, message):
        super().__init__(message)


class IntegrityError(Exception):
    """
    Exception to signal an attempt to insert an entity that was loaded
    from storage and therefore already exists there.
    """

    def __init__(self, message):
        super().__init__(message)


class ExecutorNotSupportedError(Exception):
    """
    Exception to signal that the provided storage executor is not supported.
    """

    def __init__(self, message):
        super().__init__(message)
