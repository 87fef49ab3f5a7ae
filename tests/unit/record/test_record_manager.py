##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Tabula
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Tabula.
##############################################################################

"""
Tests for the `record_manager.py` module.
"""

from dataclasses import FrozenInstanceError

import pytest
from pytest_mock import MockerFixture

from tabula.backends.memory import MemoryExecutor, MemorySchemaHelper
from tabula.backends.sqlite import SQLiteSchemaHelper
from tabula.crud_helper import CrudHelper
from tabula.record import RecordManager
from tests.fixture_entities import Score


class TestRecordManager:
    """Tests for the `RecordManager` class."""

    def test_create_default_schema_helper(self, executors_memory: MemoryExecutor):
        """
        Test that the executor's own schema helper is used by default.

        Args:
            executors_memory: An empty in-memory executor.
        """
        manager = RecordManager.create(Score, executors_memory)
        assert isinstance(manager.crud, CrudHelper)
        assert manager.crud.entity_type is Score
        assert manager.crud.executor is executors_memory
        assert isinstance(manager.schema, MemorySchemaHelper)

    def test_create_with_schema_factory(self, executors_memory: MemoryExecutor, mocker: MockerFixture):
        """
        Test that a schema factory receives the executor and the entity type.

        Args:
            executors_memory: An empty in-memory executor.
            mocker: A built-in fixture from the pytest-mock library to create a Mock object.
        """
        schema_factory = mocker.MagicMock()
        manager = RecordManager.create(Score, executors_memory, schema_factory)
        schema_factory.assert_called_once_with(executors_memory, Score)
        assert manager.schema is schema_factory.return_value

    def test_schema_helper_class_as_factory(self, executors_memory: MemoryExecutor):
        """
        Test that a `SchemaHelper` subclass can be used as the schema factory.

        Args:
            executors_memory: An empty in-memory executor.
        """
        manager = RecordManager.create(Score, executors_memory, SQLiteSchemaHelper)
        assert isinstance(manager.schema, SQLiteSchemaHelper)
        assert manager.schema.entity_type is Score

    def test_frozen(self, executors_memory: MemoryExecutor):
        """
        Test that the helpers of a manager cannot be replaced.

        Args:
            executors_memory: An empty in-memory executor.
        """
        manager = RecordManager.create(Score, executors_memory)
        with pytest.raises(FrozenInstanceError):
            manager.crud = None
