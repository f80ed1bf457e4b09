"""Tests for shared/repository.py."""

from typing import Optional

import pytest
from unittest.mock import MagicMock

from shared.exceptions import StoreUnavailableError
from shared.repository import BaseRepository


class _NameRepository(BaseRepository[dict]):
    def get_name(self, row_id: str) -> Optional[str]:
        result = self._execute(
            "get_name",
            self._db.table("names").select("name").eq("id", row_id),
        )
        return result.data[0]["name"] if result.data else None


class TestSubclassQueries:
    def test_builds_query_on_client(self):
        mock_db = MagicMock()
        query = mock_db.table.return_value.select.return_value.eq.return_value
        query.execute.return_value.data = [{"name": "Ada"}]

        assert _NameRepository(mock_db).get_name("1") == "Ada"
        mock_db.table.assert_called_once_with("names")
        mock_db.table.return_value.select.return_value.eq.assert_called_once_with("id", "1")

    def test_empty_result_is_not_an_error(self):
        mock_db = MagicMock()
        mock_db.table.return_value.select.return_value.eq.return_value.execute.return_value.data = []

        assert _NameRepository(mock_db).get_name("missing") is None


class TestExecute:
    """_execute turns client failures into StoreUnavailableError."""

    def test_returns_query_result(self):
        query = MagicMock()
        query.execute.return_value.data = [{"id": "1"}]
        repo = BaseRepository(MagicMock())

        result = repo._execute("list", query)

        assert result.data == [{"id": "1"}]

    def test_wraps_failures(self):
        query = MagicMock()
        query.execute.side_effect = ConnectionError("refused")
        repo = BaseRepository(MagicMock())

        with pytest.raises(StoreUnavailableError) as exc_info:
            repo._execute("get_student", query)

        assert exc_info.value.details["operation"] == "get_student"
        assert "refused" in exc_info.value.details["reason"]
        assert isinstance(exc_info.value.__cause__, ConnectionError)
