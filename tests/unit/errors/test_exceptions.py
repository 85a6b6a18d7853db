"""Tests for QuickBaseError."""

import json

import pytest

from quickbase_client.errors.exceptions import NoConnectionsAvailableError, QuickBaseError


class TestQuickBaseError:
    """Test the structured error."""

    @pytest.mark.unit
    def test_attributes(self):
        error = QuickBaseError(401, "Unauthorized", "Invalid Authorization", ray_id="ray-1")

        assert error.code == 401
        assert error.message == "Unauthorized"
        assert error.description == "Invalid Authorization"
        assert error.ray_id == "ray-1"
        assert error.response is None
        assert isinstance(error, Exception)

    @pytest.mark.unit
    def test_str_includes_every_part(self):
        error = QuickBaseError(401, "Unauthorized", "Invalid Authorization", ray_id="ray-1")

        assert str(error) == "[401] Unauthorized: Invalid Authorization (ray id: ray-1)"

    @pytest.mark.unit
    def test_str_skips_repeated_description(self):
        error = QuickBaseError(403, "Access denied", "Access denied")

        assert str(error) == "[403] Access denied"

    @pytest.mark.unit
    def test_to_dict(self):
        error = QuickBaseError(404, "Not Found", "No such table", ray_id="ray-2")

        assert error.to_dict() == {
            "code": 404,
            "message": "Not Found",
            "description": "No such table",
            "ray_id": "ray-2",
        }

    @pytest.mark.unit
    def test_from_dict_round_trip(self):
        error = QuickBaseError(404, "Not Found", "No such table", ray_id="ray-2")

        rebuilt = QuickBaseError.from_dict(error.to_dict())

        assert rebuilt.to_dict() == error.to_dict()

    @pytest.mark.unit
    def test_from_json_string(self):
        data = json.dumps({"code": 4, "message": "User not signed in", "description": "", "ray_id": None})

        error = QuickBaseError.from_dict(data)

        assert error.code == 4
        assert error.message == "User not signed in"
        assert error.ray_id is None

    @pytest.mark.unit
    @pytest.mark.parametrize("data", ["[1, 2]", "42", ["code"]])
    def test_from_dict_rejects_non_objects(self, data):
        with pytest.raises(TypeError):
            QuickBaseError.from_dict(data)


class TestNoConnectionsAvailableError:
    @pytest.mark.unit
    def test_is_quickbase_error(self):
        error = NoConnectionsAvailableError(10)

        assert isinstance(error, QuickBaseError)
        assert error.code == 1001
        assert error.message == "No Connections Available"
        assert error.limit == 10
        assert "10" in error.description
