"""Tests for the response envelope, validation errors and pagination helpers."""

from farewelly.errors import format_validation_errors
from farewelly.shared.responses import parse_pagination, success_response


class TestEnvelope:
    def test_success_response_shape(self):
        body = success_response({"a": 1}, "Done", {"page": 1, "limit": 10, "total": 1, "pages": 1}, extra=True)

        assert body == {
            "success": True,
            "data": {"a": 1},
            "message": "Done",
            "pagination": {"page": 1, "limit": 10, "total": 1, "pages": 1},
            "extra": True,
        }

    def test_message_and_pagination_are_optional(self):
        assert success_response([1]) == {"success": True, "data": [1]}

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/").status_code == 200


class TestValidationMessages:
    def test_missing_fields_joined(self):
        errors = [
            {"type": "missing", "loc": ("body", "service_type"), "msg": "Field required"},
            {"type": "missing", "loc": ("body", "date"), "msg": "Field required"},
        ]

        assert format_validation_errors(errors) == "Missing required fields: service_type, date"

    def test_value_error_message_passed_through(self):
        errors = [{"type": "value_error", "loc": ("body", "email"), "msg": "Value error, Invalid email format"}]

        assert format_validation_errors(errors) == "Invalid email format"

    def test_other_errors_name_the_field(self):
        errors = [{"type": "int_parsing", "loc": ("body", "duration"), "msg": "Input should be a valid integer"}]

        assert format_validation_errors(errors) == "Invalid duration: Input should be a valid integer"


class TestPagination:
    def test_defaults(self):
        pagination = parse_pagination(None, None)

        assert (pagination.page, pagination.limit, pagination.offset) == (1, 10, 0)

    def test_clamping(self):
        assert parse_pagination(0, 500).limit == 100
        assert parse_pagination(-3, 0).page == 1
        assert parse_pagination(3, 0).limit == 1

    def test_info_pages(self):
        assert parse_pagination(2, 10).info(21) == {"page": 2, "limit": 10, "total": 21, "pages": 3}
        assert parse_pagination(1, 10).info(0)["pages"] == 0
