"""
Tests for the service layer base classes.

Related files:
    - services.py: ServiceResult, BaseService
"""

import pytest

from core.services import BaseService, ServiceResult


class TestServiceResult:
    """Tests for ServiceResult."""

    def test_success_is_truthy(self):
        result = ServiceResult.success({"id": 1})

        assert result
        assert result.success is True
        assert result.data == {"id": 1}
        assert result.error is None

    def test_failure_is_falsy(self):
        result = ServiceResult.failure("Message not found", "MESSAGE_NOT_FOUND")

        assert not result
        assert result.data is None
        assert result.error_code == "MESSAGE_NOT_FOUND"

    def test_success_without_data(self):
        result = ServiceResult.success()

        assert result
        assert result.data is None

    def test_error_payload_matches_event_body(self):
        result = ServiceResult.failure("Invalid status: away", "INVALID_STATUS")

        assert result.error_payload() == {
            "message": "Invalid status: away",
            "code": "INVALID_STATUS",
        }

    def test_to_response(self):
        assert ServiceResult.success("ok").to_response() == {
            "success": True,
            "data": "ok",
        }
        assert ServiceResult.failure("nope", "INVALID_DATA").to_response() == {
            "success": False,
            "error": "nope",
            "error_code": "INVALID_DATA",
        }


class TestBaseService:
    """Tests for BaseService helpers."""

    def test_logger_named_after_service(self):
        class ExampleService(BaseService):
            pass

        assert ExampleService.get_logger().name == f"{__name__}.ExampleService"

    @pytest.mark.django_db
    def test_atomic_rolls_back_on_error(self):
        from authentication.models import User

        with pytest.raises(RuntimeError):
            with BaseService.atomic():
                User.objects.create_user(email="rollback@example.com", username="rb")
                raise RuntimeError("boom")

        assert not User.objects.filter(email="rollback@example.com").exists()
