"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from consumers, views and
    models. Consumers and views handle transport concerns (websocket frames,
    HTTP), models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, not found)
    - Exceptions: Use for unexpected failures and authentication failures

Usage:
    from core.services import BaseService, ServiceResult

    class MessageService(BaseService):
        @classmethod
        def send_message(cls, sender, receiver_id, content) -> ServiceResult[Message]:
            if not content.strip():
                return ServiceResult.failure(
                    "Message content cannot be empty",
                    error_code="EMPTY_MESSAGE",
                )

            with cls.atomic():
                message = Message.objects.create(...)

            cls.get_logger().info(f"Stored message {message.id}")
            return ServiceResult.success(message)

    # In a consumer
    result = MessageService.send_message(sender, receiver_id, content)
    if not result:
        await self.send_json({"type": "error", **result.error_payload()})

Related:
    - core.exceptions: For unexpected/exceptional errors
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, missing resources).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Human-readable error message if failed
        error_code: Machine-readable error code for client handling

    Usage:
        # Success case
        return ServiceResult.success(message)

        # Failure case
        return ServiceResult.failure("Message not found", "MESSAGE_NOT_FOUND")

        # Check result
        result = MessageService.delete_message(user_id, message_id)
        if result.success:
            mutation = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def success(cls, data: T = None) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure("Cannot message yourself", "SELF_MESSAGE")
        """
        return cls(success=False, error=error, error_code=error_code)

    def error_payload(self) -> dict[str, Any]:
        """
        Convert a failed result to the realtime error event body.

        Returns:
            Dict with message and code keys, matching the outbound
            ``error`` event contract.
        """
        return {"message": self.error, "code": self.error_code}

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns a dictionary suitable for returning from a DRF view.
        """
        if self.success:
            return {"success": True, "data": self.data}

        return {
            "success": False,
            "error": self.error,
            "error_code": self.error_code,
        }

    def __bool__(self) -> bool:
        """Allow using result in boolean context (same as ``result.success``)."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management

    Design Notes:
        - Use @staticmethod or @classmethod (no instance state)
        - Services should be stateless
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Example:
            with cls.atomic():
                conversation = DirectConversation.objects.for_pair(a, b)
                Message.objects.create(conversation=conversation, ...)
        """
        with transaction.atomic():
            yield
