from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, TypeVar, Generic
from datetime import datetime, timedelta, timezone
from enum import Enum
import logging
from contextlib import asynccontextmanager

import httpx
from pydantic import BaseModel, ConfigDict, Field

ConfigType = TypeVar('ConfigType', bound='IntegrationConfig')

# Enums
class IntegrationStatus(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    ERROR = "error"

# Base configuration
class IntegrationConfig(BaseModel):
    """Base configuration for all integrations."""

    model_config = ConfigDict(extra="forbid")

    name: str
    enabled: bool = True
    timeout: int = Field(default=30, ge=1, le=300)

class IntegrationMetrics(BaseModel):
    """Integration request counters."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    last_error: Optional[str] = None
    last_success: Optional[datetime] = None

# Custom exceptions
class IntegrationError(Exception):
    """Base exception for integration errors."""

    def __init__(
        self,
        message: str,
        integration_name: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.integration_name = integration_name
        self.status_code = status_code
        self.response_data = response_data
        self.timestamp = datetime.now(timezone.utc)

class AuthenticationError(IntegrationError):
    """Authentication failed."""
    pass

class AuthorizationError(IntegrationError):
    """Authorization/permission denied."""
    pass

class RateLimitError(IntegrationError):
    """Rate limit exceeded."""

    def __init__(
        self,
        message: str,
        integration_name: str,
        reset_at: datetime,
        **kwargs
    ) -> None:
        super().__init__(message, integration_name, **kwargs)
        self.reset_at = reset_at

class ValidationError(IntegrationError):
    """Data validation failed."""
    pass

class NetworkError(IntegrationError):
    """Network/connectivity error."""
    pass

# Base integration class
class BaseIntegration(ABC, Generic[ConfigType]):
    """
    Abstract base class for external service integrations.

    Provides common functionality:
    - HTTP client management
    - Error mapping from HTTP status codes
    - Request metrics

    Requests are never retried; callers decide how a failure surfaces.
    """

    def __init__(self, config: ConfigType) -> None:
        self.config = config
        self.status = IntegrationStatus.DISCONNECTED
        self.metrics = IntegrationMetrics()
        self._http: Optional[httpx.AsyncClient] = None
        self._logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def is_enabled(self) -> bool:
        return self.config.enabled

    @abstractmethod
    async def test_connection(self) -> bool:
        """Test if connection is working."""
        pass

    @asynccontextmanager
    async def _get_client(self):
        """Get HTTP client with proper lifecycle management."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=self.config.timeout,
                headers=self._get_default_headers()
            )

        # Keep client alive for reuse, close on close()
        yield self._http

    def _get_default_headers(self) -> Dict[str, str]:
        """Get default headers for requests."""
        return {
            "User-Agent": f"Standup-Assistant/{self.config.name}",
            "Accept": "application/json",
            "Content-Type": "application/json"
        }

    async def _make_request(
        self,
        method: str,
        url: str,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with error handling.

        Args:
            method: HTTP method
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
            HTTP response

        Raises:
            Various IntegrationError subclasses
        """
        try:
            async with self._get_client() as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            self._update_metrics_failure("timeout")
            raise NetworkError(
                f"Request timeout after {self.config.timeout}s",
                self.config.name
            ) from e
        except httpx.TransportError as e:
            self._update_metrics_failure(str(e))
            raise NetworkError(
                f"Network error: {str(e)}",
                self.config.name
            ) from e

        if response.is_success:
            self._update_metrics_success()
            return response

        self._update_metrics_failure(f"HTTP {response.status_code}")
        if response.status_code == 401:
            raise AuthenticationError(
                "Authentication failed",
                self.config.name,
                response.status_code,
                self._safe_json(response)
            )
        elif response.status_code == 403:
            raise AuthorizationError(
                "Authorization denied",
                self.config.name,
                response.status_code,
                self._safe_json(response)
            )
        elif response.status_code == 429:
            retry_after = self._get_retry_after(response)
            raise RateLimitError(
                "Rate limit exceeded",
                self.config.name,
                datetime.now(timezone.utc) + timedelta(seconds=retry_after),
                status_code=response.status_code
            )
        elif 400 <= response.status_code < 500:
            raise ValidationError(
                f"Client error: {response.status_code}",
                self.config.name,
                response.status_code,
                self._safe_json(response)
            )
        raise IntegrationError(
            f"Server error: {response.status_code}",
            self.config.name,
            response.status_code,
            self._safe_json(response)
        )

    def _get_retry_after(self, response: httpx.Response) -> int:
        """Get retry-after seconds from response."""
        retry_after = response.headers.get("retry-after", "60")
        try:
            return int(retry_after)
        except ValueError:
            return 60

    def _safe_json(self, response: httpx.Response) -> Optional[Dict[str, Any]]:
        """Safely parse JSON response."""
        try:
            return response.json()
        except ValueError:
            return None

    def _update_metrics_success(self) -> None:
        self.metrics.total_requests += 1
        self.metrics.successful_requests += 1
        self.metrics.last_success = datetime.now(timezone.utc)

    def _update_metrics_failure(self, error: str) -> None:
        self.metrics.total_requests += 1
        self.metrics.failed_requests += 1
        self.metrics.last_error = error

    async def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        if self._http:
            await self._http.aclose()
            self._http = None

        self.status = IntegrationStatus.DISCONNECTED


# Export types and utilities
__all__ = [
    "BaseIntegration",
    "IntegrationConfig",
    "IntegrationStatus",
    "IntegrationMetrics",
    "IntegrationError",
    "AuthenticationError",
    "AuthorizationError",
    "RateLimitError",
    "ValidationError",
    "NetworkError",
]
