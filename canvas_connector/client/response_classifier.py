"""Maps transport and HTTP failures onto the connector's error taxonomy."""

from typing import Dict, Type

import httpx
from pydantic import ValidationError

from ..utils.exceptions import (
    CanvasAPIError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    BadRequestError,
    TransportError,
    MalformedResponseError,
)


class ResponseClassifier:
    """Pure mapping from a failure signal to a CanvasAPIError. Never retries."""

    STATUS_ERRORS: Dict[int, Type[CanvasAPIError]] = {
        401: UnauthorizedError,
        403: ForbiddenError,
        404: NotFoundError,
        429: RateLimitedError,
    }

    def classify_status(self, status_code: int, detail: str = "") -> CanvasAPIError:
        """Classify an unsuccessful HTTP status code."""
        error_class = self.STATUS_ERRORS.get(status_code)
        if error_class is None:
            if status_code >= 500:
                error_class = ServerError
            elif status_code >= 400:
                error_class = BadRequestError
            else:
                error_class = MalformedResponseError
        return error_class(detail or f"HTTP {status_code}", status_code=status_code)

    def classify(self, failure: BaseException) -> CanvasAPIError:
        """
        Classify any failure raised while sending or decoding a request.

        Args:
            failure: Exception from httpx, JSON decoding or model validation

        Returns:
            The matching CanvasAPIError (unchanged if already classified)
        """
        if isinstance(failure, CanvasAPIError):
            return failure

        if isinstance(failure, httpx.HTTPStatusError):
            response = failure.response
            return self.classify_status(response.status_code, self.describe(response))

        if isinstance(failure, httpx.TimeoutException):
            return TransportError(f"Request timed out ({type(failure).__name__})")

        if isinstance(failure, httpx.HTTPError):
            return TransportError(str(failure) or type(failure).__name__)

        if isinstance(failure, ValidationError):
            return MalformedResponseError(
                f"{failure.error_count()} validation error(s) for {failure.title}"
            )

        if isinstance(failure, (ValueError, TypeError)):
            return MalformedResponseError(str(failure) or type(failure).__name__)

        return TransportError(str(failure) or type(failure).__name__)

    @staticmethod
    def describe(response: httpx.Response) -> str:
        """Build a detail string from a Canvas error response."""
        detail = f"HTTP {response.status_code} {response.reason_phrase}".rstrip()

        try:
            body = response.json()
        except ValueError:
            return detail

        message = None
        if isinstance(body, dict):
            errors = body.get("errors")
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                message = errors[0].get("message")
            elif isinstance(errors, dict):
                message = "; ".join(f"{key}: {value}" for key, value in errors.items())
            message = message or body.get("message")

        return f"{detail} - {message}" if message else detail
