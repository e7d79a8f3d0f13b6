"""
HTTP client for the submission backend.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from shared.types import UserProfile

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10  # seconds


class SubmissionApiError(Exception):
    """Raised when the backend rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SubmissionApiClient:
    """Relays finished profiles to ``POST /api/submit-quiz``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def submit_quiz(self, profile: UserProfile, token: str) -> dict:
        """
        Upserts the profile's submission on the backend.

        Args:
            profile (UserProfile): The profile with its answers filled in.
            token (str): Raw Google credential sent as a bearer token.

        Returns:
            dict: The stored submission record as returned by the backend.

        Raises:
            SubmissionApiError: On a transport failure or non-2xx response.
        """
        payload = {
            "userId": profile.id,
            "email": profile.email,
            "name": profile.name,
            "phoneNumber": profile.phone_number,
            "answers": profile.answers or {},
        }
        try:
            response = self.session.post(
                f"{self.base_url}/api/submit-quiz",
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise SubmissionApiError(f"Failed to reach backend: {exc}") from exc
        if not response.ok:
            raise SubmissionApiError(
                _error_message(response, "Failed to save quiz"),
                status_code=response.status_code,
            )
        try:
            return response.json()["quiz"]
        except (ValueError, KeyError, TypeError) as exc:
            raise SubmissionApiError(
                "Backend returned an unexpected response", status_code=response.status_code
            ) from exc


def _error_message(response: requests.Response, fallback: str) -> str:
    try:
        return response.json().get("error") or fallback
    except (ValueError, AttributeError):
        logger.warning("Non-JSON error body from backend (%s)", response.status_code)
        return fallback
