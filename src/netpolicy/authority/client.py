"""
Policy Service Client

HTTP client for the remote policy authority. Reads and replaces the full
policy list; no incremental updates.
"""

import logging
from typing import List, Optional, Sequence

import httpx
from pydantic import TypeAdapter, ValidationError

from netpolicy.authority.base import AuthorityError, PolicyAuthority
from netpolicy.authority.config import config
from netpolicy.policy.models import NetworkPolicy


logger = logging.getLogger(__name__)

_policy_list = TypeAdapter(List[NetworkPolicy])


class PolicyServiceClient(PolicyAuthority):
    """
    Client for the Policy Service.

    Implements the PolicyAuthority contract over HTTP:
    - GET /policies returns the full list
    - PUT /policies replaces the full list
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize policy service client.

        Args:
            base_url: Base URL of policy service (default: from config)
            timeout: Request timeout in seconds (default: from config)
            http_client: Shared httpx client; when given it is reused and
                never closed by this object (e.g. a FastAPI TestClient)
        """
        self.base_url = base_url if base_url is not None else f"http://{config.host}:{config.port}"
        self.timeout = timeout if timeout is not None else config.timeout_seconds
        self._http_client = http_client
        self.logger = logger

    def fetch_all(self) -> List[NetworkPolicy]:
        """
        Fetch all policies from the service.

        Returns:
            List of NetworkPolicy

        Raises:
            AuthorityError: If the service is unavailable or returns bad data
        """
        try:
            response = self._request("GET", "/policies")
            policies = _policy_list.validate_python(response.json())

            self.logger.info(f"Fetched {len(policies)} policies from {self.base_url}")
            return policies

        except httpx.HTTPError as e:
            self.logger.error(f"Failed to fetch policies: {e}")
            raise AuthorityError(f"Policy service error: {e}") from e
        except (ValueError, ValidationError) as e:
            self.logger.error(f"Malformed policy list from service: {e}")
            raise AuthorityError(f"Policy service returned malformed data: {e}") from e

    def replace_all(self, policies: Sequence[NetworkPolicy]) -> None:
        """
        Replace all policies held by the service.

        Args:
            policies: Complete policy list

        Raises:
            AuthorityError: If the service is unavailable or rejects the list
        """
        payload = [policy.model_dump(mode="json") for policy in policies]
        try:
            self._request("PUT", "/policies", json=payload)
            self.logger.info(f"Replaced policies on {self.base_url} ({len(payload)} entries)")

        except httpx.HTTPError as e:
            self.logger.error(f"Failed to replace policies: {e}")
            raise AuthorityError(f"Policy service error: {e}") from e

    def health(self) -> dict:
        """Return the service health document."""
        try:
            return self._request("GET", "/").json()
        except httpx.HTTPError as e:
            self.logger.error(f"Policy service health check failed: {e}")
            raise AuthorityError(f"Policy service error: {e}") from e

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request and raise for non-2xx responses."""
        url = f"{self.base_url}{path}"

        if self._http_client is not None:
            response = self._http_client.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response

        with httpx.Client() as client:
            response = client.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response
