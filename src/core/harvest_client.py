"""
Harvest REST client setup with lazy initialization.
"""

import httpx

from core.config import (
    HARVEST_ACCESS_TOKEN,
    HARVEST_ACCOUNT_ID,
    HARVEST_API_URL,
    HARVEST_TIMEOUT_SECONDS,
    HARVEST_USER_AGENT,
)
from core.errors import HarvestAPIError


class HarvestClient:
    """Thin async wrapper over the Harvest v2 REST API."""

    def __init__(
        self,
        access_token: str,
        account_id: str,
        base_url: str = HARVEST_API_URL,
        timeout: float = HARVEST_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_token = access_token
        self.account_id = account_id
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Harvest-Account-Id": account_id,
                "User-Agent": HARVEST_USER_AGENT,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_token and self.account_id)

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        params: dict | None = None,
        body: dict | None = None,
    ) -> dict:
        """
        Send a request and return the decoded JSON body.

        Raises:
            HarvestAPIError: if credentials are missing, the API cannot be
                reached, or it answers with a non-2xx status
        """
        if not self.has_credentials:
            raise HarvestAPIError("Harvest API credentials are not set.")

        try:
            response = await self._http.request(method, endpoint, params=params, json=body)
        except httpx.TimeoutException:
            raise HarvestAPIError("Harvest API request timed out.")
        except httpx.HTTPError as e:
            print(f"  Harvest API request error: {e}")
            raise HarvestAPIError("Failed to connect to Harvest API.")

        if not response.is_success:
            message = response.reason_phrase
            try:
                data = response.json()
            except ValueError:
                data = None
            if isinstance(data, dict) and data.get("message"):
                message = data["message"]
            raise HarvestAPIError(
                f"Harvest API Error: {message}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError:
            raise HarvestAPIError(
                "Unexpected response from Harvest API.", status_code=response.status_code
            )

    async def aclose(self):
        await self._http.aclose()


_harvest_client: HarvestClient | None = None


def get_harvest_client() -> HarvestClient:
    """Get or create the Harvest client (lazy initialization)."""
    global _harvest_client
    if _harvest_client is None:
        _harvest_client = HarvestClient(
            access_token=HARVEST_ACCESS_TOKEN,
            account_id=HARVEST_ACCOUNT_ID,
        )
    return _harvest_client
