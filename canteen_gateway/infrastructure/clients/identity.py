"""Identity service HTTP client for verifying caller tokens"""

import httpx
from canteen_gateway.domain.exceptions import IdentityServiceError, InvalidTokenError
from canteen_gateway.config import settings


class IdentityClient:
    """Client for the external session/token verification service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.auth_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def verify_token(self, token: str) -> str:
        """
        Resolve a bearer token to the caller's user id.

        Raises:
            InvalidTokenError: token rejected (401/403) or no uid in response
            IdentityServiceError: on timeout, other HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/auth/verify",
                    headers={"Authorization": f"Bearer {token}"},
                )
                if response.status_code in (401, 403):
                    raise InvalidTokenError("Token rejected by identity service")
                response.raise_for_status()
                uid = response.json().get("uid")

            except httpx.TimeoutException as e:
                raise IdentityServiceError(f"Identity service timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise IdentityServiceError(f"Identity service error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise IdentityServiceError(f"Identity service unreachable: {e}") from e
            except (ValueError, AttributeError) as e:
                raise IdentityServiceError(f"Invalid response from identity service: {e}") from e

        if not uid:
            raise InvalidTokenError("Identity service returned no uid")
        return str(uid)
