"""YouTrack REST API client with a cooldown window after server-side failures."""

import logging
import time
from typing import Any, Optional, Sequence

import httpx

from reportdesk.domain.errors import BadRequestError, NotFoundError, UpstreamUnavailableError
from reportdesk.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

ISSUE_FIELDS = "id,idReadable,summary,description"


class YouTrackNotConfiguredError(UpstreamUnavailableError):
    pass


class YouTrackUnavailableError(UpstreamUnavailableError):
    """5xx, timeout or transport failure. Worth retrying later."""


class YouTrackRejectedError(BadRequestError):
    """4xx other than 404. Retrying the same request will not help."""

    def __init__(self, detail: str, status_code: int) -> None:
        super().__init__(detail, context={"statusCode": status_code})
        self.status_code = status_code


class YouTrackClient:
    def __init__(
        self,
        http_client: RateLimitedClient,
        base_url: str = "",
        token: str = "",
        project_id: str = "",
        cooldown_seconds: float = 60.0,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._project_id = project_id
        self._cooldown_seconds = cooldown_seconds
        self._unavailable_until = 0.0

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url or None

    def is_configured(self) -> bool:
        return bool(self._base_url and self._token)

    def is_unavailable(self) -> bool:
        return time.monotonic() < self._unavailable_until

    def is_available(self) -> bool:
        return self.is_configured() and not self.is_unavailable()

    def set_unavailable_for(self, seconds: float) -> None:
        """Arm the cooldown window; zero or less clears it."""
        if seconds <= 0:
            self._unavailable_until = 0.0
            return
        self._unavailable_until = time.monotonic() + seconds
        logger.warning("YouTrack marked unavailable for %.0fs", seconds)

    def issue_url(self, issue_id: str) -> str:
        return f"{self._base_url}/issue/{issue_id}"

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        if not self.is_configured():
            raise YouTrackNotConfiguredError(
                "YouTrack is not configured. Set YOUTRACK_URL and YOUTRACK_TOKEN."
            )

        url = f"{self._base_url}/api{endpoint}"
        headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/json",
        }
        try:
            response = await self._http.request(method, url, params=params, json=json, headers=headers)
        except httpx.TimeoutException as e:
            self.set_unavailable_for(self._cooldown_seconds)
            raise YouTrackUnavailableError(f"YouTrack request timed out: {method} {endpoint}") from e
        except httpx.TransportError as e:
            self.set_unavailable_for(self._cooldown_seconds)
            raise YouTrackUnavailableError(f"Failed to connect to YouTrack at {self._base_url}: {e}") from e

        status = response.status_code
        if status >= 500:
            self.set_unavailable_for(self._cooldown_seconds)
            raise YouTrackUnavailableError(f"YouTrack is temporarily unavailable: HTTP {status}")
        if status == 404:
            raise NotFoundError(f"YouTrack resource not found: {endpoint}")
        if status >= 400:
            raise YouTrackRejectedError(f"YouTrack API error: HTTP {status}. {response.text}", status)

        if "application/json" in response.headers.get("content-type", ""):
            return response.json()
        return {}

    async def get_projects(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/admin/projects", params={"fields": "id,name,shortName"})

    async def get_project_id(self) -> str:
        """Configured project, else the first one visible to the token."""
        if self._project_id:
            return self._project_id
        projects = await self.get_projects()
        if not projects:
            raise NotFoundError("No projects found in YouTrack")
        return projects[0]["id"]

    async def get_issue(self, issue_id: str, fields: str = ISSUE_FIELDS) -> dict[str, Any]:
        return await self._request("GET", f"/issues/{issue_id}", params={"fields": fields})

    async def create_issue(self, payload: dict[str, Any]) -> dict[str, Any]:
        issue = await self._request("POST", "/issues", params={"fields": "id,idReadable"}, json=payload)
        if not issue.get("idReadable") and issue.get("id"):
            readable = await self.get_issue(issue["id"], fields="idReadable")
            issue["idReadable"] = readable.get("idReadable") or issue["id"]
        return issue

    async def apply_command(self, issue_ids: Sequence[str], query: str) -> None:
        if not issue_ids:
            return
        await self._request(
            "POST",
            "/commands",
            json={"query": query, "issues": [{"idReadable": issue_id} for issue_id in issue_ids]},
        )
