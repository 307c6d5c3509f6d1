"""Video room provisioning client."""

from dataclasses import dataclass

import httpx
import structlog

from app.config import Settings
from app.core.exceptions import VideoProviderException

logger = structlog.get_logger(__name__)


@dataclass
class VideoRoom:
    """Join details for a video room."""

    room_id: str
    video_url: str
    video_token: str | None = None


class VideoRoomProvider:
    """Creates rooms and meeting tokens on the configured provider."""

    def __init__(
        self,
        provider: str = "",
        api_key: str = "",
        api_url: str = "https://api.daily.co/v1",
        base_url: str = "https://daily.co",
        timeout: float = 10.0,
    ):
        """Initialize provider client."""
        self.provider = provider.lower()
        self.api_key = api_key
        self.api_url = api_url.rstrip("/")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "VideoRoomProvider":
        """Build a provider client from application settings."""
        return cls(
            provider=settings.video_provider,
            api_key=settings.daily_api_key,
            api_url=settings.daily_api_url,
            base_url=settings.video_base_url,
        )

    async def join(self, room_id: str, is_owner: bool) -> VideoRoom:
        """
        Ensure the room exists and return join details for one participant.

        Args:
            room_id: Room name
            is_owner: Whether the participant moderates the room

        Returns:
            Room URL and, when the provider issues them, a meeting token

        Raises:
            VideoProviderException: If the provider API call fails
        """
        if self.provider != "daily":
            return VideoRoom(room_id=room_id, video_url=f"{self.base_url}/{room_id}")

        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(
                base_url=self.api_url, headers=headers, timeout=self.timeout
            ) as client:
                room_response = await client.post(
                    "/rooms", json={"name": room_id, "privacy": "private"}
                )
                if room_response.status_code == 400:
                    # Room already exists
                    room_response = await client.get(f"/rooms/{room_id}")
                room_response.raise_for_status()

                token_response = await client.post(
                    "/meeting-tokens",
                    json={"properties": {"room_name": room_id, "is_owner": is_owner}},
                )
                token_response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("video_provider_request_failed", room_id=room_id, error=str(e))
            raise VideoProviderException() from e

        return VideoRoom(
            room_id=room_id,
            video_url=room_response.json()["url"],
            video_token=token_response.json()["token"],
        )
