"""Account and conversion catalog endpoints."""

from __future__ import annotations

from conversiontools.core.http import HttpClient
from conversiontools.core.models import ApiConfig, ConversionConfig, UserInfo


class ConfigAPI:
    def __init__(self, http: HttpClient) -> None:
        self.http = http

    async def get_user_info(self) -> UserInfo:
        """Return the account the API token belongs to."""
        data = await self.http.get("/auth")
        return UserInfo(email=str(data.get("email", "")))

    async def get_config(self) -> ApiConfig:
        """Return the conversion types the server currently offers."""
        data = await self.http.get("/config")
        conversions = [
            ConversionConfig(
                type=str(item.get("type", "")),
                title=str(item.get("title", "")),
                options=list(item.get("options") or []),
            )
            for item in data.get("conversions") or []
        ]
        return ApiConfig(conversions=conversions)
