"""Pydantic model for shop credentials."""

from typing import Optional

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """
    App and shop credentials for signed TikTok Shop calls.

    Created by the OAuth exchange or manual entry and persisted by a
    credential store. Passed explicitly into every SDK call.
    """

    app_key: str = Field(..., description="App identifier")
    app_secret: str = Field(..., repr=False, description="App secret (never logged)")
    access_token: Optional[str] = Field(None, repr=False, description="Seller access token")
    refresh_token: Optional[str] = Field(None, repr=False, description="Refresh token")
    shop_cipher: Optional[str] = Field(None, description="Shop scope selector")
    shop_name: Optional[str] = Field(None, description="Display name of the authorized shop")
    access_token_expire_in: Optional[int] = Field(
        None, description="Unix time at which the access token expires"
    )

    class Config:
        extra = "ignore"

    @property
    def is_authorized(self) -> bool:
        """True once both an access token and a shop cipher are known."""
        return bool(self.access_token and self.shop_cipher)
