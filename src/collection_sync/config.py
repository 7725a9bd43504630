from __future__ import annotations

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self) -> None:
        self.chunk_size: int = int(os.environ.get("COLLECTION_SYNC_CHUNK_SIZE", "2000"))
        self.batch_size: int = int(os.environ.get("COLLECTION_SYNC_BATCH_SIZE", "100"))
        self.client_id: str = os.environ.get("COLLECTION_SYNC_CLIENT_ID", "")
        self.client_secret: str = os.environ.get("COLLECTION_SYNC_CLIENT_SECRET", "")
        self.redirect_uri: str = os.environ.get("COLLECTION_SYNC_REDIRECT_URI", "")
        self.authorize_url: str = os.environ.get(
            "COLLECTION_SYNC_AUTHORIZE_URL", "https://airtable.com/oauth2/v1/authorize"
        )
        self.token_url: str = os.environ.get(
            "COLLECTION_SYNC_TOKEN_URL", "https://airtable.com/oauth2/v1/token"
        )
        self.scope: str = os.environ.get(
            "COLLECTION_SYNC_SCOPE", "data.records:read schema.bases:read"
        )
        self.http_timeout: float = float(os.environ.get("COLLECTION_SYNC_HTTP_TIMEOUT", "30"))

    def validate(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("COLLECTION_SYNC_CHUNK_SIZE must be a positive integer")
        if self.batch_size <= 0:
            raise ValueError("COLLECTION_SYNC_BATCH_SIZE must be a positive integer")
        if not self.client_id:
            raise ValueError("COLLECTION_SYNC_CLIENT_ID environment variable is required")
        if not self.redirect_uri:
            raise ValueError("COLLECTION_SYNC_REDIRECT_URI environment variable is required")


settings = Settings()
