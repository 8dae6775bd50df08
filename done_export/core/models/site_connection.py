"""
SiteConnection model describing the SharePoint web an export talks to.
"""

from pydantic import BaseModel, Field, SecretStr, field_validator


class SiteConnection(BaseModel):
    """
    Connection details for a SharePoint site (web).

    The access token is obtained by the caller (host application, CLI
    environment); this project does not implement authentication flows.

    Attributes:
        site_url: Absolute URL of the SharePoint web, e.g. https://contoso.sharepoint.com/sites/Agile
        access_token: Bearer token sent with every request
        timeout_seconds: HTTP timeout for each request
        verify_ssl: Whether TLS certificates are verified
    """

    site_url: str = Field(..., min_length=1)
    access_token: SecretStr | None = None
    timeout_seconds: float = Field(30.0, gt=0)
    verify_ssl: bool = True

    @field_validator("site_url")
    @classmethod
    def check_site_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("https://", "http://")):
            raise ValueError("site_url must be an absolute http(s) URL")
        return v.rstrip("/")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "site_url": "https://contoso.sharepoint.com/sites/Agile",
                "timeout_seconds": 30.0,
                "verify_ssl": True
            }
        }
