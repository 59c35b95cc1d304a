"""
API v1 router: informational endpoints safe for anonymous viewers.
"""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from oai_proxy.core.redaction import list_config

api_router = APIRouter()


class ConfigInfoResponse(BaseModel):
    config: dict[str, str]


@api_router.get("/status", tags=["api"])
def status() -> dict[str, str]:
    """Lightweight API status endpoint."""
    return {"service": "oai-proxy", "status": "ok"}


@api_router.get("/config", tags=["api"], response_model=ConfigInfoResponse)
def config_info(request: Request) -> ConfigInfoResponse:
    """Return the redacted configuration of this proxy instance."""
    return ConfigInfoResponse(config=list_config(request.app.state.config))
