"""Health check and widget bootstrap routes.

Provides:
- GET /ping: lightweight 200 for uptime monitors
- GET /env.js: runtime API base URLs for the widget and admin bundles
"""

import json
import logging
from urllib.parse import urljoin

from fastapi import APIRouter, Request, Response

from widget_relay.api.deps import Services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/ping")
async def ping() -> dict[str, bool]:
    """Return 200 if the process is running."""
    return {"ok": True}


def resolve_api_bases(public_api_base: str, proto: str, host: str) -> tuple[str, str]:
    """Resolve the widget and admin API bases against the public origin.

    ``public_api_base`` may be absolute (``https://host:8443/api``) or
    relative (``/prefix/api``).

    Returns:
        Tuple of (api_base, admin_base) without trailing slashes.
    """
    api_base = urljoin(f"{proto}://{host}/", public_api_base).rstrip("/")
    admin_base = urljoin(f"{api_base}/", "./admin").rstrip("/")
    return api_base, admin_base


@router.get("/env.js")
async def env_js(request: Request, services: Services) -> Response:
    """Expose API base URLs to the browser bundles as globals."""
    proto = request.headers.get("x-forwarded-proto") or request.url.scheme or "http"
    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or "localhost"
    # Proxies may send a comma-separated chain; the first entry is the client-facing one
    proto = proto.split(",")[0].strip()
    host = host.split(",")[0].strip()

    api_base, admin_base = resolve_api_bases(services.settings.PUBLIC_API_BASE, proto, host)
    body = (
        f"window.__WIDGET_API_BASE__ = {json.dumps(api_base)};\n"
        f"window.__ADMIN_API_BASE__ = {json.dumps(admin_base)};\n"
    )
    return Response(content=body, media_type="application/javascript")
