"""mpnmatch MCP Server - classify part numbers and check replacements."""

import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__
from .config import HTTP_PORT, LOG_LEVEL, MAX_MPN_LENGTH, RATE_LIMIT_REQUESTS
from .dispatcher import get_dispatcher
from .errors import UnknownHandlerError
from .mpn import normalize_mpn
from .packages import mounting_class
from .taxonomy import ComponentType, coerce_type

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    """Build the handler registry on startup (not on first request)."""
    dispatcher = get_dispatcher()
    dispatcher.initialize()
    logger.info(
        f"mpnmatch ready: {len(dispatcher.handler_ids)} handlers, "
        f"{len(dispatcher.registry)} patterns"
    )
    yield


# Create MCP server
mcp = FastMCP(
    name="mpnmatch",
    instructions="Offline manufacturer part number (MPN) classification. Use classify_mpn to find which manufacturer and component type an MPN belongs to, decode_mpn to read series/package/ratings out of it, and check_replacement to ask whether one MPN can replace another. No network access; results come from part-number encoding rules only.",
    lifespan=lifespan,
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window request limit per client IP. /health is exempt.

    At most MAX_TRACKED_IPS clients are remembered. When the table is full,
    idle clients are evicted first and unknown clients are refused until
    room frees up.
    """

    MAX_TRACKED_IPS = 10_000
    WINDOW_SECONDS = 60.0

    def __init__(self, app, requests_per_minute: int = RATE_LIMIT_REQUESTS):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self._hits: dict[str, deque[float]] = {}

    def _get_client_ip(self, request) -> str:
        # Rightmost X-Forwarded-For hop is the one our proxy appended
        forwarded = request.headers.get("x-forwarded-for", "")
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        if hops:
            return hops[-1]
        return request.client.host if request.client else "unknown"

    def _evict_idle(self, now: float) -> None:
        cutoff = now - self.WINDOW_SECONDS
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for ip in idle:
            del self._hits[ip]

    def _check_rate_limit(self, client_ip: str) -> bool:
        """True if this request should be rejected."""
        now = time.monotonic()
        hits = self._hits.get(client_ip)
        if hits is None:
            if len(self._hits) >= self.MAX_TRACKED_IPS:
                self._evict_idle(now)
                if len(self._hits) >= self.MAX_TRACKED_IPS:
                    logger.warning(f"Rate limiter tracking {len(self._hits)} clients; refusing {client_ip}")
                    return True
            hits = self._hits[client_ip] = deque()

        cutoff = now - self.WINDOW_SECONDS
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if len(hits) >= self.requests_per_minute:
            return True
        hits.append(now)
        return False

    async def dispatch(self, request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        if self._check_rate_limit(self._get_client_ip(request)):
            retry_after = int(self.WINDOW_SECONDS)
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded", "retry_after": retry_after},
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)


# Input helpers

def _check_mpn(mpn: str | None, field: str = "mpn") -> str | dict[str, Any]:
    """Normalized MPN, or an error dict for the tool to return."""
    if not mpn or not mpn.strip():
        return {"error": f"{field} is required"}
    if len(mpn.strip()) > MAX_MPN_LENGTH:
        return {"error": f"{field} too long (max {MAX_MPN_LENGTH} characters)"}
    return normalize_mpn(mpn)


def _resolve_handler(manufacturer: str | None, mpn: str) -> str | dict[str, Any]:
    """Handler id from a manufacturer name/alias, or the identified owner of `mpn`."""
    dispatcher = get_dispatcher()
    if manufacturer:
        wanted = manufacturer.strip().upper()
        for handler_id in dispatcher.handler_ids:
            handler = dispatcher.handler(handler_id)
            if wanted == handler_id.upper() or wanted == handler.manufacturer.upper() or wanted in handler.aliases:
                return handler_id
        return {"error": f"Unknown manufacturer '{manufacturer}'", "known": dispatcher.handler_ids}
    handler_id = dispatcher.identify(mpn)
    if handler_id is None:
        return {"error": f"No manufacturer recognises '{mpn}'"}
    return handler_id


# Tools

async def classify_mpn(mpn: str, component_type: str | None = None) -> dict[str, Any]:
    """Classify a manufacturer part number.

    Args:
        mpn: Manufacturer part number, e.g. "ATMEGA328P-PU", "GRM188R71H104KA93D"
        component_type: Optional type to test for, e.g. "MICROCONTROLLER" or
            "CAPACITOR_CERAMIC_MURATA". See list_component_types.

    Returns:
        claims: every (handler, type) pair that accepts the MPN
        owner: the single best manufacturer (manufacturer-specific claim wins)
        types: the union of claimed types
    """
    normalized = _check_mpn(mpn)
    if isinstance(normalized, dict):
        return normalized
    if component_type and coerce_type(component_type) is None:
        return {"error": f"Unknown component type '{component_type}'. Use list_component_types."}

    dispatcher = get_dispatcher()
    claims = sorted(dispatcher.classify(normalized, component_type))
    return {
        "mpn": normalized,
        "claims": [c.to_dict() for c in claims],
        "owner": dispatcher.identify(normalized) if claims else None,
        "types": sorted({str(c.component_type) for c in claims}),
    }


async def decode_mpn(mpn: str, manufacturer: str | None = None) -> dict[str, Any]:
    """Decode series, package and ratings from a part number.

    Args:
        mpn: Manufacturer part number
        manufacturer: Optional manufacturer name or handler id ("TI", "murata").
            When omitted the manufacturer is inferred from the MPN.

    Returns:
        handler, series, package_code, mounting ("smd", "through_hole" or
        "not_sure") and any decoded attributes. Values are in base SI units
        (farads, ohms, henries, volts, hertz).
    """
    normalized = _check_mpn(mpn)
    if isinstance(normalized, dict):
        return normalized
    handler_id = _resolve_handler(manufacturer, normalized)
    if isinstance(handler_id, dict):
        return handler_id

    attributes = get_dispatcher().extract_attributes(normalized, handler_id)
    return {
        "mpn": normalized,
        "handler": handler_id,
        "mounting": mounting_class(attributes.get("package_code")),
        **attributes,
    }


async def check_replacement(
    original: str,
    replacement: str,
    manufacturer: str | None = None,
) -> dict[str, Any]:
    """Check whether `replacement` can be used in place of `original`.

    The check runs series -> package -> attributes and stops at the first
    failure. Anything that can't be decoded counts as a failure.

    Args:
        original: MPN currently in the design
        replacement: Candidate MPN
        manufacturer: Optional manufacturer name or handler id. When omitted
            both MPNs must be identified as the same manufacturer.

    Returns:
        equivalent, failed_stage and the list of checks performed
    """
    orig = _check_mpn(original, "original")
    if isinstance(orig, dict):
        return orig
    repl = _check_mpn(replacement, "replacement")
    if isinstance(repl, dict):
        return repl

    dispatcher = get_dispatcher()
    handler_id = _resolve_handler(manufacturer, orig)
    if isinstance(handler_id, dict):
        return handler_id
    if not manufacturer and dispatcher.identify(repl) != handler_id:
        return {
            "original": orig,
            "replacement": repl,
            "handler": handler_id,
            "equivalent": False,
            "failed_stage": "series",
            "checks": [{
                "stage": "series",
                "passed": False,
                "detail": "parts are from different manufacturers",
            }],
        }

    try:
        verdict = dispatcher.explain_replacement(orig, repl, handler_id)
    except UnknownHandlerError as e:
        return {"error": str(e)}
    return {"original": orig, "replacement": repl, "handler": handler_id, **verdict.to_dict()}


async def list_component_types() -> dict[str, Any]:
    """List every component type and the generic type it narrows."""
    taxonomy = get_dispatcher().taxonomy
    return {
        "types": [
            {
                "name": str(t),
                "base": str(taxonomy.base_type_of(t)) if taxonomy.base_type_of(t) else None,
            }
            for t in ComponentType
        ],
    }


async def list_manufacturers() -> dict[str, Any]:
    """List supported manufacturers with their aliases and component types."""
    dispatcher = get_dispatcher()
    return {
        "manufacturers": [dispatcher.handler(h).describe() for h in dispatcher.handler_ids],
    }


_READ_ONLY = dict(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)

mcp.tool(annotations=ToolAnnotations(title="Classify MPN", **_READ_ONLY))(classify_mpn)
mcp.tool(annotations=ToolAnnotations(title="Decode MPN", **_READ_ONLY))(decode_mpn)
mcp.tool(annotations=ToolAnnotations(title="Check Replacement", **_READ_ONLY))(check_replacement)
mcp.tool(annotations=ToolAnnotations(title="List Component Types", **_READ_ONLY))(list_component_types)
mcp.tool(annotations=ToolAnnotations(title="List Manufacturers", **_READ_ONLY))(list_manufacturers)


# Health check endpoint
async def health(request):
    return JSONResponse({
        "status": "healthy",
        "service": "mpnmatch",
        "version": __version__,
        "handlers": len(get_dispatcher().handler_ids),
    })


# Create ASGI app
def create_app():
    """Create the ASGI application."""
    middleware = [
        Middleware(RateLimitMiddleware, requests_per_minute=RATE_LIMIT_REQUESTS),
    ]

    # stateless_http=True: MCP clients don't reliably forward session cookies
    app = mcp.http_app(
        path="/mcp",
        middleware=middleware,
        transport="streamable-http",
        stateless_http=True,
    )

    app.routes.append(Route("/health", health))

    return app


app = create_app()


class _HealthFilterLog(logging.Filter):
    """Suppress noisy /health access logs from container healthchecks."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return "/health" not in msg


def main():
    """Run the server."""
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL)
    logging.getLogger("uvicorn.access").addFilter(_HealthFilterLog())

    uvicorn.run(
        "mpnmatch.server:app",
        host="0.0.0.0",
        port=HTTP_PORT,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
