"""Source-address allow-list for the private receiver."""

import ipaddress
import logging
from collections.abc import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from hookrelay.models.responses import ReceiverResponse

logger = logging.getLogger(__name__)

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def parse_networks(cidrs: Iterable[str]) -> list[IPNetwork]:
    return [ipaddress.ip_network(cidr, strict=False) for cidr in cidrs]


def is_allowed_address(host: str | None, networks: Iterable[IPNetwork]) -> bool:
    """True for loopback or any address inside ``networks``.

    IPv4-mapped IPv6 addresses (``::ffff:10.0.0.1``) are checked as IPv4.
    """
    if not host:
        return False
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        address = address.ipv4_mapped

    if address.is_loopback:
        return True
    return any(address in network for network in networks)


class NetworkGateMiddleware(BaseHTTPMiddleware):
    """Reject callers outside the allow-listed networks with 403."""

    def __init__(self, app: ASGIApp, networks: Iterable[str]) -> None:
        super().__init__(app)
        self.networks = parse_networks(networks)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        host = request.client.host if request.client else None
        if not is_allowed_address(host, self.networks):
            logger.warning("Rejected request from non-allow-listed address: %s", host)
            return JSONResponse(
                status_code=403,
                content=ReceiverResponse(success=False, error="Forbidden").model_dump(exclude_none=True),
            )
        return await call_next(request)
