"""Cross-origin headers and pre-flight handling for every route."""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from storefront.api.errors import INTERNAL_FAILURE, error_response
from storefront.utils.log import get_logger

log = get_logger("storefront")

ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization"


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Stamps the allow-origin/methods/headers triple on every response, answers
    OPTIONS pre-flight requests with an empty 200 before routing, and turns any
    exception that escaped the app's handlers into the generic JSON 500.
    """

    def __init__(self, app, allow_origin: str = "*"):
        super().__init__(app)
        self.headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
        }

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            try:
                response = await call_next(request)
            except Exception:
                log.exception(f"Unhandled error on {request.method} {request.url.path}")
                response = error_response(500, INTERNAL_FAILURE)
        response.headers.update(self.headers)
        return response
