"""Middleware enforcing the path-prefix gate before routing."""

import logging

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from book_tracker.api.dependencies import credentials_from_request
from book_tracker.containers import AppContainer
from book_tracker.errors import IdentityProviderError
from book_tracker.services.gatekeeper import GateAction
from book_tracker.services.sessions import CookieSink

logger = logging.getLogger(__name__)


class EdgeGatekeeperMiddleware(BaseHTTPMiddleware):
    """Resolves the session once and applies the gate policy."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        container: AppContainer = request.app.state.container
        policy = container.gate_policy
        path = request.url.path
        if not policy.guards(path):
            return await call_next(request)

        sink = CookieSink(container.settings.cookie_options())
        request.state.cookie_sink = sink
        try:
            session = await run_in_threadpool(
                container.session_resolver.resolve,
                credentials_from_request(request),
                sink,
            )
        except IdentityProviderError as exc:
            if policy.is_api(path):
                return JSONResponse({"error": exc.message}, status_code=500)
            logger.warning(
                "Treating page request as signed out", extra={"path": path}
            )
            session = None
        request.state.session = session
        request.state.session_resolved = True

        decision = policy.evaluate(path, authenticated=session is not None)
        if decision.action is GateAction.UNAUTHORIZED:
            response: Response = JSONResponse(
                {"error": "Unauthorized"}, status_code=401
            )
        elif decision.action is GateAction.REDIRECT:
            logger.debug(
                "Redirecting request",
                extra={"path": path, "location": decision.location},
            )
            response = RedirectResponse(decision.location)
        else:
            response = await call_next(request)
        sink.apply(response)
        return response
