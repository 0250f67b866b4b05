"""Request-scoped dependencies for API routes."""

from fastapi import Depends, Request

from book_tracker.containers import AppContainer
from book_tracker.domain.auth import RequestCredentials, Session
from book_tracker.errors import UnauthenticatedError
from book_tracker.services.books import BookService
from book_tracker.services.sessions import CookieSink


def get_container(request: Request) -> AppContainer:
    """Return the application container."""
    return request.app.state.container


def credentials_from_request(request: Request) -> RequestCredentials:
    """Collect the credentials a request presents."""
    return RequestCredentials(
        cookies=dict(request.cookies),
        authorization=request.headers.get("authorization"),
    )


def get_cookie_sink(
    request: Request, container: AppContainer = Depends(get_container)
) -> CookieSink:
    """Return this request's cookie sink.

    The gatekeeper middleware creates the sink and copies its writes onto
    the response once the route has run.
    """
    sink = getattr(request.state, "cookie_sink", None)
    if sink is None:
        sink = CookieSink(container.settings.cookie_options())
        request.state.cookie_sink = sink
    return sink


def get_current_session(
    request: Request,
    sink: CookieSink = Depends(get_cookie_sink),
    container: AppContainer = Depends(get_container),
) -> Session | None:
    """Return the caller's session, resolving it at most once per request."""
    if getattr(request.state, "session_resolved", False):
        return request.state.session
    session = container.session_resolver.resolve(
        credentials_from_request(request), sink
    )
    request.state.session = session
    request.state.session_resolved = True
    return session


def require_session(
    session: Session | None = Depends(get_current_session),
) -> Session:
    """Return the caller's session or fail with 401."""
    if session is None:
        raise UnauthenticatedError()
    return session


def get_book_service(
    session: Session = Depends(require_session),
    container: AppContainer = Depends(get_container),
) -> BookService:
    """Build a book service whose repository queries run as the caller."""
    return BookService(
        repository=container.book_repository_factory(session),
        guard=container.access_guard,
    )
