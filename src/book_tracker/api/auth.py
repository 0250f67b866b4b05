"""Sign-in and sign-out endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from book_tracker.api.dependencies import (
    get_container,
    get_cookie_sink,
    require_session,
)
from book_tracker.api.models import LoginRequest
from book_tracker.containers import AppContainer
from book_tracker.domain.auth import Session
from book_tracker.services.sessions import CookieSink

router = APIRouter(tags=["auth"])


@router.get("/auth/login", response_class=HTMLResponse)
async def login_page() -> HTMLResponse:
    """Minimal sign-in form."""
    return HTMLResponse(_LOGIN_HTML)


@router.post("/auth/login")
def login(
    payload: LoginRequest,
    sink: CookieSink = Depends(get_cookie_sink),
    container: AppContainer = Depends(get_container),
) -> dict[str, str]:
    """Sign in and store the session in cookies."""
    session = container.identity_provider.sign_in(
        payload.email, payload.password, sink
    )
    return {"user_id": str(session.user_id)}


@router.delete("/api/session")
def logout(
    request: Request,
    session: Session = Depends(require_session),
    sink: CookieSink = Depends(get_cookie_sink),
    container: AppContainer = Depends(get_container),
) -> dict[str, bool]:
    """Sign out and clear the session cookies."""
    container.identity_provider.sign_out(dict(request.cookies), sink)
    return {"success": True}


_LOGIN_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Book Tracker - Sign in</title>
    <style>
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 2rem; }
      .row { margin-bottom: 1rem; }
      input { padding: 0.4rem 0.6rem; width: 320px; }
      button { padding: 0.4rem 0.8rem; }
      #error { color: #b00020; }
    </style>
  </head>
  <body>
    <h1>Book Tracker</h1>
    <form id="login">
      <div class="row">
        <label>Email</label><br />
        <input id="email" type="email" required />
      </div>
      <div class="row">
        <label>Password</label><br />
        <input id="password" type="password" required />
      </div>
      <button type="submit">Sign in</button>
    </form>
    <p id="error"></p>
    <script>
      document.getElementById('login').addEventListener('submit', async (e) => {
        e.preventDefault();
        const res = await fetch('/auth/login', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({
            email: document.getElementById('email').value,
            password: document.getElementById('password').value
          })
        });
        if (res.ok || res.redirected) {
          window.location.href = '/dashboard';
          return;
        }
        const data = await res.json();
        document.getElementById('error').textContent = data.error;
      });
    </script>
  </body>
</html>
"""
