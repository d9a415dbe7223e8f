"""
api/routes/auth.py -- Session and account REST endpoints.

Routes:
  POST /login    -- password login; returns {sessionID} plus identity headers
  POST /auth     -- validate a sessionID; empty 200 plus identity headers
  GET  /signin   -- tells the caller where to authenticate (no side effect)
  GET  /whoAmI   -- bearer-token caller's subject id (guarded)
  POST /signup   -- create an account
  POST /token    -- password login; returns a bearer JWT for /whoAmI

Error responses all use the {statusCode, code, message} envelope. Handlers
raise AuthError subclasses; api/main.py renders them.

Security:
  POST /login and POST /token are rate-limited per client IP (LOGIN_RATE_LIMIT).
  Cache-Control: no-store on responses that carry a credential.
  Routes are sync so FastAPI runs bcrypt in its threadpool, off the event loop.
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from api.limiter import limiter, login_rate_limit
from api.models import (
    CredentialsRequest,
    ErrorResponse,
    LoginResponse,
    MessageResponse,
    SessionRequest,
    SignupRequest,
    TokenResponse,
    UserResponse,
)
from auth.dependencies import get_gateway, get_signup_service, require_principal
from auth.errors import InvalidCredentials, Unauthenticated, UserNotFound
from auth.gateway import AuthGateway
from auth.models import NewUser, Principal, SessionInfo
from auth.signup import SignupService
from auth.tokens import create_access_token
from core.config import get_settings

# Auth policy:
# - POST /login:   public -- login endpoint must be unauthenticated
# - POST /auth:    public -- the session token in the body is the credential
# - GET  /signin:  public
# - POST /signup:  public
# - POST /token:   public
# - GET  /whoAmI:  requires bearer token (require_principal)
router = APIRouter()

_ERROR_401 = {401: {"model": ErrorResponse}}


def _set_identity_headers(response: Response, identity: SessionInfo) -> None:
    response.headers["X-UserId"] = identity.user_id
    response.headers["X-User"] = identity.username
    response.headers["X-Email"] = identity.email


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


# limiter.limit sits below router.post so the registered endpoint is the
# rate-limited wrapper.
@router.post("/login", response_model=LoginResponse, responses=_ERROR_401)
@limiter.limit(login_rate_limit)
def login(
    request: Request,
    body: CredentialsRequest,
    gateway: AuthGateway = Depends(get_gateway),
) -> JSONResponse:
    """Verify credentials and open a new server-side session.

    Every login creates a fresh session, even for a user who already has one.
    Unknown usernames and wrong passwords both produce the same 401.
    """
    result = gateway.login(body.username, body.password)
    resp = JSONResponse(content=LoginResponse(sessionID=result.token).model_dump())
    _set_identity_headers(resp, result.identity)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth", responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}})
def authorize(body: SessionRequest, gateway: AuthGateway = Depends(get_gateway)) -> Response:
    """Check a session token. Success has no body -- the identity travels in headers."""
    identity = gateway.authorize(body.sessionID)
    resp = Response(status_code=200)
    _set_identity_headers(resp, identity)
    return resp


@router.get("/signin", response_model=MessageResponse)
async def signin() -> MessageResponse:
    """Point unauthenticated callers at POST /login."""
    return MessageResponse(message=Unauthenticated.message)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@router.post("/signup", response_model=UserResponse, responses={409: {"model": ErrorResponse}})
def signup(body: SignupRequest, service: SignupService = Depends(get_signup_service)) -> UserResponse:
    """Create an account. The response never includes the password."""
    user = service.sign_up(NewUser(username=body.username, email=body.email, password=body.password))
    return UserResponse.from_record(user)


# ---------------------------------------------------------------------------
# Bearer tokens
# ---------------------------------------------------------------------------


@router.post("/token", response_model=TokenResponse, responses=_ERROR_401)
@limiter.limit(login_rate_limit)
def issue_token(
    request: Request,
    body: CredentialsRequest,
    gateway: AuthGateway = Depends(get_gateway),
) -> JSONResponse:
    """Exchange username/password for a bearer JWT accepted by GET /whoAmI."""
    try:
        user = gateway.verifier.verify(body.username, body.password)
    except InvalidCredentials as exc:
        raise UserNotFound() from exc
    expires_in = get_settings().token_expire_seconds
    token = create_access_token(user.id, user.username, expire_seconds=expires_in)
    resp = JSONResponse(content=TokenResponse(access_token=token, expires_in=expires_in).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/whoAmI", response_model=str, responses=_ERROR_401)
def who_am_i(
    principal: Principal = Depends(require_principal),
    gateway: AuthGateway = Depends(get_gateway),
) -> str:
    """Return the caller's subject id. Unauthenticated callers never reach this body."""
    return gateway.who_am_i(principal)
