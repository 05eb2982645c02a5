from contextlib import asynccontextmanager
from typing import Any, List

from fastapi import Depends, FastAPI, HTTPException, Path, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from covid_portal import config, db
from covid_portal.auth_utils import create_access_token, require_token, verify_password
from covid_portal.db import Store, StoreError, get_store
from covid_portal.logging_config import setup_logging
from covid_portal.mappers import district_from_row, state_from_row, stats_from_row
from covid_portal.schemas import (
    APIMessage,
    District,
    DistrictIn,
    LoginRequest,
    LoginResponse,
    SQL_INT_MAX,
    SQL_INT_MIN,
    State,
    StateStats,
)

openapi_tags = [
    {"name": "Health", "description": "Service health checks."},
    {"name": "Auth", "description": "Login and token issuance."},
    {"name": "States", "description": "State listing, lookup and aggregate statistics."},
    {"name": "Districts", "description": "District create/read/update/delete."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store on startup (unless one is already attached) and close it on shutdown."""
    setup_logging()
    if getattr(app.state, "store", None) is None:
        app.state.store = db.create_store()
    try:
        yield
    finally:
        store = getattr(app.state, "store", None)
        if store is not None:
            store.close()
            app.state.store = None
            logger.info("Store closed")


app = FastAPI(
    title="COVID-19 India Portal API",
    description=(
        "State and district COVID-19 statistics.\n\n"
        "Auth: obtain a token from `POST /login/` and send it as "
        "`Authorization: Bearer <token>` on every other route."
    ),
    version="1.0.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")


def _bad_request(msg: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=msg)


def _row_id(name: str) -> Any:
    return Path(..., ge=SQL_INT_MIN, le=SQL_INT_MAX, description=f"{name} id")


def _fetch_state(store: Store, state_id: int):
    state = store.fetch_one("SELECT * FROM state WHERE state_id=%s", [state_id])
    if not state:
        raise _not_found("State")
    return state


# =========================
# Error handlers
# =========================

@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed request to {} {}", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StoreError)
async def _store_error(request: Request, exc: StoreError) -> PlainTextResponse:
    logger.opt(exception=exc).error("Store failure on {} {}", request.method, request.url.path)
    return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.get("/", response_model=APIMessage, tags=["Health"], summary="Health check")
def health_check() -> APIMessage:
    """Health check endpoint."""
    return APIMessage(message="Healthy")


# =========================
# Auth
# =========================

@app.post("/login/", response_model=LoginResponse, tags=["Auth"], summary="Login")
def login(payload: LoginRequest, store: Store = Depends(get_store)) -> LoginResponse:
    """Verify credentials and return a signed access token."""
    user = store.fetch_one('SELECT username, password FROM "user" WHERE username=%s', [payload.username])
    if not user:
        logger.warning("Login failed for unknown user {!r}", payload.username)
        raise _bad_request("Invalid user")
    if not verify_password(payload.password, user["password"]):
        logger.warning("Login failed for {!r}: wrong password", payload.username)
        raise _bad_request("Invalid password")

    logger.info("User {!r} logged in", payload.username)
    return LoginResponse(jwt_token=create_access_token(user["username"]))


# =========================
# States
# =========================

@app.get("/states/", response_model=List[State], tags=["States"], summary="List states")
def list_states(store: Store = Depends(get_store), _: str = Depends(require_token)) -> List[State]:
    """List all states."""
    return [state_from_row(r) for r in store.fetch_all("SELECT * FROM state")]


@app.get("/states/{state_id}/", response_model=State, tags=["States"], summary="Get state")
def get_state(
    state_id: int = _row_id("State"),
    store: Store = Depends(get_store),
    _: str = Depends(require_token),
) -> State:
    """Get a state by id."""
    return state_from_row(_fetch_state(store, state_id))


@app.get("/states/{state_id}/stats/", response_model=StateStats, tags=["States"], summary="State statistics")
def get_state_stats(
    state_id: int = _row_id("State"),
    store: Store = Depends(get_store),
    _: str = Depends(require_token),
) -> StateStats:
    """
    Sum cases, cured, active and deaths over every district of a state.

    The state itself is not looked up: an id with no districts yields null totals.
    """
    stats = store.fetch_one(
        """
        SELECT
          SUM(cases) AS total_cases,
          SUM(cured) AS total_cured,
          SUM(active) AS total_active,
          SUM(deaths) AS total_deaths
        FROM district
        WHERE state_id=%s
        """,
        [state_id],
    )
    return stats_from_row(stats or {})


# =========================
# Districts
# =========================

@app.get("/districts/{district_id}/", response_model=District, tags=["Districts"], summary="Get district")
def get_district(
    district_id: int = _row_id("District"),
    store: Store = Depends(get_store),
    _: str = Depends(require_token),
) -> District:
    """Get a district by id."""
    district = store.fetch_one("SELECT * FROM district WHERE district_id=%s", [district_id])
    if not district:
        raise _not_found("District")
    return district_from_row(district)


@app.post("/districts/", response_class=PlainTextResponse, tags=["Districts"], summary="Create district")
def create_district(
    payload: DistrictIn,
    store: Store = Depends(get_store),
    username: str = Depends(require_token),
) -> str:
    """Add a district. stateId is stored as given."""
    store.execute(
        """
        INSERT INTO district (state_id, district_name, cases, cured, active, deaths)
        VALUES (%s, %s, %s, %s, %s, %s)
        """,
        [payload.state_id, payload.district_name, payload.cases, payload.cured, payload.active, payload.deaths],
    )
    logger.info("{} added district {!r} to state {}", username, payload.district_name, payload.state_id)
    return "District Successfully Added"


@app.delete("/districts/{district_id}/", response_class=PlainTextResponse, tags=["Districts"], summary="Delete district")
def delete_district(
    district_id: int = _row_id("District"),
    store: Store = Depends(get_store),
    username: str = Depends(require_token),
) -> str:
    """Delete a district. Deleting an id that does not exist is not an error."""
    affected = store.execute("DELETE FROM district WHERE district_id=%s", [district_id])
    logger.info("{} deleted district {} ({} row(s))", username, district_id, affected)
    return "District Removed"


@app.put("/districts/{district_id}/", response_class=PlainTextResponse, tags=["Districts"], summary="Update district")
def update_district(
    payload: DistrictIn,
    district_id: int = _row_id("District"),
    store: Store = Depends(get_store),
    username: str = Depends(require_token),
) -> str:
    """Overwrite every field of a district. An unknown id matches no row and changes nothing."""
    affected = store.execute(
        """
        UPDATE district
        SET state_id=%s, district_name=%s, cases=%s, cured=%s, active=%s, deaths=%s
        WHERE district_id=%s
        """,
        [
            payload.state_id,
            payload.district_name,
            payload.cases,
            payload.cured,
            payload.active,
            payload.deaths,
            district_id,
        ],
    )
    logger.info("{} updated district {} ({} row(s))", username, district_id, affected)
    return "District Details Updated"
