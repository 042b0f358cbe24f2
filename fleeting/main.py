import logging
import os
import secrets

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from fleeting.errors import FleetingError
from fleeting.routers.links import router as links_router
from fleeting.routers.share import router as share_router
from fleeting.routers.uploads import router as uploads_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SESSION_NAME = os.getenv("SESSION_NAME", "fleeting")
SESSION_SECRET = os.getenv("SESSION_SECRET", "")
if not SESSION_SECRET:
    # sessions will not survive a restart
    logger.warning("SESSION_SECRET is not set; using a random per-process secret")
    SESSION_SECRET = secrets.token_urlsafe(32)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:8080").split(",")
    if origin.strip()
]

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET, session_cookie=SESSION_NAME)
app.include_router(links_router)
app.include_router(uploads_router)
app.include_router(share_router)


@app.exception_handler(FleetingError)
def handle_fleeting_error(request: Request, exc: FleetingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"status": False, "error": exc.message})


@app.exception_handler(StarletteHTTPException)
def handle_http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"status": False, "error": exc.detail})


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=422, content={"status": False, "error": jsonable_encoder(exc.errors())})


@app.get("/")
def read_root():
    return {"status": True, "message": "fleeting"}
