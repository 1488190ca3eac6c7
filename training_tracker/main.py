import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from training_tracker.config import Config
from training_tracker.database import SessionLocal, init_db
from training_tracker.routes import auth, comments, progress, topics, users
from training_tracker.services.seed import seed_defaults
from training_tracker.services.storage import TrainingStorage

logger = logging.getLogger(__name__)

def configure_logging():
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: logging, schema, default data, file storage
    configure_logging()
    await init_db()
    if Config.SEED_DEFAULT_DATA:
        async with SessionLocal() as session:
            await seed_defaults(TrainingStorage(session))
    os.makedirs(Config.AVATAR_DIR, exist_ok=True)
    os.makedirs(Config.NOTEPAD_DIR, exist_ok=True)
    yield

app = FastAPI(title="Training Tracker API", lifespan=lifespan)

origins = [
    Config.FRONTEND_URL,
    "http://localhost:5000",
    "http://127.0.0.1:5173",
]

def _with_cors(request: Request, response: JSONResponse) -> JSONResponse:
    # Re-add CORS headers manually for error responses
    origin = request.headers.get("origin")
    if origin in origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
    return response

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in errors
    )
    return JSONResponse(status_code=422, content={"error": message or "Invalid request"})

# Global Exception Handler to ensure CORS headers are present even on 500 errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Global Exception: %s", exc, exc_info=True)
    response = JSONResponse(status_code=500, content={"error": "Internal Server Error"})
    return _with_cors(request, response)

# 1. Proxy & Session Middleware
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    SessionMiddleware,
    secret_key=Config.SECRET_KEY,
    max_age=3600 * 24 * 7, # 7 Days
    https_only=Config.ENV == "PRODUCTION",
    same_site="lax",
    domain=Config.SESSION_COOKIE_DOMAIN,
)

# 2. CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 3. Routes
app.include_router(auth.router, prefix="/api", tags=["Auth"])
app.include_router(topics.router, prefix="/api/topics", tags=["Topics"])
app.include_router(progress.router, prefix="/api/progress", tags=["Progress"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(comments.router, prefix="/api/comments", tags=["Comments"])

app.mount("/avatars", StaticFiles(directory=Config.AVATAR_DIR, check_dir=False), name="avatars")

@app.get("/")
def root():
    return {"message": "Training Tracker API Online"}
