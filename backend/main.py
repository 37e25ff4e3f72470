import os
import sys
import logging
from contextlib import asynccontextmanager

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

import config
import database
from dependencies import build_grading_service, build_verification_service
from errors import AppError, InternalError
from routes.auth_routes import router as auth_router
from routes.problem_routes import router as problem_router
from routes.progress_routes import router as progress_router
from routes.grading_routes import router as grading_router
from routes.admin_routes import router as admin_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.init_engine(config.DATABASE_URL)
    database.init_db(config.DATABASE_URL)
    app.state.verification_service = build_verification_service()
    app.state.grading_service = build_grading_service()
    logger.info(f"Verification backend: {config.VERIFICATION_BACKEND}, email backend: {config.EMAIL_BACKEND}")
    yield
    database.dispose_engine()


app = FastAPI(title="LeetDesign API", lifespan=lifespan)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "kind": exc.kind},
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    err = InternalError()
    return JSONResponse(status_code=err.status_code, content={"error": err.message, "kind": err.kind})


@app.get("/api/v1/health-check")
async def health():
    return {"status": "ok", "message": "Backend is alive!"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(problem_router)
app.include_router(progress_router)
app.include_router(grading_router)
app.include_router(admin_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
