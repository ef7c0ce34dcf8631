from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from examdesk.api.routes import (
    duties,
    duty_swaps,
    exam_schedules,
    exams,
    health,
    rooms,
    seating,
    students,
    teachers,
)
from examdesk.core.config import get_settings
from examdesk.core.exceptions import AppError
from examdesk.core.middleware import RequestSizeLimitMiddleware, SecurityHeadersMiddleware
from examdesk.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )


app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(SecurityHeadersMiddleware, settings=settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(teachers.router, prefix=settings.api_prefix, tags=["teachers"])
app.include_router(rooms.router, prefix=settings.api_prefix, tags=["rooms"])
app.include_router(students.router, prefix=settings.api_prefix, tags=["students"])
app.include_router(exams.router, prefix=settings.api_prefix, tags=["exams"])
app.include_router(exam_schedules.router, prefix=settings.api_prefix, tags=["exam-schedules"])
app.include_router(duties.router, prefix=settings.api_prefix, tags=["duties"])
app.include_router(duty_swaps.router, prefix=settings.api_prefix, tags=["duty-swaps"])
app.include_router(seating.router, prefix=settings.api_prefix, tags=["seating"])
