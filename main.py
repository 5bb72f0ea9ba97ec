from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time
import logging

from config import settings
from fitness_types import InvalidInputError

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s | %(levelname)s | %(message)s")
log = logging.getLogger(__name__)

def create_app() -> FastAPI:
    app = FastAPI(
        title="FitEstimate API",
        version="1.0.0",
        description="Heuristic fitness estimation: energy balance, training volume and adaptive plans.",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000
        response.headers["X-Process-Time-Ms"] = f"{elapsed:.2f}"
        return response

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        log.warning(f"Rejected input on {request.url.path}: {exc}")
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.on_event("startup")
    async def startup():
        from database import init_db
        await init_db()

    @app.on_event("shutdown")
    async def shutdown():
        from database import close_db
        await close_db()

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "ok", "version": "1.0.0", "app": settings.APP_NAME}

    from routes import calculator_router, nutrition_router, progress_router, adaptation_router
    app.include_router(calculator_router, prefix="/calculators", tags=["Calculators"])
    app.include_router(nutrition_router, prefix="/nutrition", tags=["Nutrition"])
    app.include_router(progress_router, prefix="/progress", tags=["Progress"])
    app.include_router(adaptation_router, prefix="/adaptation", tags=["Adaptation"])

    return app


app = create_app()
