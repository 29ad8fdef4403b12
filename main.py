import uvicorn
from fastapi import FastAPI
from hogar.config import settings
from hogar.middlewares import setup_middlewares
from hogar.exceptions import setup_exception_handlers
from hogar.routers import auth, users, sites, residents
from hogar.logging_config import logger


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, version="1.0.0")

    setup_middlewares(app)
    setup_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Application starting", extra={"version": "1.0.0", "api_prefix": settings.api_prefix})

    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(users.router, prefix=settings.api_prefix)
    app.include_router(sites.router, prefix=settings.api_prefix)
    app.include_router(residents.router, prefix=settings.api_prefix)

    @app.get("/")
    def root():
        return {"ok": True, "docs": "/docs"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("main:app", reload=True, port=8001)
