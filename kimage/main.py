from fastapi import FastAPI
from kimage.config import Config
from kimage.routes import files, health, upload


def create_app(config: Config) -> FastAPI:
    app = FastAPI(title="kimage", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config

    @app.middleware("http")
    async def referrer_policy_middleware(request, call_next):
        response = await call_next(request)
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

    app.include_router(health.router)
    app.include_router(upload.router)
    # catch-all /{name}, must stay last
    app.include_router(files.router)
    return app
