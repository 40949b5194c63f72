"""
Randomizer File Server API
"""
import logging
import os
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import FileResponse, RedirectResponse
from pydantic import BaseModel

from src.catalog import build_catalog_store
from src.config import Settings
from src.file_data import Catalog, CatalogStore, File
from src.resolver import Outcome, Resolver, find_literal

logger = logging.getLogger(__name__)

# Headers sent with every redirect to a remotely hosted asset
ASSET_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Origin, X-Requested-With, Content-Type, Accept, Authorization",
}


# ============================================
# Pydantic models for responses
# ============================================

class HealthResponse(BaseModel):
    status: str
    publicFiles: int
    assetFiles: int


# ============================================
# Helper functions
# ============================================

def configure_logging(level: str):
    """Set up root logging for the process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def send_asset(location: str) -> RedirectResponse:
    """Redirect to a remote asset with permissive CORS headers."""
    return RedirectResponse(location, status_code=302, headers=ASSET_CORS_HEADERS)


def send_file(file: File):
    """Serve a catalog entry, redirecting when it lives remotely."""
    if file.is_remote:
        return send_asset(file.location)
    if not os.path.isfile(file.location):
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(file.location)


def request_subpath(request: Request, prefix: str) -> str:
    """
    The still-encoded path below a route prefix, e.g. "/a%20b.png" for
    "/public/a%20b.png". Decoding is left to the resolver.
    """
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1").split("?", 1)[0] if raw_path else request.url.path
    if path.startswith(prefix):
        path = path[len(prefix):]
    return path or "/"


# ============================================
# App factory
# ============================================

def create_app(settings: Optional[Settings] = None, store: Optional[CatalogStore] = None,
               resolver: Optional[Resolver] = None) -> FastAPI:
    """
    Build the app. Catalogs are scanned here, before the server starts
    accepting connections, unless a prebuilt store is passed in.
    """
    settings = settings or Settings.from_env()
    if store is None:
        store = build_catalog_store(settings)
    if resolver is None:
        resolver = Resolver(settings.protected_filenames, settings.singleton_policy)

    logger.info(f"Catalog ready: {len(store.public)} public files, {len(store.assets)} remote assets")

    app = FastAPI(title="Randomizer File Server")
    app.state.settings = settings
    app.state.store = store
    app.state.resolver = resolver

    def serve_literal(name: str):
        found = find_literal(name, store.all_catalogs())
        if found is None:
            raise HTTPException(status_code=404, detail="Not found")
        return send_file(found)

    def serve_randomized(request: Request, prefix: str, catalog: Catalog,
                         send: Callable[[File], Response]):
        resolution = resolver.resolve(request_subpath(request, prefix), catalog)
        if resolution.outcome == Outcome.LITERAL:
            return serve_literal(resolution.base_name)
        if resolution.outcome == Outcome.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Not found")
        return send(resolution.file)

    @app.get("/")
    async def index():
        """Always serve the index file."""
        if not os.path.isfile(settings.index_path):
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(settings.index_path)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="ok",
            publicFiles=len(store.public),
            assetFiles=len(store.assets),
        )

    @app.get("/assets/{asset_path:path}")
    async def get_asset(request: Request, asset_path: str):
        """Redirect to a random remote asset sharing the requested extension."""
        return serve_randomized(request, "/assets", store.assets,
                                lambda file: send_asset(file.location))

    @app.get("/public/{file_path:path}")
    async def get_public_file(request: Request, file_path: str):
        """Serve a random local file sharing the requested extension."""
        return serve_randomized(request, "/public", store.public, send_file)

    # Reaching this route means the literal file was asked for
    @app.get("/{full_path:path}")
    async def get_literal_file(full_path: str):
        """Serve an exact base-name match from either catalog."""
        return serve_literal(os.path.basename(full_path))

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings)
    print(f"* ~ * server running on {settings.port} * ~ *")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)
