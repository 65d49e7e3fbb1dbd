"""HTTP server exposing the product catalog and the bulk discount action."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, JSONResponse

from product_catalog import __version__
from product_catalog.config import AppSettings
from product_catalog.errors import DataError, StorageError, ValidationError
from product_catalog.pricing import apply_discount, parse_discount_percent
from product_catalog.store import ProductStore

load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(settings: AppSettings) -> None:
    """Log to the console and to ``server.log`` in the configured directory."""
    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(f'{settings.log_dir}/server.log')
        ]
    )


def get_store(request: Request) -> ProductStore:
    return request.app.state.store


def create_app(settings: Optional[AppSettings] = None, store: Optional[ProductStore] = None) -> FastAPI:
    """Build the FastAPI application.

    ``store`` may be injected (tests do this); otherwise one is built from
    ``settings``, which default to the environment.
    """
    settings = settings or AppSettings.from_env()
    if store is None:
        store = ProductStore(settings.cosmos, settings.products_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await run_in_threadpool(app.state.store.initialize)
        logger.info(
            "Catalog backend: %s",
            "Cosmos DB" if app.state.store.is_remote_enabled() else "local JSON file",
        )
        yield

    app = FastAPI(title="Product Catalog", version=__version__, lifespan=lifespan)
    app.state.store = store
    app.state.public_dir = Path(settings.public_dir)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.get("/api/products")
    async def list_products(store: ProductStore = Depends(get_store)):
        try:
            products = await run_in_threadpool(store.read_all)
        except StorageError:
            logger.exception("Error reading products")
            return JSONResponse(status_code=500, content={"error": "failed to load products"})
        return products

    @app.post("/api/products/update-all")
    async def update_all_products(request: Request, store: ProductStore = Depends(get_store)):
        # Concurrent calls are not serialized; the last write wins.
        try:
            body = await request.json()
        except ValueError:
            body = None
        discount_percent = parse_discount_percent(body)

        try:
            products = await run_in_threadpool(store.read_all)
        except StorageError:
            logger.exception("Error reading products")
            return JSONResponse(status_code=500, content={"error": "failed to load products"})

        try:
            updated = apply_discount(products, discount_percent)
        except DataError:
            logger.exception("Invalid products data")
            return JSONResponse(status_code=500, content={"error": "invalid products data"})

        try:
            await run_in_threadpool(store.replace_all, updated)
        except StorageError:
            logger.exception("Failed to write products")
            return JSONResponse(status_code=500, content={"error": "failed to write products"})

        logger.info("Applied %s%% discount to %s products", discount_percent, len(updated))
        return {"success": True, "updatedCount": len(updated)}

    @app.get("/api/db-status")
    async def db_status(store: ProductStore = Depends(get_store)):
        await run_in_threadpool(store.initialize)
        return {"remoteEnabled": store.is_remote_enabled(), "info": store.get_backend_info()}

    @app.get("/{full_path:path}", include_in_schema=False)
    async def frontend(full_path: str):
        """Serve static files, falling back to index.html for client-side routes."""
        public_dir = app.state.public_dir.resolve()
        candidate = (public_dir / full_path).resolve()
        if full_path and public_dir in candidate.parents and candidate.is_file():
            return FileResponse(candidate)

        index = public_dir / "index.html"
        if not index.is_file():
            logger.warning("Front-end entry document not found: %s", index)
            return JSONResponse(status_code=404, content={"error": "not found"})
        return FileResponse(index)

    return app


def main():
    settings = AppSettings.from_env()
    configure_logging(settings)
    logger.info("Starting product catalog server on %s:%s", settings.host, settings.port)
    try:
        uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
    except (OSError, RuntimeError, ValueError) as e:
        logger.error("Failed to start server: %s", str(e))
        raise


if __name__ == "__main__":
    main()
