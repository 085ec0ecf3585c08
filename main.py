"""
Main application entry point with FastAPI
"""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from config import Settings, settings as default_settings
from database import check_connection, create_engine, create_session_factory, init_db
from models import (
    ClearResponse,
    DeleteResponse,
    Product,
    ProductCreate,
    ProductSearch,
    ProductUpdate,
    SyncResponse,
)
from repository import ProductRepository
from scraper import CatalogFetcher
from service import ProductService
from sync import CatalogSynchronizer, SyncScheduler

# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def get_service(request: Request) -> ProductService:
    return request.app.state.service


def get_synchronizer(request: Request) -> CatalogSynchronizer:
    return request.app.state.synchronizer


def search_params(
    q: Optional[str] = Query(default=None),
    product_type: Optional[str] = Query(default=None),
    min_price: Optional[str] = Query(default=None),
    max_price: Optional[str] = Query(default=None),
    available: Optional[str] = Query(default=None),
) -> ProductSearch:
    """Parse search query parameters once at the boundary"""
    return ProductSearch(
        q=q,
        product_type=product_type,
        min_price=min_price,
        max_price=max_price,
        available=available,
    )


def create_app(
    app_settings: Optional[Settings] = None,
    fetcher: Optional[CatalogFetcher] = None,
) -> FastAPI:
    """
    Build the application and its collaborators

    Args:
        app_settings: Settings to use instead of the environment
        fetcher: Products API fetcher to use instead of the configured one

    Returns:
        FastAPI application
    """
    app_settings = app_settings or default_settings

    engine = create_engine(app_settings.DATABASE_URL)
    repository = ProductRepository(create_session_factory(engine))
    service = ProductService(repository)
    synchronizer = CatalogSynchronizer(
        repository,
        fetcher or CatalogFetcher(
            app_settings.PRODUCTS_API_URL,
            connect_timeout=app_settings.CONNECT_TIMEOUT,
            read_timeout=app_settings.READ_TIMEOUT,
        ),
        max_products=app_settings.MAX_PRODUCTS,
    )
    scheduler = SyncScheduler(
        synchronizer,
        interval=app_settings.SYNC_INTERVAL_SECONDS,
        initial_delay=app_settings.SYNC_INITIAL_DELAY_SECONDS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        # Startup
        logger.info("Starting Catalog Sync API...")
        logger.info(f"Products API: {app_settings.PRODUCTS_API_URL}")

        await init_db(engine)
        if await check_connection(engine):
            logger.info("Database connection verified")
        else:
            logger.warning("Database connection test failed")

        await synchronizer.clear_on_restart(app_settings.CLEAR_ON_RESTART)

        if app_settings.SYNC_ENABLED:
            scheduler.start()

        yield

        # Shutdown
        logger.info("Shutting down Catalog Sync API...")
        await scheduler.stop()
        await engine.dispose()

    app = FastAPI(
        title="Catalog Sync API",
        description="API for syncing and browsing a remote product catalog",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.service = service
    app.state.synchronizer = synchronizer
    app.state.scheduler = scheduler

    @app.get("/")
    async def root(service: ProductService = Depends(get_service)):
        """Root endpoint"""
        return {
            "message": "Catalog Sync API",
            "version": "1.0.0",
            "product_count": await service.get_product_count(),
            "endpoints": {
                "products": "/products",
                "search": "/products/search",
                "sync": "/products/sync",
                "health": "/health"
            }
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        db_status = await check_connection(engine)
        return {
            "status": "healthy" if db_status else "degraded",
            "database": "connected" if db_status else "disconnected",
            "scheduler": "running" if scheduler.running else "stopped",
            "service": "catalog-sync"
        }

    @app.get("/products", response_model=List[Product])
    async def list_products(service: ProductService = Depends(get_service)):
        return await service.get_all_products()

    @app.post("/products", response_model=Product, status_code=201)
    async def add_product(
        request: ProductCreate,
        service: ProductService = Depends(get_service)
    ):
        return await service.save_product(request)

    @app.get("/products/count")
    async def product_count(service: ProductService = Depends(get_service)):
        return {"product_count": await service.get_product_count()}

    @app.post("/products/load", response_model=List[Product])
    async def load_products(service: ProductService = Depends(get_service)):
        return await service.get_all_products()

    @app.post("/products/clear", response_model=ClearResponse)
    async def clear_products(service: ProductService = Depends(get_service)):
        cleared = await service.clear_all_products()
        return ClearResponse(cleared=cleared, product_count=await service.get_product_count())

    @app.post("/products/sync", response_model=SyncResponse)
    async def sync_products(synchronizer: CatalogSynchronizer = Depends(get_synchronizer)):
        """Run one sync cycle now"""
        try:
            logger.info("Sync request received")
            return await synchronizer.run_cycle()
        except Exception as e:
            logger.error(f"Sync failed with exception: {str(e)}")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "message": "Sync operation failed",
                    "error": str(e)
                }
            )

    @app.get("/products/search", response_model=List[Product])
    async def search_products(
        search: ProductSearch = Depends(search_params),
        service: ProductService = Depends(get_service)
    ):
        return await service.search_products_with_filters(search)

    @app.get("/product-types", response_model=List[str])
    async def product_types(service: ProductService = Depends(get_service)):
        return await service.get_product_types()

    @app.get("/products/{product_id}", response_model=Product)
    async def get_product(product_id: int, service: ProductService = Depends(get_service)):
        product = await service.get_product_by_id(product_id)
        if product is None:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
        return product

    @app.put("/products/{product_id}", response_model=Product)
    async def update_product(
        product_id: int,
        request: ProductUpdate,
        service: ProductService = Depends(get_service)
    ):
        product = await service.update_product(product_id, request)
        if product is None:
            raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
        return product

    @app.delete("/products/{product_id}", response_model=DeleteResponse)
    async def delete_product(product_id: int, service: ProductService = Depends(get_service)):
        deleted = await service.delete_product(product_id)
        return DeleteResponse(deleted=deleted, product_count=await service.get_product_count())

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=default_settings.LOG_LEVEL.lower()
    )
