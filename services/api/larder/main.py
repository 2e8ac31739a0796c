# Larder API Main Entry Point
import logging
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from .settings import settings
from .services.unit_conversion import ConversionError
from .routers.ready import router as ready_router
from .routers.units import router as units_router
from .routers.units_density import router as density_router
from .routers.categories import router as categories_router
from .routers.ingredients import router as ingredients_router
from .routers.dev import router as dev_router

# Configure structured logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("larder")

# Conversion error kind -> HTTP status
CONVERSION_ERROR_STATUS = {
    "InvalidQuantity": 400,
    "UnitNotFound": 404,
    "IngredientRequiredForConversion": 400,
    "DensityConversionNotFound": 404,
    "IncompatibleUnitTypes": 400,
    "IncompatibleBaseUnits": 400,
}

# Rate limiter (per-IP)
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit_default])

app = FastAPI(title="Larder API", version="0.1.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(ConversionError)
async def conversion_error_handler(request: Request, exc: ConversionError):
    status_code = CONVERSION_ERROR_STATUS.get(exc.kind, 400)
    logger.info(f"Conversion rejected ({exc.kind}): {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(units_router, prefix="/api/units", tags=["units"])
app.include_router(density_router, prefix="/api", tags=["densities"])
app.include_router(categories_router, prefix="/api", tags=["categories"])
app.include_router(ingredients_router, prefix="/api/ingredients", tags=["ingredients"])
app.include_router(dev_router, prefix="/api", tags=["dev"])
