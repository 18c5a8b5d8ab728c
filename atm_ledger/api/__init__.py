"""
ATM Ledger API Application Factory
"""

from typing import Optional

from fastapi import FastAPI

from .. import __version__
from ..config import LedgerConfig, get_config
from ..ledger import Ledger
from .customer import router as customer_router
from .technician import router as technician_router


def create_app(ledger: Optional[Ledger] = None, config: Optional[LedgerConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = config or get_config()

    app = FastAPI(
        title="ATM Ledger API",
        description="Account ledger with cash dispenser reserve and transaction log",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.config = config
    app.state.ledger = ledger or Ledger.open(config)

    app.include_router(customer_router, prefix="/customer", tags=["Customer"])
    app.include_router(technician_router, prefix="/technician", tags=["Technician"])

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "atm_ledger_api",
            "version": __version__
        }

    @app.get("/")
    def get_api_info():
        """Get API information"""
        return {
            "name": "ATM Ledger API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "customer": "/customer",
                "technician": "/technician",
            }
        }

    return app
