"""FastAPI dependencies for the Larder API.

Provides:
- Database session dependency
- Unit catalog for the conversion engine (one per request)
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from .db import get_db
from .services.unit_catalog import SqlUnitCatalog


def get_catalog(db: Session = Depends(get_db)) -> SqlUnitCatalog:
    """Read-only catalog bound to the request's session.

    Units are memoized for the lifetime of the request, so a conversion
    sees a consistent snapshot even if the table changes underneath it.
    """
    return SqlUnitCatalog(db)
