from fastapi import APIRouter, Depends, Response

from app.config import get_settings
from app.dependencies import get_store
from app.models import utcnow
from app.schemas.responses import HealthResponse
from app.services.ledger import LedgerStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse, responses={503: {"model": HealthResponse}})
def health_check(response: Response, store: LedgerStore = Depends(get_store)):
    """Liveness plus a trivial database probe; 503 when storage is unreachable."""
    connected = store.ping()
    if not connected:
        response.status_code = 503

    return HealthResponse(
        status="OK" if connected else "ERROR",
        database="connected" if connected else "unreachable",
        service=get_settings().app_name,
        timestamp=utcnow(),
    )
