# Backend main entry point - eligibility tracker API
import logging
import os
from datetime import date, datetime, timezone
from dotenv import load_dotenv
load_dotenv()  # Load .env so DEMO_MODE and cooldown overrides work for local reviewers
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from cooldowns import CooldownPolicy, load_policy_from_env
from eligibility import classify, filter_eligibility, summarize
from models import parse_timestamp
from seed import seed_store
from store import BillingRecordStore

logger = logging.getLogger(__name__)


def _is_demo_mode() -> bool:
    """True only when DEMO_MODE env var is explicitly 'true' (case-insensitive)."""
    return os.environ.get("DEMO_MODE", "").lower() == "true"


def _allowed_origins() -> List[str]:
    origins = [
        "http://localhost:5173",
        "http://localhost:5174",
    ]
    # Add deployed frontend URL from env if set
    frontend_url = os.environ.get("FRONTEND_URL", "")
    if frontend_url:
        origins.append(frontend_url)
    return origins


# Response models
class EligibilityResponse(BaseModel):
    patientIdentifier: str
    patientName: str
    serviceType: str
    lastServiceDate: date
    daysSinceService: int
    payorCategory: str
    cooldownDays: int
    nextEligibleDate: date
    status: str


class EligibilityStatsResponse(BaseModel):
    overdue: int
    dueSoon: int
    eligible: int
    brainwave: int
    ultrasound: int
    vitalwave: int
    total: int


class PolicyResponse(BaseModel):
    ppoCooldownDays: int
    medicareCooldownDays: int
    graceWindowDays: int
    overdueWindowDays: int


# Dependencies
def get_store(request: Request) -> BillingRecordStore:
    return request.app.state.store


def get_policy(request: Request) -> CooldownPolicy:
    return request.app.state.policy


def _today_utc():
    """Seed day, on the same UTC clock as the default reference instant."""
    return datetime.now(timezone.utc).date()


def get_now(asOf: Optional[str] = Query(default=None)) -> datetime:
    """Reference instant for elapsed days: ?asOf= when given, else current UTC time."""
    if not asOf:
        return datetime.now(timezone.utc)
    try:
        return parse_timestamp(asOf)
    except ValueError:
        raise HTTPException(status_code=400, detail="asOf must be YYYY-MM-DD or an ISO datetime")


def create_app(
    store: Optional[BillingRecordStore] = None,
    policy: Optional[CooldownPolicy] = None,
    seed: bool = True,
) -> FastAPI:
    """Build the API around an injected record store and cooldown policy."""
    app = FastAPI(title="Eligibility Tracker API")
    app.state.store = store if store is not None else BillingRecordStore()
    app.state.policy = policy if policy is not None else load_policy_from_env()
    if seed:
        seed_store(app.state.store, _today_utc())
        logger.info("Seeded %d demo billing records", len(app.state.store))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def read_root():
        return {"message": "Eligibility Tracker API"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    @app.get("/billing/records")
    def list_billing_records(store: BillingRecordStore = Depends(get_store)):
        """All stored billing rows, as received"""
        return store.list_records()

    @app.post("/billing/records", status_code=201)
    def add_billing_record(row: Dict[str, Any], store: BillingRecordStore = Depends(get_store)):
        return store.add(row)

    @app.post("/billing/records/bulk", status_code=201)
    def add_billing_records(rows: List[Dict[str, Any]], store: BillingRecordStore = Depends(get_store)):
        return store.add_many(rows)

    @app.get("/billing/records/{record_id}")
    def get_billing_record(record_id: str, store: BillingRecordStore = Depends(get_store)):
        record = store.get(record_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Billing record not found")
        return record

    @app.delete("/billing/records/{record_id}")
    def delete_billing_record(record_id: str, store: BillingRecordStore = Depends(get_store)):
        if not store.delete(record_id):
            raise HTTPException(status_code=404, detail="Billing record not found")
        return {"status": "deleted", "recordId": record_id}

    @app.get("/eligibility", response_model=List[EligibilityResponse])
    def get_eligibility(
        q: Optional[str] = None,
        serviceType: Optional[str] = None,
        status: Optional[str] = None,
        now: datetime = Depends(get_now),
        store: BillingRecordStore = Depends(get_store),
        policy: CooldownPolicy = Depends(get_policy),
    ):
        """
        Classified eligibility rows, overdue first.
        Filters are ANDed: q (name contains), serviceType, status.
        """
        rows = classify(store.list_records(), now, policy)
        try:
            rows = filter_eligibility(rows, text_query=q, service_type=serviceType, status=status)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        return [row.to_dict() for row in rows]

    @app.get("/eligibility/stats", response_model=EligibilityStatsResponse)
    def get_eligibility_stats(
        now: datetime = Depends(get_now),
        store: BillingRecordStore = Depends(get_store),
        policy: CooldownPolicy = Depends(get_policy),
    ):
        """Dashboard counters over the unfiltered classification"""
        return summarize(classify(store.list_records(), now, policy))

    @app.get("/eligibility/policy", response_model=PolicyResponse)
    def get_active_policy(policy: CooldownPolicy = Depends(get_policy)):
        return policy.to_dict()

    @app.get("/demo/status")
    def demo_status():
        """Returns whether demo mode is enabled. Only for frontend visibility gate."""
        return {"demoMode": _is_demo_mode()}

    @app.post("/demo/reset")
    def demo_reset(store: BillingRecordStore = Depends(get_store)):
        """
        Reset billing rows to the demo seed. Only available when DEMO_MODE=true.
        """
        if not _is_demo_mode():
            raise HTTPException(status_code=404, detail="Demo reset not available")
        seed_store(store, _today_utc())
        return {"status": "ok", "records": len(store)}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
