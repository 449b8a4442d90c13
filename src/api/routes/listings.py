"""Deals, events and proof-of-visit API routes."""

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from src.api.deps import AdminUser, CurrentUser
from src.schemas.content import DealCreate, DealResponse, EventResponse, ProofResponse
from src.services.deal_service import DealService
from src.services.event_service import EventFilter, EventService
from src.services.proof_service import ProofService

router = APIRouter(tags=["listings"])


@router.get(
    "/deals",
    response_model=list[DealResponse],
    summary="List active deals",
    description="Newest first; deals past their expiry date are left out.",
)
async def list_deals() -> list[DealResponse]:
    deals = await DealService().list_active()
    return [DealResponse.model_validate(d) for d in deals]


@router.post(
    "/deals",
    response_model=DealResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a deal",
)
async def create_deal(data: DealCreate, admin: AdminUser) -> DealResponse:
    deal = await DealService().create_deal(
        title=data.title,
        description=data.description,
        business_name=data.business_name,
        expiry_date=data.expiry_date,
    )
    return DealResponse.model_validate(deal)


@router.get(
    "/events",
    response_model=list[EventResponse],
    summary="List events",
)
async def list_events(
    filter: EventFilter = Query(default=EventFilter.UPCOMING),
) -> list[EventResponse]:
    events = await EventService().list_events(filter)
    return [EventResponse.model_validate(e) for e in events]


@router.get(
    "/proofs",
    response_model=list[ProofResponse],
    summary="List approved proofs of visit",
)
async def list_proofs() -> list[ProofResponse]:
    proofs = await ProofService().list_proofs(approved=True)
    return [ProofResponse.model_validate(p) for p in proofs]


@router.post(
    "/proofs",
    response_model=ProofResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a proof of visit",
    description="Uploads a photo; it is shown once an admin approves it.",
)
async def submit_proof(
    user: CurrentUser,
    name: str = Form(...),
    business_name: str = Form(...),
    image: UploadFile = File(...),
) -> ProofResponse:
    data = await image.read()
    proof = await ProofService().submit_proof(
        name=name,
        business_name=business_name,
        filename=image.filename or "upload",
        data=data,
        content_type=image.content_type,
    )
    return ProofResponse.model_validate(proof)
