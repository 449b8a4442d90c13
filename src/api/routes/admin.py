"""Admin moderation routes for businesses and proofs of visit."""

from fastapi import APIRouter

from src.api.deps import AdminUser, AppCache
from src.schemas.business import BusinessResponse
from src.schemas.common import MessageResponse
from src.schemas.content import ProofResponse
from src.services.business_service import BusinessService
from src.services.proof_service import ProofService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/businesses/pending",
    response_model=list[BusinessResponse],
    summary="List businesses awaiting approval",
)
async def list_pending_businesses(admin: AdminUser, cache: AppCache) -> list[BusinessResponse]:
    businesses = await BusinessService(cache).list_pending()
    return [BusinessResponse.model_validate(b) for b in businesses]


@router.post(
    "/businesses/{business_id}/approve",
    response_model=BusinessResponse,
    summary="Approve a business",
)
async def approve_business(business_id: str, admin: AdminUser, cache: AppCache) -> BusinessResponse:
    business = await BusinessService(cache).approve(business_id)
    return BusinessResponse.model_validate(business)


@router.delete(
    "/businesses/{business_id}",
    response_model=MessageResponse,
    summary="Reject a business",
    description="Rejecting a submission deletes it.",
)
async def reject_business(business_id: str, admin: AdminUser, cache: AppCache) -> MessageResponse:
    await BusinessService(cache).reject(business_id)
    return MessageResponse(message="Business rejected")


@router.get(
    "/proofs/pending",
    response_model=list[ProofResponse],
    summary="List proofs awaiting approval",
)
async def list_pending_proofs(admin: AdminUser) -> list[ProofResponse]:
    proofs = await ProofService().list_proofs(approved=False)
    return [ProofResponse.model_validate(p) for p in proofs]


@router.post(
    "/proofs/{proof_id}/approve",
    response_model=ProofResponse,
    summary="Approve a proof of visit",
)
async def approve_proof(proof_id: str, admin: AdminUser) -> ProofResponse:
    proof = await ProofService().approve(proof_id)
    return ProofResponse.model_validate(proof)


@router.delete(
    "/proofs/{proof_id}",
    response_model=MessageResponse,
    summary="Reject a proof of visit",
)
async def reject_proof(proof_id: str, admin: AdminUser) -> MessageResponse:
    await ProofService().reject(proof_id)
    return MessageResponse(message="Proof rejected")
