"""Proof-of-visit photo service."""

import logging
import re
from datetime import datetime
from typing import Callable

from src.api.middleware.error_handler import NotFoundError, ValidationError
from src.core.document_store import DocumentStore, QueryFilter, get_document_store
from src.core.storage import ObjectStorage, get_object_storage
from src.models.business import Proof
from src.services.invite_service import utcnow

logger = logging.getLogger(__name__)

PROOFS = "proofs"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def object_key(filename: str, now: datetime) -> str:
    """Storage key for an uploaded proof: ``proofs/{millis}_{filename}``."""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", filename).strip("_") or "upload"
    return f"proofs/{int(now.timestamp() * 1000)}_{safe_name}"


class ProofService:
    """Uploads proof-of-visit photos and moderates them."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        storage: ObjectStorage | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store or get_document_store()
        self.storage = storage or get_object_storage()
        self.clock = clock or utcnow

    async def list_proofs(self, approved: bool = True) -> list[Proof]:
        """List proofs by approval state, newest first."""
        rows = await self.store.query(
            PROOFS,
            filters=[QueryFilter("approved", "==", approved)],
            order_by="created_at",
        )
        return [Proof.model_validate(row) for row in rows]

    async def submit_proof(
        self,
        name: str,
        business_name: str,
        filename: str,
        data: bytes,
        content_type: str | None = None,
    ) -> Proof:
        """Upload a photo and record it for admin approval.

        Raises:
            ValidationError: If a field is missing or the upload is not an image.
        """
        if not name or not business_name:
            raise ValidationError("Name and business name are required")
        if not data:
            raise ValidationError("Please select an image to upload")
        if content_type and not content_type.startswith("image/"):
            raise ValidationError("Proof must be an image", details=[{"content_type": content_type}])

        now = self.clock()
        key = object_key(filename or "upload", now)
        image_url = await self.storage.upload(key, data, content_type or "application/octet-stream")

        row = await self.store.add(
            PROOFS,
            {
                "name": name,
                "business_name": business_name,
                "image_url": image_url,
                "approved": False,
                "created_at": now,
            },
        )
        proof = Proof.model_validate(row)
        logger.info("Proof %s submitted for %s", proof.id, business_name)
        return proof

    async def approve(self, proof_id: str) -> Proof:
        """Approve a proof.

        Raises:
            NotFoundError: If the proof does not exist.
        """
        row = await self.store.update(PROOFS, proof_id, {"approved": True})
        if row is None:
            raise NotFoundError("Proof not found")
        return Proof.model_validate(row)

    async def reject(self, proof_id: str) -> None:
        """Reject a proof by deleting its record.

        Raises:
            NotFoundError: If the proof does not exist.
        """
        if not await self.store.delete(PROOFS, proof_id):
            raise NotFoundError("Proof not found")
