"""Insurance claim workflow."""

import logging
from datetime import datetime
from typing import Optional

from carechain_api.errors import ResourceNotFoundError, ValidationError
from carechain_api.ledger.hashing import create_resource_hash
from carechain_api.models import InsuranceClaim, User
from carechain_api.services.base import BaseService

logger = logging.getLogger(__name__)

CLAIM_TYPES = ("hospitalization", "outpatient", "pharmacy")
CLAIM_STATUSES = ("submitted", "under_review", "approved", "rejected", "paid")


class ClaimService(BaseService):
    """Patients submit claims, insurance agents review them."""

    def submit(
        self,
        patient_id: str,
        policy_number: str,
        policy_provider: str,
        claim_amount: int,
        claim_type: str,
        description: str,
        supporting_documents: Optional[list[str]] = None,
    ) -> InsuranceClaim:
        """Submit a stamped claim."""
        self._enforce_actor(patient_id)
        if claim_type not in CLAIM_TYPES:
            raise ValidationError("Unknown claim type", {"claim_type": claim_type})
        if claim_amount <= 0:
            raise ValidationError("claim_amount must be positive", {"claim_amount": claim_amount})
        if not policy_number or not policy_provider or not description:
            raise ValidationError("policy_number, policy_provider and description are required")

        blockchain_hash = create_resource_hash(
            {
                "patient_id": patient_id,
                "policy_number": policy_number,
                "claim_amount": claim_amount,
                "timestamp": datetime.utcnow().isoformat(),
            }
        )

        claim = InsuranceClaim(
            patient_id=patient_id,
            policy_number=policy_number,
            policy_provider=policy_provider,
            claim_amount=claim_amount,
            claim_type=claim_type,
            description=description,
            supporting_documents=list(supporting_documents or []),
            status="submitted",
            blockchain_hash=blockchain_hash,
        )
        with self._unit_of_work():
            self.db.add(claim)
            self.db.flush()
            self.ledger.append(
                patient_id,
                "submit_claim",
                "insurance_claim",
                claim.id,
                {"claim_amount": claim_amount, "policy_number": policy_number},
            )
        self.db.refresh(claim)
        logger.info("Claim submitted", extra={"patient_id": patient_id, "claim_id": claim.id})
        return claim

    def update_status(
        self,
        agent_id: str,
        claim_id: str,
        status: str,
        review_notes: Optional[str] = None,
    ) -> InsuranceClaim:
        """Move a claim to a new status and assign the reviewing agent."""
        self._enforce_actor(agent_id)
        if status not in CLAIM_STATUSES:
            raise ValidationError("Unknown claim status", {"status": status})

        claim = self.db.query(InsuranceClaim).filter(InsuranceClaim.id == claim_id).first()
        if claim is None:
            raise ResourceNotFoundError("Claim not found", {"claim_id": claim_id})

        previous_status = claim.status
        with self._unit_of_work():
            claim.status = status
            claim.agent_id = agent_id
            if review_notes:
                claim.review_notes = review_notes
            claim.updated_at = datetime.utcnow()
            self.db.flush()
            self.ledger.append(
                agent_id,
                "update_claim_status",
                "insurance_claim",
                claim_id,
                {"previous_status": previous_status, "new_status": status},
            )
        self.db.refresh(claim)
        logger.info(
            "Claim status updated",
            extra={"agent_id": agent_id, "claim_id": claim_id, "status": status},
        )
        return claim

    def list_for_actor(self, actor: User) -> list[InsuranceClaim]:
        """Patients see their own claims, agents the claims they reviewed, others all."""
        query = self.db.query(InsuranceClaim)
        if actor.role == "patient":
            query = query.filter(InsuranceClaim.patient_id == actor.id)
        elif actor.role == "insurance":
            query = query.filter(
                (InsuranceClaim.agent_id == actor.id) | (InsuranceClaim.agent_id.is_(None))
            )
        return query.order_by(InsuranceClaim.submitted_at.desc()).all()
