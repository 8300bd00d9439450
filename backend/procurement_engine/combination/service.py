"""CombinationService — prepares, submits and audits request combinations.

Flow:
1. prepare() loads the selected requests and runs permission, validation,
   preview and consolidation in one pass.
2. build_submission() turns an unblocked plan into the payload the external
   submission pipeline persists.
3. audit() builds the audit record once the pipeline has stored it.
"""

import logging
from datetime import datetime

from procurement_engine.combination.audit import generate_combine_audit_trail
from procurement_engine.combination.consolidator import consolidate_items
from procurement_engine.combination.permissions import check_combine_permissions
from procurement_engine.combination.preview import build_combine_submission, generate_combine_preview
from procurement_engine.combination.validator import validate_request_combination
from procurement_engine.config import Settings
from procurement_engine.exceptions import CombinationBlockedError
from procurement_engine.repositories import RequestRepository
from procurement_engine.schemas.audit import AuditRecord
from procurement_engine.schemas.combination import (
    CombinePlan,
    CombineRequestsConfig,
    CombineSubmission,
)

logger = logging.getLogger("procurement.combination.service")


class CombinationService:
    """Request combination workflow over an injected request repository."""

    def __init__(self, settings: Settings, request_repository: RequestRepository):
        self.settings = settings
        self.requests = request_repository

    async def prepare(
        self,
        request_ids: list,
        config: CombineRequestsConfig,
        *,
        user_roles: list[str],
        user_department: str | None = None,
    ) -> CombinePlan:
        """Evaluate a combination. Never raises for blocked selections; see plan.can_proceed."""
        s = self.settings
        # a repeated id selects the same request once
        request_ids = list(dict.fromkeys(request_ids))
        requests = await self.requests.get_combinable_requests(request_ids)

        permissions = check_combine_permissions(
            user_roles,
            user_department,
            requests,
            approval_threshold=s.combine_approval_threshold,
        )
        validation = validate_request_combination(
            requests,
            default_currency=s.default_currency,
            max_requests_warning=s.combine_max_requests_warning,
            special_procedures_threshold=s.combine_special_procedures_threshold,
            uniqueness_ratio_threshold=s.combine_item_uniqueness_ratio,
        )
        preview = generate_combine_preview(
            requests,
            config,
            default_currency=s.default_currency,
            bulk_discount_rate=s.bulk_discount_rate,
            bulk_discount_min_requests=s.bulk_discount_min_requests,
        )

        plan = CombinePlan(
            requests=requests,
            config=config,
            permissions=permissions,
            validation=validation,
            preview=preview,
            consolidated_items=consolidate_items(requests),
        )

        if plan.can_proceed:
            logger.info(
                "Combination of %d requests ready (total=%.2f, requires_approval=%s, warnings=%d)",
                len(requests),
                preview.total_value,
                permissions.requires_approval,
                len(validation.warnings),
            )
        else:
            logger.warning(
                "Combination of %d requests blocked: %s",
                len(requests),
                "; ".join(plan.blocking_reasons),
            )
        return plan

    def build_submission(self, plan: CombinePlan, *, now: datetime | None = None) -> CombineSubmission:
        """Payload for the submission pipeline.

        Raises:
            CombinationBlockedError: When the plan has blocking reasons.
        """
        if not plan.can_proceed:
            raise CombinationBlockedError(plan.blocking_reasons)

        s = self.settings
        submission = build_combine_submission(
            plan.requests,
            plan.config,
            requires_approval=plan.permissions.requires_approval,
            now=now,
            default_currency=s.default_currency,
            threshold_currency=s.threshold_currency,
            works_threshold=s.works_threshold,
            goods_services_threshold=s.goods_services_threshold,
        )
        if submission.executive_threshold.is_required:
            logger.warning(
                "Combined request %s needs executive approval (%s threshold)",
                submission.reference,
                submission.executive_threshold.threshold_type.value,
            )
        return submission

    def audit(
        self,
        plan: CombinePlan,
        actor_id,
        actor_name: str,
        *,
        combined_reference: str | None = None,
        now: datetime | None = None,
    ) -> AuditRecord:
        record = generate_combine_audit_trail(
            plan.requests,
            plan.config,
            actor_id,
            actor_name,
            combined_reference=combined_reference,
            now=now,
        )
        logger.info(
            "Audit record %s built for %d requests by %s",
            record.action,
            len(plan.requests),
            actor_name,
        )
        return record
