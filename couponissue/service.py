"""Business operations: creating campaigns, looking them up and issuing coupons."""

from __future__ import annotations

import logging
import time

from .codegen import CouponCodeGenerator
from .model import (
    Campaign,
    CampaignStatus,
    CreateCampaignRequest,
    CreateCampaignResponse,
    GetCampaignRequest,
    GetCampaignResponse,
    IssueCouponRequest,
    IssueCouponResponse,
)
from .repository import (
    CampaignNotFoundError,
    CouponIssueRejected,
    CouponNotFoundError,
    MemoryCampaignRepository,
    MemoryCouponRepository,
)
from .validation import (
    validate_create_campaign_request,
    validate_get_campaign_request,
    validate_issue_coupon_request,
)

log = logging.getLogger(__name__)


class CouponService:
    """Coupon campaign operations over the in-memory repositories."""

    def __init__(
        self,
        campaign_repo: MemoryCampaignRepository,
        coupon_repo: MemoryCouponRepository,
        code_generator: CouponCodeGenerator,
    ):
        self._campaigns = campaign_repo
        self._coupons = coupon_repo
        self._codes = code_generator

    def create_campaign(self, request: CreateCampaignRequest) -> CreateCampaignResponse:
        validation = validate_create_campaign_request(request)
        if not validation.is_valid:
            return CreateCampaignResponse(message=validation.message)

        now = int(time.time())
        campaign_id = f"campaign_{time.time_ns()}"
        status = CampaignStatus.ACTIVE if request.start_time <= now else CampaignStatus.WAITING

        campaign = Campaign(
            campaign_id=campaign_id,
            name=request.name,
            start_time=request.start_time,
            total_quantity=request.total_quantity,
            issued_quantity=0,
            status=status,
            created_at=now,
        )
        self._campaigns.save(campaign)
        log.info("캠페인이 생성되었습니다. ID: %s, 이름: %s", campaign_id, request.name)
        return CreateCampaignResponse(
            campaign=campaign, message="캠페인이 성공적으로 생성되었습니다"
        )

    def get_campaign(self, request: GetCampaignRequest) -> GetCampaignResponse:
        validation = validate_get_campaign_request(request)
        if not validation.is_valid:
            return GetCampaignResponse(message=validation.message)

        try:
            campaign = self._campaigns.get_by_id(request.campaign_id)
        except CampaignNotFoundError as exc:
            log.warning("캠페인 조회 실패: %s", exc)
            return GetCampaignResponse(message="캠페인을 찾을 수 없습니다")

        return GetCampaignResponse(
            campaign=campaign,
            issued_coupons=self._coupons.get_by_campaign_id(request.campaign_id),
            message="조회 성공",
        )

    def issue_coupon(self, request: IssueCouponRequest) -> IssueCouponResponse:
        """Issue a coupon; refusals come back in the response, failures are raised."""
        validation = validate_issue_coupon_request(request)
        if not validation.is_valid:
            return IssueCouponResponse(success=False, message=validation.message)

        coupon_code = self._generate_unique_code(request.campaign_id)

        try:
            coupon = self._coupons.issue_coupon(
                request.campaign_id, request.user_id, coupon_code
            )
        except CouponIssueRejected as rejection:
            return IssueCouponResponse(success=False, message=rejection.reason)

        log.info(
            "쿠폰 발급 성공. 사용자: %s, 캠페인: %s, 쿠폰코드: %s",
            request.user_id,
            request.campaign_id,
            coupon_code,
        )
        return IssueCouponResponse(
            success=True, coupon=coupon, message="쿠폰이 성공적으로 발급되었습니다"
        )

    def _generate_unique_code(self, campaign_id: str) -> str:
        try:
            campaign = self._campaigns.get_by_id(campaign_id)
        except CampaignNotFoundError as exc:
            log.error("쿠폰 코드 생성 실패: 캠페인 조회 실패: %s", exc)
            raise
        return self._codes.generate_unique_code(campaign.name, self._code_exists)

    def _code_exists(self, code: str) -> bool:
        try:
            self._coupons.get_by_code(code)
        except CouponNotFoundError:
            return False
        return True