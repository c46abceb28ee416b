"""RPC-facing layer: wraps the coupon service and turns failures into RPC errors."""

from __future__ import annotations

import logging
from typing import Any

from .model import (
    CreateCampaignRequest,
    CreateCampaignResponse,
    GetCampaignRequest,
    GetCampaignResponse,
    IssueCouponRequest,
    IssueCouponResponse,
)
from .service import CouponService

log = logging.getLogger(__name__)

_HTTP_STATUS = {
    "canceled": 499,
    "unknown": 500,
    "invalid_argument": 400,
    "deadline_exceeded": 504,
    "not_found": 404,
    "already_exists": 409,
    "permission_denied": 403,
    "resource_exhausted": 429,
    "failed_precondition": 400,
    "aborted": 409,
    "out_of_range": 400,
    "unimplemented": 501,
    "internal": 500,
    "unavailable": 503,
    "data_loss": 500,
    "unauthenticated": 401,
}


class ConnectError(Exception):
    """An RPC failure carrying a protocol error code such as ``internal``."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message

    @property
    def http_status(self) -> int:
        """HTTP status that goes with the error code."""
        return _HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class CouponServiceHandler:
    """Implements the CouponService RPCs on top of a CouponService."""

    def __init__(self, service: CouponService):
        self._service = service

    def create_campaign(self, request: CreateCampaignRequest) -> CreateCampaignResponse:
        log.info("CreateCampaign 요청: %s", request)
        try:
            response = self._service.create_campaign(request)
        except Exception as exc:
            log.error("CreateCampaign 처리 중 오류: %s", exc)
            raise ConnectError("internal", str(exc)) from exc
        log.info("CreateCampaign 응답: %s", response)
        return response

    def get_campaign(self, request: GetCampaignRequest) -> GetCampaignResponse:
        log.info("GetCampaign 요청: %s", request)
        try:
            response = self._service.get_campaign(request)
        except Exception as exc:
            log.error("GetCampaign 처리 중 오류: %s", exc)
            raise ConnectError("internal", str(exc)) from exc
        name = response.campaign.name if response.campaign is not None else ""
        log.info(
            "GetCampaign 응답: 캠페인=%s, 발급된쿠폰수=%d", name, len(response.issued_coupons)
        )
        return response

    def issue_coupon(self, request: IssueCouponRequest) -> IssueCouponResponse:
        log.info(
            "IssueCoupon 요청: CampaignID=%s, UserID=%s", request.campaign_id, request.user_id
        )
        try:
            response = self._service.issue_coupon(request)
        except Exception as exc:
            log.error("IssueCoupon 처리 중 오류: %s", exc)
            raise ConnectError("internal", str(exc)) from exc

        if response.success and response.coupon is not None:
            log.info(
                "IssueCoupon 성공: UserID=%s, CouponCode=%s",
                request.user_id,
                response.coupon.coupon_code,
            )
        else:
            log.info("IssueCoupon 실패: UserID=%s, 이유=%s", request.user_id, response.message)
        return response