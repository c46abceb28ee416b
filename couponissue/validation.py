"""Checks applied to incoming requests before any work is done."""

from __future__ import annotations

import time
from dataclasses import dataclass

from .model import CreateCampaignRequest, GetCampaignRequest, IssueCouponRequest


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a request check."""

    is_valid: bool
    message: str = ""

    def __bool__(self) -> bool:
        return self.is_valid


def valid() -> ValidationResult:
    return ValidationResult(is_valid=True)


def invalid(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, message=message)


def validate_create_campaign_request(request: CreateCampaignRequest) -> ValidationResult:
    if not request.name:
        return invalid("캠페인 이름은 필수입니다")
    if request.total_quantity <= 0:
        return invalid("발급 수량은 1개 이상이어야 합니다")
    if request.start_time < int(time.time()):
        return invalid("시작 시간은 현재 시간 이후여야 합니다")
    return valid()


def validate_issue_coupon_request(request: IssueCouponRequest) -> ValidationResult:
    if not request.campaign_id:
        return invalid("캠페인 ID는 필수입니다")
    if not request.user_id:
        return invalid("사용자 ID는 필수입니다")
    return valid()


def validate_get_campaign_request(request: GetCampaignRequest) -> ValidationResult:
    if not request.campaign_id:
        return invalid("캠페인 ID는 필수입니다")
    return valid()