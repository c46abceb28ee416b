import time

import pytest

from couponissue.model import CreateCampaignRequest, GetCampaignRequest, IssueCouponRequest
from couponissue.validation import (
    ValidationResult,
    invalid,
    valid,
    validate_create_campaign_request,
    validate_get_campaign_request,
    validate_issue_coupon_request,
)


def test_valid_and_invalid_constructors():
    assert valid() == ValidationResult(is_valid=True, message="")
    result = invalid("캠페인 ID는 필수입니다")
    assert not result.is_valid
    assert result.message == "캠페인 ID는 필수입니다"
    assert bool(result) is False
    assert bool(valid()) is True


def test_create_requires_name():
    request = CreateCampaignRequest(name="", start_time=int(time.time()) + 60, total_quantity=3)
    assert validate_create_campaign_request(request) == invalid("캠페인 이름은 필수입니다")


@pytest.mark.parametrize("quantity", [0, -1])
def test_create_requires_positive_quantity(quantity):
    request = CreateCampaignRequest(
        name="데모 캠페인", start_time=int(time.time()) + 60, total_quantity=quantity
    )
    assert validate_create_campaign_request(request) == invalid("발급 수량은 1개 이상이어야 합니다")


def test_create_rejects_past_start():
    request = CreateCampaignRequest(
        name="데모 캠페인", start_time=int(time.time()) - 60, total_quantity=3
    )
    assert validate_create_campaign_request(request) == invalid("시작 시간은 현재 시간 이후여야 합니다")


def test_create_accepts_future_start():
    request = CreateCampaignRequest(
        name="데모 캠페인", start_time=int(time.time()) + 60, total_quantity=3
    )
    assert validate_create_campaign_request(request).is_valid


def test_issue_checks_campaign_then_user():
    assert validate_issue_coupon_request(IssueCouponRequest("", "")) == invalid(
        "캠페인 ID는 필수입니다"
    )
    assert validate_issue_coupon_request(IssueCouponRequest("t1", "")) == invalid(
        "사용자 ID는 필수입니다"
    )
    assert validate_issue_coupon_request(IssueCouponRequest("t1", "demo-user")).is_valid


def test_get_requires_campaign_id():
    assert validate_get_campaign_request(GetCampaignRequest("")) == invalid(
        "캠페인 ID는 필수입니다"
    )
    assert validate_get_campaign_request(GetCampaignRequest("t1")).is_valid