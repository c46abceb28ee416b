"""Campaign and coupon records, request/response messages and campaign rules."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

log = logging.getLogger(__name__)


class CampaignStatus(Enum):
    """Lifecycle state of a campaign."""

    UNSPECIFIED = 0
    WAITING = 1
    ACTIVE = 2
    COMPLETED = 3

    @classmethod
    def parse(cls, value: Any) -> "CampaignStatus":
        """Accept a status member, its name or its number."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            return cls[value]
        raise ValueError(f"unknown campaign status: {value!r}")


def _int(data: Mapping[str, Any], key: str) -> int:
    return int(data.get(key) or 0)


def _str(data: Mapping[str, Any], key: str) -> str:
    return str(data.get(key) or "")


@dataclass
class Campaign:
    """A coupon campaign together with its issuing rules."""

    campaign_id: str = ""
    name: str = ""
    start_time: int = 0
    total_quantity: int = 0
    issued_quantity: int = 0
    status: CampaignStatus = CampaignStatus.UNSPECIFIED
    created_at: int = 0

    def can_issue_coupon(self) -> tuple[bool, str]:
        """Say whether a coupon may be issued now, and why not if it may not."""
        self.update_status_if_needed()

        if self.status is CampaignStatus.UNSPECIFIED:
            return False, "캠페인이 아직 시작되지 않았습니다"
        if self.status is CampaignStatus.WAITING:
            return False, "캠페인이 아직 활성상태가 아닙니다"
        if self.status is CampaignStatus.ACTIVE and self.issued_quantity >= self.total_quantity:
            return False, "쿠폰이 모두 소진되었습니다"
        if self.status is CampaignStatus.COMPLETED:
            return False, "캠페인이 종료되었습니다"
        return True, ""

    def update_status_if_needed(self) -> None:
        """Move WAITING to ACTIVE once started, ACTIVE to COMPLETED once sold out."""
        now = int(time.time())
        if self.status is CampaignStatus.WAITING and now >= self.start_time:
            self.status = CampaignStatus.ACTIVE
            log.info(
                "Campaign status 변경. before : %s, after : %s",
                CampaignStatus.WAITING.name,
                self.status.name,
            )
        elif (
            self.status is CampaignStatus.ACTIVE
            and self.issued_quantity >= self.total_quantity
        ):
            self.status = CampaignStatus.COMPLETED
            log.info(
                "Campaign status 변경. before : %s, after : %s",
                CampaignStatus.ACTIVE.name,
                self.status.name,
            )

    def issue_coupon(self) -> tuple[bool, str]:
        """Count one issued coupon if the rules allow it."""
        can_issue, reason = self.can_issue_coupon()
        if not can_issue:
            return False, reason
        self.issued_quantity += 1
        log.info("쿠폰이 발급되었습니다. 현재 발급된 쿠폰 수량: %d", self.issued_quantity)
        self.update_status_if_needed()
        return True, ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "campaignId": self.campaign_id,
            "name": self.name,
            "startTime": self.start_time,
            "totalQuantity": self.total_quantity,
            "issuedQuantity": self.issued_quantity,
            "status": self.status.name,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Campaign":
        return cls(
            campaign_id=_str(data, "campaignId"),
            name=_str(data, "name"),
            start_time=_int(data, "startTime"),
            total_quantity=_int(data, "totalQuantity"),
            issued_quantity=_int(data, "issuedQuantity"),
            status=CampaignStatus.parse(data.get("status") or CampaignStatus.UNSPECIFIED),
            created_at=_int(data, "createdAt"),
        )


@dataclass
class Coupon:
    """An issued coupon."""

    coupon_code: str = ""
    campaign_id: str = ""
    issued_at: int = 0
    issued_to: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "couponCode": self.coupon_code,
            "campaignId": self.campaign_id,
            "issuedAt": self.issued_at,
            "issuedTo": self.issued_to,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coupon":
        return cls(
            coupon_code=_str(data, "couponCode"),
            campaign_id=_str(data, "campaignId"),
            issued_at=_int(data, "issuedAt"),
            issued_to=_str(data, "issuedTo"),
        )


@dataclass
class CreateCampaignRequest:
    name: str = ""
    start_time: int = 0
    total_quantity: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "startTime": self.start_time,
            "totalQuantity": self.total_quantity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CreateCampaignRequest":
        return cls(
            name=_str(data, "name"),
            start_time=_int(data, "startTime"),
            total_quantity=_int(data, "totalQuantity"),
        )


@dataclass
class CreateCampaignResponse:
    campaign: Optional[Campaign] = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"message": self.message}
        if self.campaign is not None:
            result["campaign"] = self.campaign.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CreateCampaignResponse":
        campaign = data.get("campaign")
        return cls(
            campaign=Campaign.from_dict(campaign) if campaign else None,
            message=_str(data, "message"),
        )


@dataclass
class GetCampaignRequest:
    campaign_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"campaignId": self.campaign_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GetCampaignRequest":
        return cls(campaign_id=_str(data, "campaignId"))


@dataclass
class GetCampaignResponse:
    campaign: Optional[Campaign] = None
    issued_coupons: list[Coupon] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "issuedCoupons": [coupon.to_dict() for coupon in self.issued_coupons],
            "message": self.message,
        }
        if self.campaign is not None:
            result["campaign"] = self.campaign.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GetCampaignResponse":
        campaign = data.get("campaign")
        return cls(
            campaign=Campaign.from_dict(campaign) if campaign else None,
            issued_coupons=[Coupon.from_dict(c) for c in data.get("issuedCoupons") or []],
            message=_str(data, "message"),
        )


@dataclass
class IssueCouponRequest:
    campaign_id: str = ""
    user_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"campaignId": self.campaign_id, "userId": self.user_id}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IssueCouponRequest":
        return cls(campaign_id=_str(data, "campaignId"), user_id=_str(data, "userId"))


@dataclass
class IssueCouponResponse:
    success: bool = False
    coupon: Optional[Coupon] = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.coupon is not None:
            result["coupon"] = self.coupon.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "IssueCouponResponse":
        coupon = data.get("coupon")
        return cls(
            success=bool(data.get("success", False)),
            coupon=Coupon.from_dict(coupon) if coupon else None,
            message=_str(data, "message"),
        )