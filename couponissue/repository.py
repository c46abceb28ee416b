"""In-memory storage for campaigns and issued coupons."""

from __future__ import annotations

import threading
import time

from .model import Campaign, Coupon


class CampaignNotFoundError(LookupError):
    """No campaign is stored under the given id."""

    def __init__(self, campaign_id: str):
        super().__init__(f"해당 캠페인이 존재하지 않습니다. id: {campaign_id}")
        self.campaign_id = campaign_id


class CouponNotFoundError(LookupError):
    """No coupon is stored under the given code."""

    def __init__(self, code: str):
        super().__init__(f"해당 쿠폰이 존재하지 않습니다. code: {code}")
        self.code = code


class CouponIssueRejected(Exception):
    """The campaign's rules did not allow a coupon to be issued."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class MemoryCampaignRepository:
    """Campaigns keyed by id, safe for use from several threads."""

    def __init__(self) -> None:
        self._campaigns: dict[str, Campaign] = {}
        self._lock = threading.Lock()

    def save(self, campaign: Campaign) -> None:
        with self._lock:
            self._campaigns[campaign.campaign_id] = campaign

    def get_by_id(self, campaign_id: str) -> Campaign:
        """Return the campaign, with its status brought up to date."""
        with self._lock:
            try:
                campaign = self._campaigns[campaign_id]
            except KeyError:
                raise CampaignNotFoundError(campaign_id) from None
            campaign.update_status_if_needed()
            return campaign

    def update(self, campaign: Campaign) -> None:
        with self._lock:
            if campaign.campaign_id not in self._campaigns:
                raise CampaignNotFoundError(campaign.campaign_id)
            self._campaigns[campaign.campaign_id] = campaign

    def delete(self, campaign_id: str) -> None:
        with self._lock:
            if campaign_id not in self._campaigns:
                raise CampaignNotFoundError(campaign_id)
            del self._campaigns[campaign_id]


class MemoryCouponRepository:
    """Issued coupons, indexed by campaign and by code."""

    def __init__(self, campaign_repo: MemoryCampaignRepository):
        self._coupons: dict[str, list[Coupon]] = {}
        self._coupons_by_code: dict[str, Coupon] = {}
        self._campaigns = campaign_repo._campaigns
        self._lock = threading.Lock()
        self._campaign_locks: dict[str, threading.Lock] = {}
        self._campaign_locks_guard = threading.Lock()

    def save(self, coupon: Coupon) -> None:
        with self._lock:
            self._store(coupon)

    def get_by_campaign_id(self, campaign_id: str) -> list[Coupon]:
        with self._lock:
            return list(self._coupons.get(campaign_id, []))

    def get_by_code(self, code: str) -> Coupon:
        with self._lock:
            try:
                return self._coupons_by_code[code]
            except KeyError:
                raise CouponNotFoundError(code) from None

    def issue_coupon(self, campaign_id: str, user_id: str, coupon_code: str) -> Coupon:
        """Issue one coupon atomically per campaign, or raise CouponIssueRejected."""
        with self._campaign_lock(campaign_id):
            campaign = self._campaigns.get(campaign_id)
            if campaign is None:
                raise CouponIssueRejected("존재하지 않는 캠페인입니다")

            issued, reason = campaign.issue_coupon()
            if not issued:
                raise CouponIssueRejected(reason)

            coupon = Coupon(
                coupon_code=coupon_code,
                campaign_id=campaign_id,
                issued_at=int(time.time()),
                issued_to=user_id,
            )
            with self._lock:
                self._store(coupon)
            return coupon

    def _store(self, coupon: Coupon) -> None:
        self._coupons.setdefault(coupon.campaign_id, []).append(coupon)
        self._coupons_by_code[coupon.coupon_code] = coupon

    def _campaign_lock(self, campaign_id: str) -> threading.Lock:
        with self._campaign_locks_guard:
            return self._campaign_locks.setdefault(campaign_id, threading.Lock())