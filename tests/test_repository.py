import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from couponissue.model import Campaign, CampaignStatus, Coupon
from couponissue.repository import (
    CampaignNotFoundError,
    CouponIssueRejected,
    CouponNotFoundError,
    MemoryCampaignRepository,
    MemoryCouponRepository,
)


def test_basic_campaign_operations():
    repo = MemoryCampaignRepository()
    campaign = Campaign(
        campaign_id="t1",
        name="테스트",
        total_quantity=10,
        issued_quantity=0,
        status=CampaignStatus.WAITING,
    )
    repo.save(campaign)
    saved = repo.get_by_id("t1")
    assert saved.name == "테스트"


def test_atomic_coupon_issue():
    campaign_repo = MemoryCampaignRepository()
    coupon_repo = MemoryCouponRepository(campaign_repo)
    campaign_repo.save(
        Campaign(
            campaign_id="t2",
            total_quantity=5,
            issued_quantity=0,
            status=CampaignStatus.ACTIVE,
            start_time=int(time.time()),
        )
    )

    def attempt(index):
        try:
            coupon_repo.issue_coupon("t2", f"user-{index}", f"CODE{index}")
        except CouponIssueRejected:
            return False
        return True

    with ThreadPoolExecutor(max_workers=20) as pool:
        results = list(pool.map(attempt, range(20)))

    assert sum(results) == 5
    final = campaign_repo.get_by_id("t2")
    assert final.issued_quantity == 5
    assert len(coupon_repo.get_by_campaign_id("t2")) == 5


def test_get_by_id_updates_waiting_status():
    repo = MemoryCampaignRepository()
    repo.save(
        Campaign(
            campaign_id="w",
            total_quantity=1,
            start_time=int(time.time()) - 5,
            status=CampaignStatus.WAITING,
        )
    )
    assert repo.get_by_id("w").status is CampaignStatus.ACTIVE


def test_missing_campaign_errors():
    repo = MemoryCampaignRepository()
    with pytest.raises(CampaignNotFoundError) as info:
        repo.get_by_id("nope")
    assert info.value.campaign_id == "nope"
    with pytest.raises(CampaignNotFoundError):
        repo.update(Campaign(campaign_id="nope"))
    with pytest.raises(CampaignNotFoundError):
        repo.delete("nope")


def test_update_and_delete():
    repo = MemoryCampaignRepository()
    repo.save(Campaign(campaign_id="t1", name="a"))
    repo.update(Campaign(campaign_id="t1", name="b"))
    assert repo.get_by_id("t1").name == "b"
    repo.delete("t1")
    with pytest.raises(CampaignNotFoundError):
        repo.get_by_id("t1")


def test_coupon_save_and_lookup():
    coupon_repo = MemoryCouponRepository(MemoryCampaignRepository())
    assert coupon_repo.get_by_campaign_id("t1") == []
    coupon = Coupon(coupon_code="CODE1", campaign_id="t1", issued_to="user-1")
    coupon_repo.save(coupon)
    assert coupon_repo.get_by_code("CODE1") == coupon
    assert coupon_repo.get_by_campaign_id("t1") == [coupon]
    with pytest.raises(CouponNotFoundError):
        coupon_repo.get_by_code("CODE2")


def test_issue_for_unknown_campaign_is_rejected():
    coupon_repo = MemoryCouponRepository(MemoryCampaignRepository())
    with pytest.raises(CouponIssueRejected) as info:
        coupon_repo.issue_coupon("missing", "user-1", "CODE1")
    assert info.value.reason == "존재하지 않는 캠페인입니다"


def test_issue_for_waiting_campaign_is_rejected():
    campaign_repo = MemoryCampaignRepository()
    coupon_repo = MemoryCouponRepository(campaign_repo)
    campaign_repo.save(
        Campaign(
            campaign_id="w",
            total_quantity=3,
            start_time=int(time.time()) + 3600,
            status=CampaignStatus.WAITING,
        )
    )
    with pytest.raises(CouponIssueRejected) as info:
        coupon_repo.issue_coupon("w", "user-1", "CODE1")
    assert info.value.reason == "캠페인이 아직 활성상태가 아닙니다"
    assert coupon_repo.get_by_campaign_id("w") == []


def test_issued_coupon_fields():
    campaign_repo = MemoryCampaignRepository()
    coupon_repo = MemoryCouponRepository(campaign_repo)
    campaign_repo.save(
        Campaign(campaign_id="t3", total_quantity=1, status=CampaignStatus.ACTIVE)
    )
    coupon = coupon_repo.issue_coupon("t3", "user-7", "CODE7")
    assert (coupon.coupon_code, coupon.campaign_id, coupon.issued_to) == ("CODE7", "t3", "user-7")
    assert coupon_repo.get_by_code("CODE7") is coupon
    assert campaign_repo.get_by_id("t3").status is CampaignStatus.COMPLETED