import socket
import threading
import time

import pytest

from couponissue.client import CouponServiceClient, main
from couponissue.codegen import CouponCodeGenerator
from couponissue.handler import ConnectError, CouponServiceHandler
from couponissue.model import (
    Campaign,
    CampaignStatus,
    CreateCampaignRequest,
    GetCampaignRequest,
    IssueCouponRequest,
)
from couponissue.repository import MemoryCampaignRepository, MemoryCouponRepository
from couponissue.server import CouponServiceApp, create_server
from couponissue.service import CouponService


@pytest.fixture
def running():
    campaign_repo = MemoryCampaignRepository()
    coupon_repo = MemoryCouponRepository(campaign_repo)
    service = CouponService(campaign_repo, coupon_repo, CouponCodeGenerator())
    app = CouponServiceApp(CouponServiceHandler(service))
    server = create_server(app, "127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}", campaign_repo
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


def _active_campaign(repo, campaign_id="active", total=3):
    repo.save(
        Campaign(
            campaign_id=campaign_id,
            name="데모 캠페인",
            start_time=0,
            total_quantity=total,
            status=CampaignStatus.ACTIVE,
        )
    )


def test_create_campaign_in_future_is_waiting(running):
    url, repo = running
    client = CouponServiceClient(url)
    start = int(time.time()) + 60
    response = client.create_campaign(
        CreateCampaignRequest(name="데모 캠페인", start_time=start, total_quantity=3)
    )
    assert response.message == "캠페인이 성공적으로 생성되었습니다"
    assert response.campaign.name == "데모 캠페인"
    assert response.campaign.total_quantity == 3
    assert response.campaign.start_time == start
    assert response.campaign.status is CampaignStatus.WAITING
    assert repo.get_by_id(response.campaign.campaign_id).name == "데모 캠페인"


def test_create_campaign_validation_message(running):
    url, _ = running
    client = CouponServiceClient(url)
    response = client.create_campaign(
        CreateCampaignRequest(name="", start_time=int(time.time()) + 60, total_quantity=3)
    )
    assert response.campaign is None
    assert response.message == "캠페인 이름은 필수입니다"


def test_get_unknown_campaign(running):
    url, _ = running
    response = CouponServiceClient(url).get_campaign(GetCampaignRequest(campaign_id="missing"))
    assert response.campaign is None
    assert response.message == "캠페인을 찾을 수 없습니다"


def test_issue_and_fetch_coupon(running):
    url, repo = running
    _active_campaign(repo)
    client = CouponServiceClient(url + "/")
    issued = client.issue_coupon(IssueCouponRequest(campaign_id="active", user_id="demo-user"))
    assert issued.success is True
    assert issued.coupon.issued_to == "demo-user"
    assert len(issued.coupon.coupon_code) == 10

    fetched = client.get_campaign(GetCampaignRequest(campaign_id="active"))
    assert fetched.message == "조회 성공"
    assert fetched.campaign.issued_quantity == 1
    assert [c.coupon_code for c in fetched.issued_coupons] == [issued.coupon.coupon_code]


def test_issue_refused_when_sold_out(running):
    url, repo = running
    _active_campaign(repo, total=1)
    client = CouponServiceClient(url)
    first = client.issue_coupon(IssueCouponRequest(campaign_id="active", user_id="a"))
    second = client.issue_coupon(IssueCouponRequest(campaign_id="active", user_id="b"))
    assert first.success is True
    assert second.success is False
    assert second.coupon is None
    assert second.message == "캠페인이 종료되었습니다"


def test_issue_for_unknown_campaign_raises_internal(running):
    url, _ = running
    with pytest.raises(ConnectError) as info:
        CouponServiceClient(url).issue_coupon(
            IssueCouponRequest(campaign_id="missing", user_id="demo-user")
        )
    assert info.value.code == "internal"


def test_unknown_path_raises_unimplemented(running):
    url, _ = running
    with pytest.raises(ConnectError) as info:
        CouponServiceClient(url + "/elsewhere").get_campaign(GetCampaignRequest(campaign_id="x"))
    assert info.value.code == "unimplemented"


def _closed_port():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_unreachable_server_raises_unavailable():
    client = CouponServiceClient(f"http://127.0.0.1:{_closed_port()}", timeout=2.0)
    with pytest.raises(ConnectError) as info:
        client.get_campaign(GetCampaignRequest(campaign_id="x"))
    assert info.value.code == "unavailable"


def test_main_demo_succeeds(running, capsys):
    url, _ = running
    code = main(["--url", url, "--start-delay", "1", "--wait", "1.5"])
    out = capsys.readouterr().out
    assert code == 0
    assert "데모 완료" in out
    assert "쿠폰 발급 완료" in out


def test_main_fails_without_server(capsys):
    code = main(["--url", f"http://127.0.0.1:{_closed_port()}", "--wait", "0"])
    out = capsys.readouterr().out
    assert code == 1
    assert "데모 켐페인 생성 실패" in out