"""HTTP client for the CouponService RPCs, plus a small end-to-end demo command."""

from __future__ import annotations

import argparse
import json
import time
import urllib.error
import urllib.request
from typing import Any, Callable, Optional, Sequence, TypeVar

from .handler import ConnectError
from .model import (
    CreateCampaignRequest,
    CreateCampaignResponse,
    GetCampaignRequest,
    GetCampaignResponse,
    IssueCouponRequest,
    IssueCouponResponse,
)
from .server import (
    CREATE_CAMPAIGN_PROCEDURE,
    GET_CAMPAIGN_PROCEDURE,
    ISSUE_COUPON_PROCEDURE,
)

DEFAULT_BASE_URL = "http://localhost:8080"

_T = TypeVar("_T")

# Error codes inferred from the HTTP status when the body carries none.
_CODE_FOR_STATUS = {
    400: "internal",
    401: "unauthenticated",
    403: "permission_denied",
    404: "unimplemented",
    429: "unavailable",
    502: "unavailable",
    503: "unavailable",
    504: "unavailable",
}


def _error_from_http(status: int, body: bytes) -> ConnectError:
    try:
        payload = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        payload = None
    if isinstance(payload, dict) and payload.get("code"):
        return ConnectError(str(payload["code"]), str(payload.get("message", "")))
    return ConnectError(_CODE_FOR_STATUS.get(status, "unknown"), f"HTTP status {status}")


class CouponServiceClient:
    """Calls the CouponService procedures on a server at ``base_url``."""

    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def create_campaign(self, request: CreateCampaignRequest) -> CreateCampaignResponse:
        return self._call(CREATE_CAMPAIGN_PROCEDURE, request, CreateCampaignResponse.from_dict)

    def get_campaign(self, request: GetCampaignRequest) -> GetCampaignResponse:
        return self._call(GET_CAMPAIGN_PROCEDURE, request, GetCampaignResponse.from_dict)

    def issue_coupon(self, request: IssueCouponRequest) -> IssueCouponResponse:
        return self._call(ISSUE_COUPON_PROCEDURE, request, IssueCouponResponse.from_dict)

    def _call(
        self, procedure: str, request: Any, parse: Callable[[dict[str, Any]], _T]
    ) -> _T:
        data = json.dumps(request.to_dict(), ensure_ascii=False).encode("utf-8")
        http_request = urllib.request.Request(
            self.base_url + procedure,
            data=data,
            headers={"Content-Type": "application/json", "Connect-Protocol-Version": "1"},
            method="POST",
        )
        try:
            with urllib.request.urlopen(http_request, timeout=self.timeout) as reply:
                body = reply.read()
        except urllib.error.HTTPError as exc:
            raise _error_from_http(exc.code, exc.read()) from exc
        except urllib.error.URLError as exc:
            raise ConnectError("unavailable", str(exc.reason)) from exc
        except OSError as exc:
            raise ConnectError("unavailable", str(exc)) from exc

        if not body.strip():
            return parse({})
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConnectError("internal", f"unmarshal message: {exc}") from exc
        if not isinstance(payload, dict):
            raise ConnectError("internal", "response body must be a JSON object")
        return parse(payload)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Create a small campaign, wait for it to start, issue a coupon and check it."""
    parser = argparse.ArgumentParser(description="Coupon issuance demo client")
    parser.add_argument("--url", default=DEFAULT_BASE_URL)
    parser.add_argument("--start-delay", type=float, default=2.0)
    parser.add_argument("--wait", type=float, default=3.0)
    args = parser.parse_args(argv)

    client = CouponServiceClient(args.url)

    print(
        f"📋 {args.start_delay:g}초 뒤에 시작하는 테스트 캠페인 생성 중... ",
        end="",
        flush=True,
    )
    start_time = int(time.time() + args.start_delay)
    try:
        created = client.create_campaign(
            CreateCampaignRequest(name="데모 캠페인", start_time=start_time, total_quantity=3)
        )
    except ConnectError as exc:
        print(f"❌ 데모 켐페인 생성 실패: {exc}")
        return 1
    if created.campaign is None:
        print(f"❌ 데모 켐페인 생성 실패: {created.message}")
        return 1
    campaign_id = created.campaign.campaign_id
    print(f"✅ 캠페인 생성 완료 (ID: {campaign_id})")

    print("📋 캠페인 시작시간 대기 중... ", end="", flush=True)
    time.sleep(args.wait)
    print("✅ 완료")

    print("📋 쿠폰 발급 중... ", end="", flush=True)
    try:
        issued = client.issue_coupon(
            IssueCouponRequest(campaign_id=campaign_id, user_id="demo-user")
        )
    except ConnectError as exc:
        print(f"❌ 쿠폰 발급 실패: {exc}")
        return 1
    if issued.success and issued.coupon is not None:
        print(f"✅ 쿠폰 발급 완료 (쿠폰코드: {issued.coupon.coupon_code})")
    else:
        print(f"❌ 쿠폰 발급 실패: {issued.message}")

    print("📋 최종 상태 확인 중... ", end="", flush=True)
    try:
        fetched = client.get_campaign(GetCampaignRequest(campaign_id=campaign_id))
    except ConnectError as exc:
        print(f"❌ 캠페인 조회 실패: {exc}")
        return 1
    campaign = fetched.campaign
    if campaign is None:
        print(f"❌ 캠페인 조회 실패: {fetched.message}")
        return 1
    coupons = fetched.issued_coupons
    if len(coupons) != campaign.issued_quantity:
        print(
            f"❌ 발급된 쿠폰 수 불일치: 예상 {campaign.issued_quantity}, 실제 {len(coupons)}"
        )
        return 1
    print(f"✅ 완료 (발급: {campaign.issued_quantity}/{campaign.total_quantity}개)")
    print("데모 완료")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())