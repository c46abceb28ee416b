"""Concurrent load test: many workers race to issue a limited number of coupons."""

from __future__ import annotations

import argparse
import queue
import threading
import time
from dataclasses import dataclass
from typing import Optional, Sequence

from .client import DEFAULT_BASE_URL, CouponServiceClient
from .handler import ConnectError
from .model import CreateCampaignRequest, GetCampaignRequest, IssueCouponRequest

ACTIVATION_WAIT = 2.0
PROGRESS_EVERY = 100


@dataclass(frozen=True)
class LoadTestResult:
    """Counts and timing of one load-test run."""

    success_count: int
    fail_count: int
    duration: float
    total_requests: int

    @property
    def requests_per_second(self) -> float:
        return self.total_requests / self.duration if self.duration > 0 else 0.0


def create_campaign(client: CouponServiceClient, limit: int) -> str:
    """Create a campaign starting in a second, wait for it and return its id."""
    print("📋 캠페인 생성 중... ", end="", flush=True)
    response = client.create_campaign(
        CreateCampaignRequest(
            name="부하테스트",
            start_time=int(time.time() + 1),
            total_quantity=limit,
        )
    )
    if response.campaign is None:
        raise RuntimeError(f"캠페인 생성 실패: {response.message}")
    campaign_id = response.campaign.campaign_id
    print(f"완료 (ID: {campaign_id})")

    print("⏳ 캠페인 활성화 대기... ", end="", flush=True)
    time.sleep(ACTIVATION_WAIT)
    print("완료")
    return campaign_id


def run_load_test(
    client: CouponServiceClient,
    campaign_id: str,
    worker_count: int,
    total_requests: int,
) -> LoadTestResult:
    """Send ``total_requests`` issue requests from ``worker_count`` threads."""
    print(f"🔥 {worker_count}개 워커로 {total_requests}개 요청 시작...")

    work: queue.SimpleQueue[int] = queue.SimpleQueue()
    for request_id in range(total_requests):
        work.put(request_id)

    counts = {"success": 0, "fail": 0}
    counts_lock = threading.Lock()

    def worker(worker_id: int) -> None:
        while True:
            try:
                request_id = work.get_nowait()
            except queue.Empty:
                return
            request = IssueCouponRequest(
                campaign_id=campaign_id, user_id=f"user-{worker_id}-{request_id}"
            )
            try:
                succeeded = client.issue_coupon(request).success
            except ConnectError:
                succeeded = False
            with counts_lock:
                counts["success" if succeeded else "fail"] += 1
                done = counts["success"] + counts["fail"]
                succeeded_so_far = counts["success"]
            if done % PROGRESS_EVERY == 0:
                print(f"   진행: {done}/{total_requests} (성공: {succeeded_so_far})")

    start = time.perf_counter()
    threads = [
        threading.Thread(target=worker, args=(worker_id,), daemon=True)
        for worker_id in range(worker_count)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    duration = time.perf_counter() - start

    result = LoadTestResult(
        success_count=counts["success"],
        fail_count=counts["fail"],
        duration=duration,
        total_requests=total_requests,
    )
    print("\n✅ 부하테스트 완료!")
    print(f"   소요시간: {duration:.3f}s")
    print(f"   성공: {result.success_count}개")
    print(f"   실패: {result.fail_count}개")
    print(f"   RPS: {result.requests_per_second:.0f}")
    return result


def check_results(client: CouponServiceClient, campaign_id: str, expected_limit: int) -> bool:
    """Print the campaign's final state; say whether its counts are consistent."""
    try:
        response = client.get_campaign(GetCampaignRequest(campaign_id=campaign_id))
    except ConnectError as exc:
        print(f"실패: {exc}")
        return False
    campaign = response.campaign
    if campaign is None:
        print(f"실패: {response.message}")
        return False

    issued = response.issued_coupons
    print("결과 확인:")
    print(f"   발급된 쿠폰: {len(issued)}개 (예상: {expected_limit}개)")
    print(f"   캠페인 상태: {campaign.status.name}")

    if campaign.issued_quantity == len(issued):
        print("✅ 데이터 일관성 확인")
        return True
    print(
        f"❌ 데이터 불일치: 캠페인의 IssuedQuantity ({campaign.issued_quantity}) "
        f"vs issuedCoupons({len(issued)})"
    )
    return False


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Coupon issuance load test")
    parser.add_argument("--url", default=DEFAULT_BASE_URL)
    parser.add_argument("--workers", type=int, default=100)
    parser.add_argument("--requests", type=int, default=1000)
    parser.add_argument("--limit", type=int, default=50)
    args = parser.parse_args(argv)

    print("🚀 쿠폰 발급 부하테스트 시작")
    print(
        f"설정: {args.workers}개 워커가 {args.requests}개 요청으로 "
        f"{args.limit}개 쿠폰 발급 시도\n"
    )

    client = CouponServiceClient(args.url)
    try:
        campaign_id = create_campaign(client, args.limit)
    except (ConnectError, RuntimeError) as exc:
        print(f"캠페인 생성 실패: {exc}")
        return 1
    run_load_test(client, campaign_id, args.workers, args.requests)
    return 0 if check_results(client, campaign_id, args.limit) else 1


if __name__ == "__main__":
    raise SystemExit(main())