# couponissue

A small coupon campaign server. You create a campaign with a start time and a
fixed number of coupons. Once the start time has passed, users can claim
coupons first come, first served, until none are left. Many requests can
arrive at once, and the server still never issues more coupons than the
campaign holds: issuing is serialised per campaign.

The package uses only the standard library.

```
pip install .
```

## Running the server

```
couponissue-server [--host HOST] [--port PORT]
```

By default the server listens on all interfaces, port 8080. It accepts JSON
`POST` requests at these paths:

| Path                                   | Purpose                                          |
|----------------------------------------|--------------------------------------------------|
| `/coupon.CouponService/CreateCampaign` | create a campaign                                |
| `/coupon.CouponService/GetCampaign`    | look up a campaign and the coupons it has issued |
| `/coupon.CouponService/IssueCoupon`    | claim one coupon from a campaign for a user      |

- Any other path gets `404`.
- A method other than `POST` on one of these paths gets `405`.
- An `OPTIONS` request to any path gets an empty `200`.
- Every response carries permissive CORS headers.
- The server logs each request when it arrives and when it completes, with the
  time it took.

Messages are JSON objects with camelCase field names, for example
`{"name": "봄맞이 할인", "startTime": 1700000000, "totalQuantity": 3}`.
Campaign status is sent as its name (`"WAITING"`, `"ACTIVE"`, ...).

When a call fails, the reply has an error status and a body of the form
`{"code": "...", "message": "..."}`:

- A body that is not a JSON object gets `400` with code `invalid_argument`.
- A failure inside the service gets `500` with code `internal`.

## Campaign lifecycle

A campaign is in one of these states:

- `WAITING`: its start time has not been reached.
- `ACTIVE`: coupons can be issued.
- `COMPLETED`: all its coupons have been issued.

The state is brought up to date whenever the campaign is read or a coupon is
requested. A waiting campaign therefore becomes active as soon as its start
time has passed. A campaign whose start time is not in the future when it is
created starts out `ACTIVE`.

### Creating a campaign

A create request needs all of the following:

- a non-empty name;
- a quantity of at least one;
- a start time in Unix seconds that is not in the past.

If a check fails, the response holds a message saying what was wrong, and no
campaign.

### Looking up a campaign

A lookup needs a campaign id. For an unknown id, the response holds a message
and no campaign.

### Issuing a coupon

An issue request needs a campaign id and a user id. A missing id is reported
in the response message.

A request is refused, with `success: false` and an explanatory message, if:

- the campaign has not started yet;
- its coupons are used up.

An issue request for a campaign id that does not exist is an `internal`
error, not a refusal.

### Coupon codes

Each coupon code is ten characters long, made of three parts:

1. A prefix from the Hangul syllables in the campaign name:
   - the first three syllables, if there are three or more;
   - both syllables, if there are two;
   - the syllable followed by `폰`, if there is one;
   - `쿠폰`, if there are none.
2. Two random Hangul syllables.
3. Random digits that fill the code out to ten characters.

A new code is checked against every code already issued. Up to 100 attempts
are made. If none of them gives an unused code, `CodeGenerationError` is
raised.

## Using the client from Python

`CouponServiceClient(base_url, timeout)` calls the three procedures. It raises
`couponissue.handler.ConnectError`, which has `code` and `message`, when the
server replies with an error or cannot be reached.

```python
import time

from couponissue.client import CouponServiceClient
from couponissue.model import (
    CreateCampaignRequest,
    GetCampaignRequest,
    IssueCouponRequest,
)

client = CouponServiceClient("http://localhost:8080", 10)

created = client.create_campaign(
    CreateCampaignRequest(
        name="봄맞이 할인",
        start_time=int(time.time()) + 2,
        total_quantity=3,
    )
)
campaign_id = created.campaign.campaign_id

time.sleep(3)

issued = client.issue_coupon(
    IssueCouponRequest(campaign_id=campaign_id, user_id="demo-user")
)
print(issued.coupon.coupon_code if issued.success else issued.message)

state = client.get_campaign(GetCampaignRequest(campaign_id=campaign_id))
print(state.campaign.issued_quantity, len(state.issued_coupons))
```

## Demo and load test

Both commands need a running server.

### Demo

```
couponissue-client [--url URL] [--start-delay SECONDS] [--wait SECONDS]
```

The demo does the following:

1. Creates a three-coupon campaign that starts `--start-delay` seconds later
   (default 2).
2. Waits `--wait` seconds (default 3).
3. Issues one coupon.
4. Checks that the campaign's issued count matches the coupons on record.

### Load test

```
couponissue-loadtest [--url URL] [--workers N] [--requests N] [--limit N]
```

The load test does the following:

1. Creates a campaign with `--limit` coupons (default 50).
2. Waits for the campaign to start.
3. Sends `--requests` issue requests (default 1000) from `--workers`
   concurrent threads (default 100).
4. Reports the time taken, the successes and failures, and the requests per
   second.
5. Checks that the number of recorded coupons equals the campaign's issued
   count.

Both commands exit with status 0 on success and 1 otherwise.

## Using the pieces directly

- `couponissue.model`: the data classes.
  - `Campaign`, which holds the issuing rules (`can_issue_coupon`,
    `issue_coupon`, `update_status_if_needed`).
  - `Coupon`.
  - `CampaignStatus`.
  - The request and response messages, each with `to_dict` and `from_dict`.
- `couponissue.validation`: the request checks, which return
  `ValidationResult`.
- `couponissue.codegen`: `CouponCodeGenerator`.
- `couponissue.repository`: thread-safe in-memory stores.
  - `MemoryCampaignRepository` holds campaigns.
  - `MemoryCouponRepository` holds coupons. Its `issue_coupon` raises
    `CouponIssueRejected` with the reason when a coupon may not be issued.
- `couponissue.service`: `CouponService`, the business operations.
- `couponissue.handler`: `CouponServiceHandler`, which turns service failures
  into `ConnectError`.
- `couponissue.server`:
  - `build_app()` wires everything into a `CouponServiceApp`.
  - `CouponServiceApp.dispatch(method, path, body)` handles one request
    without a network and returns an `HttpResponse`.
  - `create_server(app, host, port)` returns a threaded HTTP server for the
    app, which you then start.

## What it does not do

- All data lives in memory. Stopping the server discards every campaign and
  coupon.
- The API speaks JSON over HTTP/1.1 only. It has no binary message encoding,
  no gRPC and no HTTP/2.
- It has no authentication.