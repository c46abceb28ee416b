"""In-memory coupon campaign server, client and load test with first-come coupon issuance."""

__version__ = "0.1.0"