[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "couponissue"
version = "0.1.0"
description = "In-memory coupon campaign server with concurrency-safe, first-come coupon issuance over a JSON RPC-style HTTP API"
requires-python = ">=3.10"
dependencies = []
keywords = ["coupon", "campaign", "rpc", "http", "server", "load-test"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
couponissue-server = "couponissue.server:main"
couponissue-client = "couponissue.client:main"
couponissue-loadtest = "couponissue.loadtest:main"

[tool.hatch.build.targets.wheel]
packages = ["couponissue"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
