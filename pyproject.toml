[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tron_rpc"
version = "0.1.0"
description = "Small HTTP service that reports TRON and Ethereum wallet balances, payers and beneficiaries over JSON-RPC"
requires-python = ">=3.10"
keywords = ["tron", "ethereum", "json-rpc", "wallet", "base58", "http"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
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
dependencies = [
    "requests",
    "python-dotenv",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[project.scripts]
tron-rpc = "tron_rpc.server:main"

[tool.hatch.build.targets.wheel]
packages = ["tron_rpc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
