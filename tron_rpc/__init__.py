"""HTTP service, JSON-RPC client and address helpers for looking up TRON and Ethereum wallets."""

__version__ = "0.1.0"