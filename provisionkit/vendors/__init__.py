"""Vendor boundary: CLI wrappers and the boto3 client factory."""
