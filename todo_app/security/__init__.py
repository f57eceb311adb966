"""
Security primitives: password hashing, JWT issuance/validation and
per-client rate limiting.
"""
