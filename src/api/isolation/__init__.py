"""Isolation bounded context.

Keeps tenants that share one browser apart: per-request CORS allow-lists,
per-frontend session cookie names, and an XSRF cookie scoped to the shared
root domain so tenant frontends can read it.
"""
