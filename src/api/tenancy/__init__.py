"""Tenancy bounded context.

Resolves which tenant (environment) a request belongs to and decorates
JSON responses with that tenant's identity and branding.
"""
