"""Shared middleware value objects for cross-cutting concerns.

The resolved tenant context and the per-request security context are
carried through the tenant isolation pipeline and read by every bounded
context that needs to know which tenant a request belongs to.
"""
