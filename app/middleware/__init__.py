"""Middleware package"""
from .tenant import Principal, TenantScope, tenant_required, get_current_scope, resolve_principal
from .request_id import RequestIdMiddleware, current_request_id

__all__ = [
    'Principal',
    'TenantScope',
    'RequestIdMiddleware',
    'current_request_id',
    'tenant_required',
    'get_current_scope',
    'resolve_principal',
]
