"""
Business-rule services

Every function takes the caller's TenantScope first and runs inside the
Flask application context. Errors are raised as app.errors.ServiceError
subclasses.
"""
