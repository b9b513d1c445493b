"""HTTP blueprints: parse the request, call a service, serialize the result"""
