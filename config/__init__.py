"""Top-level package for Django configuration.

Settings modules for the different environments plus the URL root and
the WSGI and ASGI entry points.
"""
