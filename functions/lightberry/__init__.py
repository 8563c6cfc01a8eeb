"""
Backend package for the Lightberry Experimental Lab site.

This package provides a FastAPI application serving the public project
listing and the admin panel, with a hosted-store client that falls back
to static/local data when the store is unconfigured or unavailable.
"""
