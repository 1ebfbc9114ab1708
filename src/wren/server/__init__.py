"""Request pipeline internals: negotiation, error handling, WSGI sending."""
