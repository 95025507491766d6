"""Top-level error handling and the WSGI surface."""
