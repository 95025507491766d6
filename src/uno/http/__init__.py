"""HTTP primitives: request, response, cookies, query strings, sessions."""
