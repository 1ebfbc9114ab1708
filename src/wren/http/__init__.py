"""HTTP primitives: Request, Response, Headers."""
