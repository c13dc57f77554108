"""Administrator authentication -- credential store model, schemas, and repository.

Administrators are provisioned out-of-band; the login endpoint and access
guard live in the API layer and use the primitives in core.security.
"""
