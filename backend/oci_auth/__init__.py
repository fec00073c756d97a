"""OCI Auth backend.

Authenticates end users against Oracle Identity Cloud Service (IDCS) through
its custom SSO SDK protocol and exchanges the result for a user-scoped
OAuth2 access token and profile.

Modules:
    - config: YAML settings + secrets, environment overrides
    - logging_config: root logger and rotating file handler setup
    - auth: IDCS protocol client, login orchestrator and HTTP router
"""
