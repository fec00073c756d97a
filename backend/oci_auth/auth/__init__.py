"""Authentication module (Oracle IDCS custom SSO).

Logs a user in through the IDCS SSO SDK protocol in two calls:
- begin: service token -> open SSO session -> submit credentials
- finish: service token -> complete SSO session -> JWT-bearer exchange -> profile

Services:
    - IdcsClient: one method per IDCS protocol round trip.
    - OCIAuthService: stateless begin_login / finish_login orchestrator.
"""
