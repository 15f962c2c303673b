"""Authentication core: password hashing, tokens, sessions and the auth flows."""
