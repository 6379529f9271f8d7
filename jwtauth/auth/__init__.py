"""Account, token and identity components of the auth service."""
