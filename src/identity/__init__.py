"""Identity bounded context — accounts and sessions."""
