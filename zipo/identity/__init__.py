"""Identity: registration, login and password reset."""
