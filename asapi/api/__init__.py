"""Flask integration for the authorization client."""
