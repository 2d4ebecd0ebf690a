"""User accounts and public profiles."""
