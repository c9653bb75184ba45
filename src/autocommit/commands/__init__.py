"""CLI command implementations registered by autocommit.main."""
