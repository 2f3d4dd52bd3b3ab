"""Command implementations behind the servicelog CLI."""
