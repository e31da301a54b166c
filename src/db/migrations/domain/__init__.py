"""Domain layer for migrations: definitions, placeholders and translations."""
