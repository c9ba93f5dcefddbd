"""Type mapping, identifier sanitization and schema model construction."""
