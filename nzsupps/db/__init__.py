"""Database engine, sessions and the persistence sink."""
