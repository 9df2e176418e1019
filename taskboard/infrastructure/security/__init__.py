"""Identity token verification."""
