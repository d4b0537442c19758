"""Runtime: server specifications and the two-server supervisor."""
