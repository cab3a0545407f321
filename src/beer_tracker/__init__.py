"""Beer consumption tracker backend."""
