"""Domain constants and pure helpers (no storage access)."""
