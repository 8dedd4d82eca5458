"""D&D campaign companion API."""
