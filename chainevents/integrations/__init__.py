"""Optional storage engine integrations."""
