"""CLI sub-command groups for reqclient."""
