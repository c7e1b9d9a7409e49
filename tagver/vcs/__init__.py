"""tagver.vcs — read-only access to the host git repository."""
