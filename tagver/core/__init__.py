"""tagver.core — value types, errors and configuration."""
