"""Pure reconciliation logic and configuration."""
