"""CLI commands for code-health-analyzer."""
