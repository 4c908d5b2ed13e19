"""Command-line interface for code-health-analyzer."""
