"""Core functionality for code-health-analyzer."""
