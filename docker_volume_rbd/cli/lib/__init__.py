"""Helpers shared by the CLI and the plugin services."""
