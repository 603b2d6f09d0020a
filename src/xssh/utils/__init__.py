"""Configuration and display helpers for xssh."""
