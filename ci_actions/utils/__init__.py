"""Shared helpers for action inputs, external processes and archives."""
