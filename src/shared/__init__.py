"""Shared kernel: configuration, storage, errors and logging."""
