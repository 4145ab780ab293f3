"""Shared ports, application state and the error signal."""
