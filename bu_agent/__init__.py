"""Blockchain Universe agent."""
