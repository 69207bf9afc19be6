"""Interfaces de linha de comando."""
