"""Utilitários compartilhados do pacote ``cnpjlookup``."""

from .logging_setup import setup_logger

__all__ = ["setup_logger"]
