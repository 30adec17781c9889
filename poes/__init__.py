"""Parallel online examination system: exam server, exam client and score backup."""

__version__ = "0.1.0"
__all__ = ["protocol", "backup", "server", "client"]