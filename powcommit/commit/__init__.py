from .assembler import create_commit

__all__ = ["create_commit"]
