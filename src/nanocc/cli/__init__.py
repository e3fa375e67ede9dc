"""
nanocc Command-Line Interface
=============================

- **nanocc**: compile a C file to tokens, AST, IR, assembly, object
  file or executable

The tool is a Click application; see ``nanocc --help``.
"""

__all__ = ["nanocc"]
