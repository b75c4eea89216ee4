"""
Review-order engine.

Splits a unified diff into per-file chunks and lets an LLM, driven through a
tool-calling loop, arrange them from foundational to mechanical changes.
"""

__version__ = "0.1.0"
