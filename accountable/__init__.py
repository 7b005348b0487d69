"""Accountable India civic intelligence backend.

Grounded generative queries (Gemini with a Serper + DeepSeek fallback) and the
civic intelligence features built on top of them.
"""

__version__ = "0.1.0"
