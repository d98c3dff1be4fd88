"""
CODEWRIGHT — an LLM coding agent built around a tag parser
and two patch engines (strict unified diff + similarity).
"""

from codewright.identity import __codename__, __tagline__, __version__

__all__ = ["__codename__", "__tagline__", "__version__"]
