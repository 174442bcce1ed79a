"""tailor-ai: drive AI command-line backends and validate what they return."""

__version__ = "0.1.0"
