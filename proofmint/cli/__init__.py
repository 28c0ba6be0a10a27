"""proofmint command-line interface (`proofmint --help`)."""

from .main import app

__all__ = ["app"]
