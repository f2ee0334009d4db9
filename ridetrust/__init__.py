"""RideTrust - reputation and moderation backend for ride sharing."""

__version__ = "1.0.0"
