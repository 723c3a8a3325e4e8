"""EcoVoice: carbon footprint tracking with a voice command shortcut."""

__version__ = "0.1.0"
