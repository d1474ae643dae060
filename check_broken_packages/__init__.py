"""Find locally built pacman packages broken by library or Python upgrades."""

__version__ = "0.1.0"
