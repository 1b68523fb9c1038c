"""provisionoor - DVT key-share provisioning for liquid staking validators."""

__version__ = "0.1.0"
