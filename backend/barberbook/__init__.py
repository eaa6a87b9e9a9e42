"""barberbook - appointment scheduling backend for barbershops."""

__version__ = "0.1.0"
