"""Card Normalizer — structured fields and canonical titles from trading-card listing titles."""

__version__ = "0.1.0"
