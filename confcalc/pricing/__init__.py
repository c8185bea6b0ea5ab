"""Tier, price and VAT resolution for conference registration fees."""
