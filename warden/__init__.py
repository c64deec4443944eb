"""Warden community crime-reporting API."""
