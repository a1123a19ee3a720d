"""Scrape configured sites and publish their article listings as RSS feeds."""
