"""Storefront catalog service."""
