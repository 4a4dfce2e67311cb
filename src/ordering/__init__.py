"""Ordering bounded context — shopping cart, checkout and orders."""
