"""Catalogue bounded context — products and prices."""
