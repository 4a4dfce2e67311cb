"""Reviews bounded context — product ratings and comments."""
