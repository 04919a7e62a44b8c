"""HTTP API for the wallet desk."""
