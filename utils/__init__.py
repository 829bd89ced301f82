# Shared helpers for the storefront API
