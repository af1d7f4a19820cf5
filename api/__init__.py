"""HTTP dispatcher for sitemaps."""
