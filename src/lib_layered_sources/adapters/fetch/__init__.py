"""Raw content fetchers for files and URLs."""
